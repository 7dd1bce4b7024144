"""Management command to initialize user groups and permissions.

This module provides a Django management command that creates the
predefined user groups (librarian, auditor) and assigns model-level
permissions to each. It is designed to be run once during initial
setup or whenever group configurations need to be refreshed.
"""

from auditlog.models import LogEntry
from booklist.models import Author, Book, Genre
from django.contrib.auth.models import Group, Permission
from django.contrib.contenttypes.models import ContentType
from django.core.management.base import BaseCommand

GROUPS = {
    'librarian': {
        'desc': 'Manage books and their lookup data',
        'models': {
            Genre: ['view', 'add', 'change', 'delete'],
            Author: ['view', 'add', 'change', 'delete'],
            Book: ['view', 'add', 'change', 'delete'],
        }
    },
    'auditor': {
        'desc': 'Read-only access (view) permissions to AuditLog entries.',
        'models': {
            LogEntry: ['view'],
        }
    },
} #: Group name -> description and per-model permission actions.


class Command(BaseCommand):
    """Initialize predefined user groups with fine-grained permissions.

    This command creates two groups:

    - **librarian**: CRUD permissions on Book, Author and Genre, which is
      what the book list page needs to view, edit and delete books.
    - **auditor**: read-only access to audit log entries (LogEntry).
    """
    help = "Create the librarian and auditor groups."

    def handle(self, *args, **options):
        for name, cfg in GROUPS.items():
            group, created = Group.objects.get_or_create(name=name)
            self.stdout.write(
                self.style.SUCCESS(f'Group created: {name}') if created else f'The {name} group already exists.'
            )

            perms = []
            for model, perm_list in cfg['models'].items():
                ct = ContentType.objects.get_for_model(model)
                for p in perm_list:
                    codename = f'{p}_{model._meta.model_name}'
                    try:
                        perms.append(Permission.objects.get(content_type=ct, codename=codename))
                    except Permission.DoesNotExist:
                        self.stdout.write(self.style.WARNING(f'Missing permission: {codename}'))

            group.permissions.set(perms)
            self.stdout.write(self.style.SUCCESS(f'Updated permissions for: {name}'))

        self.stdout.write(self.style.SUCCESS('Role initialization complete.'))
