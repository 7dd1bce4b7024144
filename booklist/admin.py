"""Admin customizations for the booklist application.

This module contains Django ``ModelAdmin`` subclasses and the admin
helper mixins shared by them. The mixins centralize common behaviour
(audit actor on save/delete, selectable page size, JSON export) and the
model admins register ``Book``, ``Author``, ``Genre`` and the audit log
entries with the admin site.
"""

###########################
#     Stadard Imports     #
###########################
from datetime import datetime
from json import dumps, loads

###########################
#    3rd Party Imports    #
###########################
from auditlog.context import set_actor
from auditlog.models import LogEntry
from django.contrib import admin
from django.db.models import Count, ForeignKey
from django.http import HttpResponse
from django_admin_listfilter_dropdown.filters import RelatedDropdownFilter

###########################
#       Local Imports     #
###########################
from .models import Author, Book, Genre


###########################
#     Helper Classes      #
###########################
class AdminSave(admin.ModelAdmin):
    """Helper mixin to centralize save behaviour for admin models.

    This mixin sets the audit actor when saving from the admin so audit
    logs correctly attribute the change to the current user.
    """

    def save_model(self, request, obj, form, change):
        """Save the model instance with audit actor set.

        Parameters
        ----------
        request : django.http.HttpRequest
            The active HTTP request.
        obj : django.db.models.Model
            The model instance being saved.
        form : django.forms.Form
            The admin form used to validate the instance.
        change : bool
            True if updating an existing object, False for creation.
        """
        with set_actor(request.user):
            super().save_model(request, obj, form, change)


class AdminDelete(admin.ModelAdmin):
    """Helper mixin that ensures audit actor is set when deleting models."""

    def delete_model(self, request, obj):
        with set_actor(request.user):
            super().delete_model(request, obj)

    def delete_queryset(self, request, queryset):
        """Delete a queryset of objects with audit actor set.

        Parameters
        ----------
        request : django.http.HttpRequest
            The current request.
        queryset : django.db.models.query.QuerySet
            The queryset of objects to delete.
        """
        with set_actor(request.user):
            super().delete_queryset(request, queryset)


class AdminPagination(admin.ModelAdmin):
    """Mixin adding a page-size selector to the changelist."""
    change_list_template = "admin/admin_pagination_changelist.html" #: Template rendering the page-size selector.
    list_per_page = 10 #: Default page size for the changelist (can be overridden via GET).
    list_per_page_options = [10, 20, 50] #: Allowed page-size options presented to the user.

    def changelist_view(self, request, extra_context=None):
        """Read an optional ``list_per_page`` GET parameter and render the changelist.

        Values outside :attr:`list_per_page_options` are ignored.

        Parameters
        ----------
        request : django.http.HttpRequest
            The current request object.
        extra_context : dict
            Additional context to include in the template.

        Returns
        -------
        django.http.HttpResponse
            The response returned by the parent ``changelist_view``.
        """
        request.GET = request.GET.copy()
        try:
            page_param = int(request.GET.pop("list_per_page", [self.list_per_page])[0])
            if page_param in self.list_per_page_options:
                self.list_per_page = page_param
        except (ValueError, TypeError):
            pass

        extra_context = extra_context or {}
        extra_context["list_per_page_options"] = self.list_per_page_options
        extra_context["current_per_page"] = self.list_per_page
        return super().changelist_view(request, extra_context=extra_context)


class AdminWriteJSON(admin.ModelAdmin):
    """Mixin to add a JSON export action to admin classes."""

    filename: str | None = None #: Default filename for the exported JSON file.
    actions = ['export_as_json'] #: Admin actions exposed by this mixin.

    def __init__(self, model, admin_site):
        super().__init__(model, admin_site)

        opts = model._meta
        excluded = self.exclude or []
        self.model_name = opts.model_name
        self.model_fields = [f for f in opts.get_fields() if not (f.many_to_many or f.one_to_many) and f.name not in excluded]

        if self.filename is None:
            self.filename = f"{self.model_name}.json"

    @admin.action(description="Export selected items as JSON")
    def export_as_json(self, request, queryset):
        """Admin action: export the selected objects as a JSON file.

        Parameters
        ----------
        request : django.http.HttpRequest
            The current request.
        queryset : django.db.models.query.QuerySet
            The selected objects to export.

        Returns
        -------
        django.http.HttpResponse
            A response containing the JSON representation and an
            appropriate Content-Disposition header for download.
        """
        data = []
        for obj in queryset:
            obj_data = {}
            for field in self.model_fields:
                value = getattr(obj, field.name)

                if isinstance(field, ForeignKey):
                    value = str(value) if value else None
                elif isinstance(value, datetime):
                    value = value.strftime("%Y-%m-%d %H:%M:%S")

                obj_data[field.name] = value
            data.append(obj_data)

        response = HttpResponse(
            dumps(data, indent=4, ensure_ascii=False, default=str),
            content_type="application/json"
        )
        response["Content-Disposition"] = f'attachment; filename="{self.filename}"'
        return response


############################
#       Genre Class        #
############################
@admin.register(Genre)
class GenreAdmin(AdminPagination, AdminSave, AdminDelete):
    """Admin for the :class:`booklist.models.Genre` lookup model."""
    list_display = ('name', 'book_count') #: Fields shown in the changelist.
    search_fields = ('name',) #: Fields used for search.

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(_book_count=Count('books'))

    def book_count(self, obj):
        return obj._book_count
    book_count.admin_order_field = '_book_count'
    book_count.short_description = "Books"


############################
#      Author Class        #
############################
@admin.register(Author)
class AuthorAdmin(AdminPagination, AdminSave, AdminDelete):
    """Admin for the :class:`booklist.models.Author` model."""
    list_display = ('name',) #: Columns shown in the changelist.
    search_fields = ('name',) #: Fields used for search in the changelist.


############################
#        Book Class        #
############################
@admin.register(Book)
class BookAdmin(AdminPagination, AdminWriteJSON, AdminSave, AdminDelete):
    """Admin for the :class:`booklist.models.Book` model."""
    list_display = ('title', 'genre', 'author_name') #: Columns shown in the changelist.
    list_select_related = ('author', 'genre') #: Relations joined when loading the changelist.
    search_fields = ('title', 'author__name') #: Title and author are searchable like the list filters.
    list_filter = (
        ('genre', RelatedDropdownFilter),
        ('author', RelatedDropdownFilter),
    ) #: Filters displayed in the changelist.
    autocomplete_fields = ('author', 'genre') #: Fields that use autocomplete widgets.
    actions = ['export_as_json'] #: Export action in addition to Django's delete_selected.

    def author_name(self, obj):
        """Return the author's name or ``N/A`` for display.

        Parameters
        ----------
        obj : Book
            The Book instance.

        Returns
        -------
        str
            Author name or the ``N/A`` placeholder.
        """
        return obj.author_name
    author_name.admin_order_field = 'author__name'
    author_name.short_description = "Author"


############################
#      AuditLog Class      #
############################
admin.site.unregister(LogEntry)
@admin.register(LogEntry)
class LogEntryAdmin(AdminWriteJSON):
    """Admin for audit log entries with helper formatters."""
    list_display = ("formatted_timestamp", "actor", "action", "object_repr", "changes_formatted") #: Standard Django admin option for list display and filtering.
    list_filter = ("action", "actor") #: Standard Django admin option for list display and filtering.
    search_fields = ("object_repr", "actor__username") #: Standard Django admin option for list display and filtering.
    exclude = [
        'object_pk',
        'serialized_data',
        'changes_text',
        'cid',
        'remote_addr',
        'remote_port',
        'additional_data',
        'actor_email',
    ] #: Standard Django admin option for list display and filtering.

    def changes_formatted(self, obj):
        """Format the stored change payload as ``field: old → new`` pairs.

        Parameters
        ----------
        obj : auditlog.models.LogEntry
            The audit log entry instance.

        Returns
        -------
        str
            A human readable description of the changes or ``"-"`` when no
            meaningful data is present.
        """
        if not obj.changes:
            return "-"

        changes = obj.changes
        if isinstance(changes, str):
            try:
                changes = loads(changes)
            except ValueError:
                return changes

        formatted = []
        for field_name, values in changes.items():
            if isinstance(values, list) and len(values) == 2:
                old_val, new_val = values
                formatted.append(f"{field_name}: {old_val} → {new_val}")
            else:
                formatted.append(f"{field_name}: {values}")

        return "; ".join(formatted) if formatted else "-"

    changes_formatted.short_description = "Changes"

    def formatted_timestamp(self, obj):
        return obj.timestamp.strftime("%Y-%m-%d %H:%M:%S")
    formatted_timestamp.admin_order_field = "timestamp"
    formatted_timestamp.short_description = "Timestamp"
