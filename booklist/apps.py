"""Django application configuration for the ``booklist`` app.

This module exposes the :class:`BooklistConfig` AppConfig used to
register application metadata with Django.
"""

from django.apps import AppConfig


class BooklistConfig(AppConfig):
    """Application configuration for the ``booklist`` Django app. """
    default_auto_field = 'django.db.models.BigAutoField' #: The default type for automatically generated primary key fields.
    name = 'booklist' #: The Python path to the application package. Django uses this to look up the module.
    verbose_name = 'Book List' #: Label shown in the admin index.
