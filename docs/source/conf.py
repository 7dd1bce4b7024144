"""Sphinx configuration for the Book List code documentation.

Build with ``sphinx-build -b html docs/source docs/build`` from the
project root after installing the ``docs`` extra.
"""
import os
import sys
from pathlib import Path

from sphinx.errors import ConfigError

PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(PROJECT_ROOT))
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "librarysite.settings")

try:
    import django
    django.setup()
except ImportError as exc:
    raise ConfigError(f"Django is required to document the booklist app: {exc}")

project = "Book List"
author = "Book List developers"
copyright = f"2026, {author}"
version = release = "1.0"

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
    "sphinx.ext.intersphinx",
    "sphinx.ext.viewcode",
    "sphinx_autodoc_typehints",
]

exclude_patterns = ["_build"]
html_theme = "sphinx_rtd_theme"

# The booklist docstrings use the NumPy section layout.
napoleon_google_docstring = False
napoleon_numpy_docstring = True
napoleon_use_rtype = False

autodoc_member_order = "bysource"
autodoc_default_options = {
    "members": True,
    "undoc-members": False,
    "show-inheritance": True,
    "exclude-members": "DoesNotExist, MultipleObjectsReturned",
}

intersphinx_mapping = {
    "python": ("https://docs.python.org/3", None),
    "django": ("https://docs.djangoproject.com/en/stable/", "https://docs.djangoproject.com/en/stable/_objects/"),
}

# Types named in booklist docstrings that no inventory resolves.
nitpicky = True
nitpick_ignore = [
    ("py:class", "django.http.HttpRequest"),
    ("py:class", "django.http.HttpResponse"),
    ("py:class", "django.http.QueryDict"),
    ("py:class", "django.contrib.auth.models.User"),
    ("py:class", "django.db.models.query.QuerySet"),
    ("py:class", "django.core.management.base.BaseCommand"),
    ("py:class", "auditlog.models.LogEntry"),
    ("py:class", "BookFilterForm"),
    ("py:class", "BookListComponent"),
    ("py:class", "LibraryService"),
    ("py:class", "Book"),
    ("py:class", "Iterable"),
    ("py:class", "Optional[str]"),
]
