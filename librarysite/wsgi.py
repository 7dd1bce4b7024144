"""WSGI config for the librarysite project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "librarysite.settings")

application = get_wsgi_application()
