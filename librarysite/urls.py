"""Root URL configuration for the librarysite project."""

from django.contrib import admin
from django.urls import include, path
from django.views.generic import RedirectView

urlpatterns = [
    path("admin/", admin.site.urls),
    path("", include("booklist.urls")),
    path("", RedirectView.as_view(pattern_name="booklist:book-list", permanent=False)),
]
