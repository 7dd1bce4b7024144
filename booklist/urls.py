"""URL configuration for the :mod:`booklist` app.

This module exposes the book list page, the edit modal endpoint and
the data export used by the list.
"""

from django.urls import path
from . import views

app_name = "booklist"

urlpatterns = [
        path('books/', views.book_list_view, name='book-list'),
        path('books/data/', views.book_data_view, name='book-data'),
        path('books/<int:book_id>/edit/', views.book_edit_view, name='book-edit'),
]
