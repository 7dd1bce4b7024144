"""Tests for the booklist application.

The suite covers the models, the query/delete service, the list
component, the web views, the admin registrations and the management
commands. Each test class focuses on one layer and every test carries
a short docstring describing the behaviour it checks.

Note
----
These are Django TestCase-based tests and rely on the test database
provided by Django's test runner (or ``pytest-django``).
"""

import json
from io import StringIO
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import patch

from auditlog.models import LogEntry
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group, Permission
from django.core.exceptions import PermissionDenied
from django.core.management import call_command
from django.db import IntegrityError, OperationalError
from django.test import TestCase, override_settings
from django.urls import reverse
from pandas import DataFrame

from .components import BookListComponent
from .forms import MAX_FILTER_LENGTH, BookFilterForm
from .models import Author, Book, Genre
from .services import LibraryService, LibraryServiceError

User = get_user_model()


def make_library():
    """Create a small set of books shared by several test classes."""
    fiction = Genre.objects.create(name="Fiction")
    poetry = Genre.objects.create(name="Poetry")
    tolstoy = Author.objects.create(name="Leo Tolstoy")
    austen = Author.objects.create(name="Jane Austen")
    return {
        "war": Book.objects.create(title="War and Peace", genre=fiction, author=tolstoy),
        "anna": Book.objects.create(title="Anna Karenina", genre=fiction, author=tolstoy),
        "pride": Book.objects.create(title="Pride and Prejudice", genre=fiction, author=austen),
        "orphan": Book.objects.create(title="Anonymous Verses", genre=poetry),
    }


def messages_of(response):
    """Return the text of every message rendered in ``response``."""
    return [str(m) for m in response.context["messages"]]


class FailingService:
    """Service double whose every call fails."""

    def get_books(self, title_filter="", author_filter=""):
        raise LibraryServiceError("backend unavailable")

    def delete_books(self, book_ids):
        raise LibraryServiceError("insufficient access")


class ModelTests(TestCase):
    """Unit tests for :class:`Book`, :class:`Author` and :class:`Genre`."""

    def test_author_name_falls_back_to_placeholder(self):
        """A book without author reports ``N/A`` as its author name."""
        book = Book.objects.create(title="Lonely")
        self.assertEqual(book.author_name, "N/A")

    def test_author_name_and_str(self):
        """__str__ returns the title and author_name the related name."""
        author = Author.objects.create(name="Ion Creanga")
        book = Book.objects.create(title="Amintiri", author=author)
        self.assertEqual(str(book), "Amintiri")
        self.assertEqual(book.author_name, "Ion Creanga")

    def test_deleting_author_keeps_books(self):
        """Removing an author leaves its books in place without an author."""
        author = Author.objects.create(name="Gone")
        book = Book.objects.create(title="Orphaned", author=author)
        author.delete()
        book.refresh_from_db()
        self.assertIsNone(book.author)


class LibraryServiceTests(TestCase):
    """Tests for :class:`LibraryService` reads, deletes and updates."""

    def setUp(self):
        self.books = make_library()
        self.service = LibraryService()

    def test_get_books_returns_flat_rows_ordered_by_title(self):
        """Rows carry id, title, genre and author_name, sorted by title."""
        rows = self.service.get_books()
        self.assertEqual(
            [r["title"] for r in rows],
            ["Anna Karenina", "Anonymous Verses", "Pride and Prejudice", "War and Peace"],
        )
        orphan = rows[1]
        self.assertEqual(
            orphan,
            {"id": self.books["orphan"].pk, "title": "Anonymous Verses", "genre": "Poetry", "author_name": "N/A"},
        )

    def test_title_filter_is_case_insensitive_substring(self):
        """The title filter matches substrings regardless of case."""
        rows = self.service.get_books(title_filter="  AND ")
        self.assertEqual([r["title"] for r in rows], ["Pride and Prejudice", "War and Peace"])

    def test_author_filter(self):
        """The author filter matches the related author's name."""
        rows = self.service.get_books(author_filter="tolst")
        self.assertEqual([r["title"] for r in rows], ["Anna Karenina", "War and Peace"])

    def test_filters_combine(self):
        """Both filters must match for a row to be returned."""
        rows = self.service.get_books(title_filter="war", author_filter="austen")
        self.assertEqual(rows, [])

    @override_settings(BOOKLIST_MAX_ROWS=2)
    def test_rows_are_capped(self):
        """No more than ``BOOKLIST_MAX_ROWS`` rows are returned."""
        self.assertEqual(len(self.service.get_books()), 2)

    def test_delete_books_ignores_unknown_ids(self):
        """Known ids are deleted, unknown ones ignored, and the count returned."""
        deleted = self.service.delete_books([self.books["war"].pk, str(self.books["anna"].pk), 99999])
        self.assertEqual(deleted, 2)
        self.assertFalse(Book.objects.filter(title__in=["War and Peace", "Anna Karenina"]).exists())
        self.assertEqual(Book.objects.count(), 2)

    def test_delete_books_requires_ids(self):
        """An empty id list is rejected."""
        with self.assertRaises(LibraryServiceError):
            self.service.delete_books([])

    def test_delete_books_rejects_malformed_ids(self):
        """Non-numeric ids raise a service error and delete nothing."""
        with self.assertRaises(LibraryServiceError) as ctx:
            self.service.delete_books([self.books["war"].pk, "abc"])
        self.assertIn("Invalid book id", ctx.exception.message)
        self.assertEqual(Book.objects.count(), 4)

    def test_permissions_are_enforced_for_users(self):
        """A user without model permissions can neither read nor delete."""
        user = User.objects.create_user("reader", password="pw")
        service = LibraryService(user)
        with self.assertRaises(PermissionDenied):
            service.get_books()
        with self.assertRaises(PermissionDenied):
            service.delete_books([self.books["war"].pk])

    def test_delete_is_audited_with_actor(self):
        """Deleting through the service records an audit entry for the user."""
        user = User.objects.create_superuser("boss", "boss@example.com", "pw")
        LibraryService(user).delete_books([self.books["pride"].pk])
        entry = LogEntry.objects.filter(action=LogEntry.Action.DELETE, object_repr="Pride and Prejudice").first()
        self.assertIsNotNone(entry)
        self.assertEqual(entry.actor, user)

    def test_update_book(self):
        """update_book applies the given values and saves the book."""
        book = self.books["orphan"]
        author = Author.objects.get(name="Jane Austen")
        self.service.update_book(book, {"title": "Verses", "author": author})
        book.refresh_from_db()
        self.assertEqual(book.title, "Verses")
        self.assertEqual(book.author, author)


class BookListComponentTests(TestCase):
    """Tests for :class:`BookListComponent` state transitions."""

    def setUp(self):
        self.books = make_library()
        self.component = BookListComponent(service=LibraryService())
        self.component.refresh()

    def test_refresh_loads_rows(self):
        """refresh loads every book and get_book_data returns them."""
        self.assertEqual(len(self.component.get_book_data()), 4)

    def test_refresh_failure_empties_list(self):
        """A failed read empties the list and shows an error toast."""
        component = BookListComponent(service=FailingService())
        component.books = [{"id": 1}]
        self.assertEqual(component.refresh(), [])
        self.assertEqual(component.toasts, [("Error", "Failed to load the list of books.", "error")])

    def test_delete_button_disabled_until_selection(self):
        """The delete button is disabled while nothing is selected."""
        self.assertTrue(self.component.is_delete_button_disabled)
        self.component.handle_row_selection(self.component.books[:1])
        self.assertFalse(self.component.is_delete_button_disabled)

    def test_row_selection_accepts_rows_and_ids(self):
        """Selection is the list of ids of the selected rows."""
        rows = self.component.books
        selected = self.component.handle_row_selection([rows[0], str(rows[1]["id"])])
        self.assertEqual(selected, [rows[0]["id"], rows[1]["id"]])

    def test_filter_change_requeries(self):
        """Changing a known filter updates it and reloads the rows."""
        rows = self.component.handle_filter_change("titleFilter", "anna")
        self.assertEqual([r["title"] for r in rows], ["Anna Karenina"])
        rows = self.component.handle_filter_change("author_filter", "austen")
        self.assertEqual(rows, [])
        self.assertEqual(self.component.author_filter, "austen")

    def test_unknown_filter_is_ignored(self):
        """An unknown filter name changes nothing."""
        self.component.handle_filter_change("genreFilter", "x")
        self.assertEqual(len(self.component.books), 4)
        self.assertEqual((self.component.title_filter, self.component.author_filter), ("", ""))

    def test_delete_selected_without_selection(self):
        """Deleting with no selection only shows an info toast."""
        self.assertIsNone(self.component.handle_delete_selected_books(confirmed=True))
        self.assertEqual(self.component.toasts, [("Info", "Please select books to delete first.", "info")])
        self.assertEqual(Book.objects.count(), 4)

    def test_delete_selected_asks_for_confirmation(self):
        """Without confirmation the question is returned and nothing is deleted."""
        self.component.handle_row_selection([self.books["war"].pk])
        question = self.component.handle_delete_selected_books()
        self.assertEqual(question, "Are you sure you want to delete 1 book?")
        self.component.handle_row_selection([self.books["war"].pk, self.books["anna"].pk])
        self.assertEqual(
            self.component.handle_delete_selected_books(),
            "Are you sure you want to delete 2 books?",
        )
        self.assertEqual(Book.objects.count(), 4)

    def test_delete_selected_confirmed(self):
        """A confirmed delete removes the books, clears selection and refreshes."""
        self.component.handle_row_selection([self.books["war"].pk, self.books["anna"].pk])
        self.component.handle_delete_selected_books(confirmed=True)
        self.assertEqual(self.component.toasts, [("Success", "2 books deleted.", "success")])
        self.assertEqual(self.component.selected_book_ids, [])
        self.assertEqual(len(self.component.books), 2)

    def test_delete_single_selected_wording(self):
        """Deleting one selected book uses the singular wording."""
        self.component.handle_row_selection([self.books["war"].pk])
        self.component.handle_delete_selected_books(confirmed=True)
        self.assertEqual(self.component.toasts[-1], ("Success", "1 book deleted.", "success"))

    def test_delete_selected_failure_keeps_selection(self):
        """A failed delete shows the service message and keeps the selection."""
        component = BookListComponent(service=FailingService())
        component.handle_row_selection([self.books["war"].pk])
        component.handle_delete_selected_books(confirmed=True)
        self.assertEqual(component.toasts, [("Error while deleting.", "insufficient access", "error")])
        self.assertEqual(component.selected_book_ids, [self.books["war"].pk])

    def test_row_action_edit_opens_modal(self):
        """The edit row action opens the modal for that book."""
        row = self.component.find_row(self.books["pride"].pk)
        self.component.handle_row_action("edit", row)
        self.assertTrue(self.component.is_edit_modal_open)
        self.assertEqual(self.component.current_book_id, self.books["pride"].pk)

    def test_row_action_delete(self):
        """The delete row action asks first, then deletes that one book."""
        row = self.component.find_row(self.books["pride"].pk)
        question = self.component.handle_row_action("delete", row)
        self.assertEqual(question, 'Are you sure you want to delete the book "Pride and Prejudice"?')
        self.assertTrue(Book.objects.filter(pk=row["id"]).exists())

        self.component.handle_row_action("delete", row, confirmed=True)
        self.assertFalse(Book.objects.filter(pk=row["id"]).exists())
        self.assertEqual(self.component.toasts, [("Success", 'Book "Pride and Prejudice" deleted.', "success")])
        self.assertIsNone(self.component.find_row(row["id"]))

    def test_unknown_row_action_is_ignored(self):
        """Unknown row actions do nothing."""
        row = self.component.books[0]
        self.assertIsNone(self.component.handle_row_action("archive", row, confirmed=True))
        self.assertEqual(Book.objects.count(), 4)
        self.assertFalse(self.component.is_edit_modal_open)

    def test_edit_success_closes_modal_and_refreshes(self):
        """handle_edit_success toasts, closes the modal and reloads rows."""
        self.component.open_edit_modal(self.books["war"].pk)
        Book.objects.filter(pk=self.books["war"].pk).update(title="Voina i mir")
        self.component.handle_edit_success()
        self.assertFalse(self.component.is_edit_modal_open)
        self.assertEqual(self.component.toasts, [("Success", "Book updated", "success")])
        self.assertIsNotNone(next((r for r in self.component.books if r["title"] == "Voina i mir"), None))

    def test_close_edit_modal(self):
        """close_edit_modal hides the modal."""
        self.component.open_edit_modal(self.books["war"].pk)
        self.component.close_edit_modal()
        self.assertFalse(self.component.is_edit_modal_open)


class BookListViewTests(TestCase):
    """Tests for the book list page, the edit endpoint and the export."""

    def setUp(self):
        self.books = make_library()
        self.user = User.objects.create_superuser("admin", "admin@example.com", "pw")
        self.client.force_login(self.user)
        self.url = reverse("booklist:book-list")

    def test_login_required(self):
        """Anonymous users are redirected to the login page."""
        self.client.logout()
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, 302)
        self.assertIn("/admin/login/", response["Location"])

    def test_user_without_permission_is_forbidden(self):
        """A logged-in user without view permission gets a 403."""
        self.client.force_login(User.objects.create_user("nobody", password="pw"))
        self.assertEqual(self.client.get(self.url).status_code, 403)

    def test_librarian_group_can_view(self):
        """Members of the librarian group see the list."""
        call_command("init_roles", stdout=StringIO())
        librarian = User.objects.create_user("lib", password="pw")
        librarian.groups.add(Group.objects.get(name="librarian"))
        self.client.force_login(librarian)
        self.assertEqual(self.client.get(self.url).status_code, 200)

    def test_list_renders_rows(self):
        """The list shows every book with N/A for missing authors."""
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "War and Peace")
        self.assertContains(response, "N/A")
        self.assertContains(response, "Delete Selected")
        self.assertTrue(response.context["component"].is_delete_button_disabled)

    def test_list_applies_filters(self):
        """GET filters narrow the rows."""
        response = self.client.get(self.url, {"title_filter": "pride", "author_filter": "jane"})
        self.assertEqual([r["title"] for r in response.context["books"]], ["Pride and Prejudice"])

    def test_edit_parameter_opens_modal(self):
        """``?edit=<id>`` renders the edit modal for that book."""
        response = self.client.get(self.url, {"edit": self.books["anna"].pk})
        self.assertTrue(response.context["component"].is_edit_modal_open)
        self.assertContains(response, "Edit Book")
        self.assertContains(response, 'value="Anna Karenina"')

    def test_edit_parameter_unknown_book(self):
        """An unknown or malformed edit id returns 404."""
        self.assertEqual(self.client.get(self.url, {"edit": 99999}).status_code, 404)
        self.assertEqual(self.client.get(self.url, {"edit": "x"}).status_code, 404)

    def test_delete_selected_renders_confirmation(self):
        """An unconfirmed bulk delete renders the confirmation page."""
        ids = [self.books["war"].pk, self.books["anna"].pk]
        response = self.client.post(self.url, {"action": "delete_selected", "selected_book_ids": ids})
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "Are you sure you want to delete 2 books?")
        self.assertEqual(Book.objects.count(), 4)

    def test_delete_selected_confirmed(self):
        """A confirmed bulk delete removes the books and redirects with filters."""
        ids = [self.books["war"].pk, self.books["anna"].pk]
        response = self.client.post(
            self.url,
            {"action": "delete_selected", "selected_book_ids": ids, "confirm": "yes", "title_filter": "a"},
            follow=True,
        )
        self.assertEqual(response.redirect_chain[-1][0], f"{self.url}?title_filter=a")
        self.assertEqual(Book.objects.count(), 2)
        self.assertIn("Success: 2 books deleted.", messages_of(response))

    def test_delete_selected_without_selection(self):
        """Posting a bulk delete with no ids shows the info message."""
        response = self.client.post(self.url, {"action": "delete_selected", "confirm": "yes"}, follow=True)
        self.assertIn("Info: Please select books to delete first.", messages_of(response))

    def test_delete_selected_with_bad_ids(self):
        """Malformed ids are rejected with a 400."""
        response = self.client.post(self.url, {"action": "delete_selected", "selected_book_ids": ["x"]})
        self.assertEqual(response.status_code, 400)

    def test_delete_row(self):
        """The row delete asks for confirmation, then deletes the book."""
        pk = self.books["pride"].pk
        response = self.client.post(self.url, {"action": "delete_row", "book_id": pk})
        self.assertContains(response, "Are you sure you want to delete the book &quot;Pride and Prejudice&quot;?")

        response = self.client.post(self.url, {"action": "delete_row", "book_id": pk, "confirm": "yes"}, follow=True)
        self.assertFalse(Book.objects.filter(pk=pk).exists())
        self.assertIn('Success: Book "Pride and Prejudice" deleted.', messages_of(response))

    def test_delete_row_unknown_book(self):
        """Deleting a missing row returns 404."""
        response = self.client.post(self.url, {"action": "delete_row", "book_id": 99999, "confirm": "yes"})
        self.assertEqual(response.status_code, 404)

    def test_unknown_action(self):
        """An unknown action is a bad request."""
        self.assertEqual(self.client.post(self.url, {"action": "archive"}).status_code, 400)

    def test_edit_get_redirects_to_modal(self):
        """GET on the edit URL opens the list with the modal."""
        book = self.books["war"]
        response = self.client.get(reverse("booklist:book-edit", args=[book.pk]))
        self.assertRedirects(response, f"{self.url}?edit={book.pk}")

    def test_edit_success(self):
        """A valid edit saves the book and returns to the refreshed list."""
        book = self.books["orphan"]
        author = Author.objects.get(name="Jane Austen")
        response = self.client.post(
            reverse("booklist:book-edit", args=[book.pk]),
            {"title": "Collected Verses", "genre": book.genre_id, "author": author.pk},
            follow=True,
        )
        book.refresh_from_db()
        self.assertEqual(book.title, "Collected Verses")
        self.assertEqual(book.author, author)
        self.assertIn("Success: Book updated", messages_of(response))
        self.assertFalse(response.context["component"].is_edit_modal_open)

    def test_edit_invalid_keeps_modal_open(self):
        """An invalid edit re-renders the list with the modal and errors."""
        book = self.books["war"]
        response = self.client.post(reverse("booklist:book-edit", args=[book.pk]), {"title": "   "})
        self.assertEqual(response.status_code, 400)
        self.assertTrue(response.context["component"].is_edit_modal_open)
        self.assertTrue(response.context["edit_form"].errors)
        book.refresh_from_db()
        self.assertEqual(book.title, "War and Peace")

    def test_book_data_json(self):
        """The data endpoint returns the filtered rows as JSON."""
        response = self.client.get(reverse("booklist:book-data"), {"author_filter": "tolstoy"})
        payload = json.loads(response.content)
        self.assertEqual([r["title"] for r in payload["books"]], ["Anna Karenina", "War and Peace"])
        self.assertEqual(payload["books"][0]["author_name"], "Leo Tolstoy")

    def test_book_data_csv(self):
        """``format=csv`` returns a CSV attachment with a header row."""
        response = self.client.get(reverse("booklist:book-data"), {"format": "csv", "title_filter": "verses"})
        self.assertEqual(response["Content-Disposition"], 'attachment; filename="books.csv"')
        lines = response.content.decode("utf-8-sig").strip().splitlines()
        self.assertEqual(lines[0], "Book Title,Genre,Author")
        self.assertEqual(lines[1], "Anonymous Verses,Poetry,N/A")


class DatabaseFailureTests(TestCase):
    """Failure paths of the real service when the database errors out."""

    def setUp(self):
        self.books = make_library()
        self.component = BookListComponent(service=LibraryService())

    def test_get_books_wraps_database_error(self):
        """A failing read query surfaces as a LibraryServiceError."""
        with patch.object(Book.objects, "select_related", side_effect=OperationalError("database is locked")):
            with self.assertRaises(LibraryServiceError) as ctx:
                LibraryService().get_books()
        self.assertEqual(ctx.exception.message, "Failed to load books.")

    def test_refresh_database_error_empties_list(self):
        """A database error on refresh drops stale rows and shows the load toast."""
        self.component.books = [{"id": 1, "title": "stale"}]
        with patch.object(Book.objects, "select_related", side_effect=OperationalError("database is locked")):
            rows = self.component.refresh()
        self.assertEqual(rows, [])
        self.assertEqual(self.component.books, [])
        self.assertEqual(self.component.load_error, "Failed to load books.")
        self.assertEqual(self.component.toasts, [("Error", "Failed to load the list of books.", "error")])

    def test_refresh_success_clears_load_error(self):
        """A successful refresh after a failure clears the stored error."""
        with patch.object(Book.objects, "select_related", side_effect=OperationalError("database is locked")):
            self.component.refresh()
        self.component.refresh()
        self.assertIsNone(self.component.load_error)
        self.assertEqual(len(self.component.books), 4)

    def test_delete_selected_database_error(self):
        """A database error on bulk delete toasts and keeps the selection."""
        ids = [self.books["war"].pk, self.books["anna"].pk]
        self.component.handle_row_selection(ids)
        with patch.object(Book.objects, "filter", side_effect=OperationalError("database is locked")):
            self.component.handle_delete_selected_books(confirmed=True)
        self.assertEqual(
            self.component.toasts,
            [("Error while deleting.", "Unable to delete books: database is locked", "error")],
        )
        self.assertEqual(self.component.selected_book_ids, ids)
        self.assertEqual(Book.objects.count(), 4)

    def test_row_delete_database_error(self):
        """A database error on a row delete toasts and deletes nothing."""
        row = {"id": self.books["pride"].pk, "title": "Pride and Prejudice"}
        with patch.object(Book.objects, "filter", side_effect=OperationalError("disk I/O error")):
            self.component.handle_row_action("delete", row, confirmed=True)
        self.assertEqual(
            self.component.toasts,
            [("Error while deleting.", "Unable to delete books: disk I/O error", "error")],
        )
        self.assertTrue(Book.objects.filter(pk=row["id"]).exists())

    def test_delete_without_permission_becomes_toast(self):
        """A user who may view but not delete gets the delete error toast."""
        user = User.objects.create_user("viewer", password="pw")
        user.user_permissions.add(Permission.objects.get(codename="view_book"))
        user = User.objects.get(pk=user.pk)
        component = BookListComponent(service=LibraryService(user))
        component.refresh()
        component.handle_row_selection([self.books["war"].pk])
        component.handle_delete_selected_books(confirmed=True)
        self.assertEqual(
            component.toasts,
            [("Error while deleting.", "You do not have permission to delete books.", "error")],
        )
        self.assertEqual(Book.objects.count(), 4)

    def test_update_book_wraps_database_error(self):
        """A failing save during an edit surfaces as a LibraryServiceError."""
        book = self.books["war"]
        with patch.object(Book, "save", side_effect=IntegrityError("NOT NULL constraint failed")):
            with self.assertRaises(LibraryServiceError) as ctx:
                LibraryService().update_book(book, {"title": "Peace"})
        self.assertEqual(ctx.exception.message, "Unable to save the book: NOT NULL constraint failed")
        book.refresh_from_db()
        self.assertEqual(book.title, "War and Peace")

    def test_list_page_renders_load_error(self):
        """The list page still renders and shows the load failure."""
        user = User.objects.create_superuser("admin", "admin@example.com", "pw")
        self.client.force_login(user)
        with patch.object(Book.objects, "select_related", side_effect=OperationalError("database is locked")):
            response = self.client.get(reverse("booklist:book-list"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context["books"], [])
        self.assertContains(response, "Failed to load the list of books. (Failed to load books.)")
        self.assertIn("Error: Failed to load the list of books.", messages_of(response))


class BookFilterFormTests(TestCase):
    """Tests for :class:`BookFilterForm`."""

    def test_long_filter_is_truncated_and_other_filter_kept(self):
        """An over-long title is cut down without discarding the author filter."""
        form = BookFilterForm({"title_filter": "a" * 400, "author_filter": "tolstoy"})
        title_filter, author_filter = form.filters()
        self.assertEqual(title_filter, "a" * MAX_FILTER_LENGTH)
        self.assertEqual(author_filter, "tolstoy")

    def test_long_filter_on_list_page(self):
        """The list page keeps a valid author filter next to an over-long title."""
        make_library()
        self.client.force_login(User.objects.create_superuser("admin", "admin@example.com", "pw"))
        response = self.client.get(
            reverse("booklist:book-list"),
            {"title_filter": "a" * 400, "author_filter": "tolstoy"},
        )
        component = response.context["component"]
        self.assertEqual(component.title_filter, "a" * MAX_FILTER_LENGTH)
        self.assertEqual(component.author_filter, "tolstoy")
        self.assertEqual(response.context["books"], [])


class AdminTests(TestCase):
    """Smoke tests for the admin registrations."""

    def setUp(self):
        self.books = make_library()
        self.user = User.objects.create_superuser("admin", "admin@example.com", "pw")
        self.client.force_login(self.user)

    def test_book_changelist_with_page_size(self):
        """The book changelist renders and honours ``list_per_page``."""
        response = self.client.get(reverse("admin:booklist_book_changelist"), {"list_per_page": 20})
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "War and Peace")

    def test_book_changelist_search_by_author(self):
        """Admin search matches author names."""
        response = self.client.get(reverse("admin:booklist_book_changelist"), {"q": "austen"})
        self.assertContains(response, "Pride and Prejudice")
        self.assertNotContains(response, "War and Peace")

    def test_export_as_json_action(self):
        """The JSON export action returns the selected books."""
        response = self.client.post(
            reverse("admin:booklist_book_changelist"),
            {"action": "export_as_json", "_selected_action": [self.books["war"].pk]},
        )
        data = json.loads(response.content)
        self.assertEqual(len(data), 1)
        self.assertEqual(data[0]["title"], "War and Peace")
        self.assertEqual(data[0]["author"], "Leo Tolstoy")


class CommandTests(TestCase):
    """Tests for the management commands."""

    def test_init_genres_is_idempotent(self):
        """Running init_genres twice creates each genre once."""
        call_command("init_genres", stdout=StringIO())
        count = Genre.objects.count()
        call_command("init_genres", stdout=StringIO())
        self.assertEqual(Genre.objects.count(), count)
        self.assertTrue(Genre.objects.filter(name="Fantasy").exists())

    def test_init_roles_assigns_permissions(self):
        """The librarian group gets the delete_book permission."""
        call_command("init_roles", stdout=StringIO())
        librarian = Group.objects.get(name="librarian")
        perm = Permission.objects.get(codename="delete_book")
        self.assertIn(perm, librarian.permissions.all())
        self.assertTrue(Group.objects.filter(name="auditor").exists())

    def test_import_books(self):
        """Rows are imported, missing titles and duplicates skipped."""
        Book.objects.create(title="Emma", author=Author.objects.create(name="Jane Austen"))
        frame = DataFrame([
            {"title": "Dune", "genre": "Science Fiction", "author": "Frank Herbert"},
            {"title": "", "genre": "Fiction", "author": "Nobody"},
            {"title": "emma", "genre": "Fiction", "author": "jane austen"},
            {"title": "Beowulf", "genre": "", "author": ""},
        ])
        out = StringIO()
        with TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "books.xlsx"
            frame.to_excel(path, index=False)
            call_command("import_books", str(path), stdout=out)

        self.assertEqual(Book.objects.count(), 3)
        dune = Book.objects.get(title="Dune")
        self.assertEqual(dune.author_name, "Frank Herbert")
        self.assertEqual(dune.genre.name, "Science Fiction")
        self.assertEqual(Book.objects.get(title="Beowulf").author_name, "N/A")
        self.assertIn("title missing", out.getvalue())
        self.assertIn("already exists", out.getvalue())

    def test_import_books_missing_file(self):
        """A missing file is reported and nothing is imported."""
        out = StringIO()
        call_command("import_books", "/nonexistent/books.xlsx", stdout=out)
        self.assertIn("File not found", out.getvalue())
        self.assertEqual(Book.objects.count(), 0)
