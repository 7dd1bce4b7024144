"""Server-side state of the book list component.

:class:`BookListComponent` holds what the book list page shows: the two
text filters, the fetched rows, the current selection and whether the
edit modal is open. Views build one per request, feed it the user's
input and render its state. Every mutation is followed by a full
re-fetch through :class:`booklist.services.LibraryService`.
"""

import logging

from django.core.exceptions import PermissionDenied

from .services import LibraryService, LibraryServiceError
from .utils import books_phrase, notify, parse_ids

logger = logging.getLogger(__name__)

ROW_ACTIONS = (
    {"label": "Edit", "name": "edit"},
    {"label": "Delete", "name": "delete"},
) #: Per-row actions offered in the table.

COLUMNS = (
    {"label": "Book Title", "field_name": "title", "type": "text"},
    {"label": "Genre", "field_name": "genre", "type": "text"},
    {"label": "Author", "field_name": "author_name", "type": "text"},
    {"type": "action", "row_actions": ROW_ACTIONS},
) #: Column definitions rendered by the table template.

FILTER_NAMES = {
    "titleFilter": "title_filter",
    "title_filter": "title_filter",
    "authorFilter": "author_filter",
    "author_filter": "author_filter",
} #: Accepted filter input names mapped to component attributes.


class BookListComponent:
    """Filterable, selectable list of books with delete and edit actions.

    Parameters
    ----------
    request : Optional[django.http.HttpRequest]
        Used to deliver toasts through the messages framework and to
        pick the acting user when ``service`` is not given.
    service : Optional[LibraryService]
        Query/delete backend. Defaults to a service for
        ``request.user``.
    title_filter, author_filter : str
        Initial filter values.
    """

    columns = COLUMNS

    def __init__(self, request=None, service=None, title_filter="", author_filter=""):
        self.request = request
        if service is None:
            user = getattr(request, "user", None)
            service = LibraryService(user if user is not None and user.is_authenticated else None)
        self.service = service
        self.title_filter = title_filter or ""
        self.author_filter = author_filter or ""
        self.books = []
        self.selected_book_ids = []
        self.is_edit_modal_open = False
        self.current_book_id = None
        self.load_error = None
        self.toasts = []

    # -- data ------------------------------------------------------------

    def refresh(self):
        """Re-run the read query with the current filters.

        On failure the list is emptied and an error toast is shown.

        Returns
        -------
        list[dict]
            The freshly loaded rows.
        """
        try:
            self.books = self.service.get_books(self.title_filter, self.author_filter)
            self.load_error = None
        except LibraryServiceError as e:
            logger.error("Loading books failed: %s", e.message)
            self.load_error = e.message
            self.books = []
            self.show_toast("Error", "Failed to load the list of books.", "error")
        return self.books

    def get_book_data(self):
        """Return the rows currently held by the component."""
        return list(self.books)

    @property
    def is_delete_button_disabled(self):
        """True while no book is selected."""
        return len(self.selected_book_ids) == 0

    def find_row(self, book_id):
        """Return the loaded row with ``book_id`` or ``None``."""
        for row in self.books:
            if row["id"] == book_id:
                return row
        return None

    # -- input handlers --------------------------------------------------

    def handle_row_selection(self, selected_rows):
        """Replace the selection with the ids of ``selected_rows``.

        Rows may be row mappings (with an ``id`` key) or bare ids.
        """
        raw = [row["id"] if isinstance(row, dict) else row for row in selected_rows]
        self.selected_book_ids = parse_ids(raw)
        return self.selected_book_ids

    def handle_filter_change(self, name, value):
        """Update the filter called ``name`` and re-query.

        Unknown filter names are ignored and do not trigger a reload.
        """
        attr = FILTER_NAMES.get(name)
        if attr is None:
            return self.books
        setattr(self, attr, value or "")
        return self.refresh()

    def handle_delete_selected_books(self, confirmed=False):
        """Delete every selected book.

        Parameters
        ----------
        confirmed : bool
            Whether the user already answered the confirmation prompt.

        Returns
        -------
        Optional[str]
            The confirmation question when ``confirmed`` is false and a
            selection exists, otherwise ``None``.
        """
        if not self.selected_book_ids:
            self.show_toast("Info", "Please select books to delete first.", "info")
            return None

        book_count = len(self.selected_book_ids)
        if not confirmed:
            return f"Are you sure you want to delete {books_phrase(book_count)}?"

        if not self._delete(self.selected_book_ids):
            return None

        self.show_toast(
            "Success",
            f"{books_phrase(book_count, 'book deleted', 'books deleted')}.",
            "success",
        )
        self.selected_book_ids = []
        self.refresh()
        return None

    def handle_row_action(self, action_name, row, confirmed=False):
        """Run a per-row ``edit`` or ``delete`` action.

        Parameters
        ----------
        action_name : str
            ``"edit"`` or ``"delete"``; anything else is ignored.
        row : dict
            The row the action was triggered on (``id`` and ``title``).
        confirmed : bool
            Whether the delete confirmation was already given.

        Returns
        -------
        Optional[str]
            The confirmation question for an unconfirmed delete.
        """
        if action_name == "edit":
            self.open_edit_modal(row["id"])
        elif action_name == "delete":
            if not confirmed:
                return f'Are you sure you want to delete the book "{row["title"]}"?'
            if not self._delete([row["id"]]):
                return None
            self.show_toast("Success", f'Book "{row["title"]}" deleted.', "success")
            self.refresh()
        return None

    def _delete(self, book_ids):
        """Delete ``book_ids``; on failure toast the reason and return False."""
        try:
            self.service.delete_books(book_ids)
        except LibraryServiceError as e:
            self.show_toast("Error while deleting.", e.message, "error")
            return False
        except PermissionDenied as e:
            self.show_toast("Error while deleting.", str(e), "error")
            return False
        return True

    # -- edit modal ------------------------------------------------------

    def open_edit_modal(self, book_id):
        self.current_book_id = book_id
        self.is_edit_modal_open = True

    def close_edit_modal(self):
        self.is_edit_modal_open = False

    def handle_edit_success(self):
        """Announce the saved edit, close the modal and reload the list."""
        self.show_toast("Success", "Book updated", "success")
        self.close_edit_modal()
        return self.refresh()

    # -- utils -----------------------------------------------------------

    def show_toast(self, title, message, variant):
        """Show ``title: message`` with the given variant."""
        self.toasts.append((title, message, variant))
        if self.request is None:
            logger.info("%s: %s", title, message)
            return
        notify(self.request, msg=f"{title}: {message}", level=variant)
