"""Query and delete service backing the book list.

The service is the only place that touches the ORM on behalf of the
list component: it runs the filtered read, deletes books by id and
saves edits. Writes are attributed to the acting user through
``auditlog``'s actor context.
"""

import logging

from auditlog.context import set_actor
from django.conf import settings
from django.core.exceptions import PermissionDenied
from django.db import DatabaseError, transaction

from .models import Book
from .utils import book_row, parse_ids

logger = logging.getLogger(__name__)

DEFAULT_MAX_ROWS = 200 #: Row cap used when ``BOOKLIST_MAX_ROWS`` is not configured.


class LibraryServiceError(Exception):
    """Raised when the service cannot complete a read or a write.

    The ``message`` attribute holds a text suitable for showing to the
    user in a toast.
    """

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class LibraryService:
    """Read, delete and update books for a given user.

    Parameters
    ----------
    user : Optional[django.contrib.auth.models.User]
        The acting user. When given, model permissions are enforced and
        the user is recorded as the audit actor. ``None`` skips the
        permission checks (management commands, tests).
    """

    def __init__(self, user=None):
        self.user = user

    @property
    def max_rows(self):
        return getattr(settings, "BOOKLIST_MAX_ROWS", DEFAULT_MAX_ROWS)

    def _check_perm(self, action):
        """Raise ``PermissionDenied`` unless the user may ``action`` books."""
        if self.user is None:
            return
        codename = f"booklist.{action}_book"
        if not self.user.has_perm(codename):
            logger.warning("User %s lacks permission %s", self.user, codename)
            raise PermissionDenied(f"You do not have permission to {action} books.")

    def get_books(self, title_filter="", author_filter=""):
        """Return book rows matching both filters.

        Parameters
        ----------
        title_filter : str
            Case-insensitive substring matched against the title. Blank
            values are ignored.
        author_filter : str
            Case-insensitive substring matched against the author name.
            Blank values are ignored.

        Returns
        -------
        list[dict]
            Rows as produced by :func:`booklist.utils.book_row`, ordered
            by title and capped at ``BOOKLIST_MAX_ROWS``.

        Raises
        ------
        LibraryServiceError
            When the database query fails.
        """
        self._check_perm("view")

        title_filter = (title_filter or "").strip()
        author_filter = (author_filter or "").strip()

        try:
            books = Book.objects.select_related('author', 'genre').order_by('title', 'id')
            if title_filter:
                books = books.filter(title__icontains=title_filter)
            if author_filter:
                books = books.filter(author__name__icontains=author_filter)
            rows = [book_row(book) for book in books[:self.max_rows]]
        except DatabaseError as e:
            logger.exception("Loading books failed")
            raise LibraryServiceError("Failed to load books.") from e

        logger.debug(
            "get_books(title=%r, author=%r) returned %d rows",
            title_filter, author_filter, len(rows),
        )
        return rows

    def delete_books(self, book_ids):
        """Delete the books with the given ids.

        Ids that do not match any book are ignored.

        Parameters
        ----------
        book_ids : Iterable
            Primary keys (ints or numeric strings) of the books to delete.

        Returns
        -------
        int
            Number of books actually deleted.

        Raises
        ------
        LibraryServiceError
            When no ids are supplied, an id is malformed or the database
            refuses the delete.
        """
        self._check_perm("delete")

        try:
            ids = parse_ids(book_ids or [])
        except (TypeError, ValueError) as e:
            raise LibraryServiceError(f"Invalid book id list: {e}") from e
        if not ids:
            raise LibraryServiceError("No books were specified for deletion.")

        try:
            with transaction.atomic(), set_actor(self.user):
                deleted, per_model = Book.objects.filter(pk__in=ids).delete()
        except DatabaseError as e:
            logger.exception("Deleting books %s failed", ids)
            raise LibraryServiceError(f"Unable to delete books: {e}") from e

        count = per_model.get(Book._meta.label, 0)
        logger.info("User %s deleted %d of %d requested books", self.user, count, len(ids))
        return count

    def update_book(self, book, data):
        """Apply ``data`` to ``book`` and save it.

        Parameters
        ----------
        book : booklist.models.Book
            The instance being edited.
        data : dict
            Cleaned values keyed by field name (``title``, ``genre``,
            ``author``).

        Returns
        -------
        booklist.models.Book
            The saved instance.
        """
        self._check_perm("change")

        for field, value in data.items():
            setattr(book, field, value)
        try:
            with set_actor(self.user):
                book.save()
        except DatabaseError as e:
            logger.exception("Saving book %s failed", book.pk)
            raise LibraryServiceError(f"Unable to save the book: {e}") from e

        logger.info("User %s updated book %s", self.user, book.pk)
        return book
