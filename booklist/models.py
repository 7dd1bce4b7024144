"""Database models for the booklist application.

This module defines the records managed by the book list:
- ``Genre`` -- book genre
- ``Author`` -- book author
- ``Book`` -- main book record
"""

from auditlog.registry import auditlog
from django.db import models


class Genre(models.Model):
    """A book genre/category."""
    name = models.CharField(max_length=100, unique=True) #: Name of the genre (unique).

    class Meta:
        """Model metadata for :class:`Genre`."""
        ordering = ['name'] #: Default ordering for querysets (by genre name).

    def __str__(self):
        """Return the genre name.

        Returns
        -------
        str
            The genre's human readable name.
        """
        return f"{self.name}"


auditlog.register(Genre)


class Author(models.Model):
    """An author of books in the library."""
    name = models.CharField(max_length=200, unique=True) #: Full name of the author (unique).

    class Meta:
        """Model metadata for :class:`Author`."""
        ordering = ['name'] #: Default ordering used when querying authors in the admin.

    def __str__(self):
        return f"{self.name}"


auditlog.register(Author)


class Book(models.Model):
    """Represents a book record shown in the book list."""
    title = models.CharField(max_length=300) #: Title of the book.
    genre = models.ForeignKey(
        Genre,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='books',
    ) #: Genre foreign key; a genre still in use cannot be deleted.
    author = models.ForeignKey(
        Author,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='books',
    ) #: Author foreign key; removing the author leaves the book without one.

    NO_AUTHOR = "N/A" #: Placeholder displayed when a book has no author.

    @property
    def author_name(self):
        """Return the author's name or the ``N/A`` placeholder.

        Returns
        -------
        str
            Name of the related author, ``"N/A"`` when there is none.
        """
        return self.author.name if self.author_id else self.NO_AUTHOR

    def __str__(self):
        return f"{self.title}"

    class Meta:
        """Model metadata for :class:`Book`."""
        ordering = ['title'] #: Default ordering for books (by title).


auditlog.register(Book)
