"""Management command to bulk-import books from an Excel sheet.

The sheet must provide the columns::

    title, genre, author

``genre`` and ``author`` may be blank; missing genres and authors are
created on the fly. Rows without a title, and rows whose title and
author already exist, are skipped with a warning.
"""

from pathlib import Path

from auditlog.context import set_actor
from booklist.models import Author, Book, Genre
from booklist.utils import notify
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from pandas import read_excel

User = get_user_model()

REQUIRED_COLUMNS = ("title", "genre", "author") #: Columns expected in the sheet.


def _cell(row, column):
    """Return a stripped string for ``row[column]``; blank for NaN/missing."""
    value = row.get(column)
    if value is None:
        return ""
    text = str(value).strip()
    return "" if text.lower() == "nan" else text


class Command(BaseCommand):
    """Import ``Book`` rows (with genre and author) from an Excel file."""
    help = "Import books from an .xlsx file with title, genre and author columns."

    def add_arguments(self, parser):
        parser.add_argument("excel_file", type=str)
        parser.add_argument(
            "--user",
            type=str,
            help="Username of the user performing this action (for audit logging).",
        )

    def handle(self, *args, **options):
        """Execute the import.

        Parameters
        ----------
        *args
            Positional arguments passed by Django.
        **options
            A dict-like object with keys expected by this command:

            - ``excel_file`` (str): path to the Excel file
            - ``user`` (str, optional): username to set as the audit actor
        """
        username = options.get("user")
        user = User.objects.filter(username=username).first() if username else None
        request = getattr(self, "request", None)

        excel_file = Path(options["excel_file"])
        if not excel_file.exists():
            notify(request, self, f"File not found: {excel_file}", "error")
            return

        df = read_excel(excel_file, dtype=str, keep_default_na=False)
        missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
        if missing:
            notify(request, self, f"Missing columns: {', '.join(missing)}", "error")
            return

        imported = 0
        for idx, row in df.iterrows():
            row_num = idx + 2
            title = _cell(row, "title")
            genre_name = _cell(row, "genre")
            author_name = _cell(row, "author")

            if not title:
                notify(request, self, f"Row {row_num}: title missing, skipping", "warning")
                continue

            existing = Book.objects.filter(title__iexact=title)
            if author_name:
                existing = existing.filter(author__name__iexact=author_name)
            else:
                existing = existing.filter(author__isnull=True)
            if existing.exists():
                notify(request, self, f"Row {row_num}: '{title}' already exists, skipping", "warning")
                continue

            with transaction.atomic(), set_actor(user):
                genre = Genre.objects.get_or_create(name=genre_name)[0] if genre_name else None
                author = Author.objects.get_or_create(name=author_name)[0] if author_name else None
                Book.objects.create(title=title, genre=genre, author=author)

            imported += 1
            notify(request, self, f"Row {row_num}: Imported book '{title}'", "success")

        notify(request, self, f"Imported {imported} book(s).", "success")
