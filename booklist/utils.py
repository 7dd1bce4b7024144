"""Utility helpers for row serialization, wording and messaging.
"""

from django.contrib import messages

TOAST_VARIANTS = ('success', 'info', 'warning', 'error') #: Message levels accepted by :func:`notify`.


def book_row(book):
    """Flatten a :class:`booklist.models.Book` into a table row.

    Parameters
    ----------
    book : booklist.models.Book
        A book instance, ideally loaded with ``select_related`` on
        ``author`` and ``genre``.

    Returns
    -------
    dict
        Mapping with ``id``, ``title``, ``genre`` and ``author_name``.
        ``author_name`` falls back to ``"N/A"`` for books without author.
    """
    return {
        "id": book.pk,
        "title": book.title,
        "genre": book.genre.name if book.genre_id else "",
        "author_name": book.author_name,
    }


def books_phrase(count, singular="book", plural="books"):
    """Return ``"<count> <noun>"`` choosing the singular noun for one.

    Parameters
    ----------
    count : int
        Number of books.
    singular : str
        Noun used when ``count`` is exactly one.
    plural : str
        Noun used otherwise.

    Returns
    -------
    str
        For example ``"1 book"`` or ``"3 books deleted"``.
    """
    return f"{count} {singular if count == 1 else plural}"


def parse_ids(values):
    """Convert an iterable of raw id values to a list of ints.

    Duplicates are dropped while the original order is kept.

    Raises
    ------
    ValueError
        When a value cannot be read as a positive integer.
    """
    ids = []
    for value in values:
        pk = int(str(value).strip())
        if pk <= 0:
            raise ValueError(f"Invalid book id: {value!r}")
        if pk not in ids:
            ids.append(pk)
    return ids


def notify(request=None, command=None, msg="", level="info"):
    """Display a message via Django messages or a management command.

    The helper centralizes how messages are emitted so callers can be
    ignorant of the current execution context (web request vs. manage
    command). When ``request`` is provided the Django messages API is
    used; when ``command`` is provided the management command's style
    helpers are used; otherwise the message prints to stdout.

    Parameters
    ----------
    request : Optional[django.http.HttpRequest]
        Optional request object; when provided the message is added to
        the request using Django's messages framework.
    command : Optional[django.core.management.BaseCommand]
        Optional management command instance; when provided the message
        is written to the command's stdout using the styled helper.
    msg : str
        The message text to display.
    level : str
        One of ``'info'``, ``'success'``, ``'warning'`` or ``'error'``.
    """
    if level not in TOAST_VARIANTS:
        level = "info"
    if request is not None:
        level_fn = getattr(messages, level, messages.info)
        level_fn(request, msg)
    elif command is not None:
        style_fn = getattr(command.style, level.upper(), command.style.SUCCESS)
        command.stdout.write(style_fn(msg))
    else:
        print(msg)
