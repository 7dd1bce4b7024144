"""Views for the book list page, its edit modal and data export.

These function-based views are thin: they build a
:class:`booklist.components.BookListComponent` from the request, feed
it the user's input and render its state with the templates under
``booklist/``. Mutations follow post/redirect/get so the list is always
re-fetched after a delete or an edit.
"""

from csv import writer
from urllib.parse import urlencode

from django.contrib.auth.decorators import login_required
from django.http import Http404, HttpResponse, HttpResponseBadRequest, JsonResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.urls import reverse
from django.views.decorators.http import require_GET, require_http_methods

from .components import BookListComponent
from .forms import BookEditForm, BookFilterForm
from .models import Book
from .services import LibraryServiceError
from .utils import book_row


def _build_component(request, data):
    """Create a component with the filters found in ``data``.

    Parameters
    ----------
    request : django.http.HttpRequest
        The current request.
    data : django.http.QueryDict
        ``request.GET`` or ``request.POST``.

    Returns
    -------
    tuple[BookListComponent, BookFilterForm]
        The component and the bound filter form.
    """
    filter_form = BookFilterForm(data)
    title_filter, author_filter = filter_form.filters()
    component = BookListComponent(request, title_filter=title_filter, author_filter=author_filter)
    return component, filter_form


def _list_url(component, **extra):
    """Return the list URL carrying the component's filters."""
    params = {}
    if component.title_filter:
        params["title_filter"] = component.title_filter
    if component.author_filter:
        params["author_filter"] = component.author_filter
    params.update(extra)
    url = reverse("booklist:book-list")
    return f"{url}?{urlencode(params)}" if params else url


def _parse_book_id(value):
    """Return ``value`` as a book id or raise ``Http404``."""
    try:
        return int(value)
    except (TypeError, ValueError):
        raise Http404("Book not found")


def _render_list(request, component, filter_form, edit_form=None, status=200):
    context = {
        "component": component,
        "columns": component.columns,
        "books": component.books,
        "filter_form": filter_form,
        "edit_form": edit_form,
        "list_url": _list_url(component),
        "title_filter": component.title_filter,
        "author_filter": component.author_filter,
    }
    return render(request, "booklist/book_list.html", context, status=status)


@login_required
@require_http_methods(["GET", "POST"])
def book_list_view(request):
    """Render the book list or run a delete action posted from it.

    GET parameters
    --------------
    - ``title_filter`` / ``author_filter``: the two text filters.
    - ``edit``: id of a book whose edit modal should be open.

    POST parameters
    ---------------
    - ``action``: ``delete_selected`` or ``delete_row``.
    - ``selected_book_ids``: ids checked in the table (bulk delete).
    - ``book_id``: id of the row being deleted (row delete).
    - ``confirm``: ``yes`` once the user confirmed the delete.

    Parameters
    ----------
    request : django.http.HttpRequest
        The incoming request.

    Returns
    -------
    django.http.HttpResponse
        The rendered list, a confirmation page or a redirect back to
        the list.
    """
    if request.method == "POST":
        return _handle_delete_post(request)

    component, filter_form = _build_component(request, request.GET)
    component.refresh()

    edit_form = None
    edit_id = request.GET.get("edit")
    if edit_id:
        book = get_object_or_404(Book, pk=_parse_book_id(edit_id))
        component.open_edit_modal(book.pk)
        edit_form = BookEditForm(instance=book)

    return _render_list(request, component, filter_form, edit_form)


def _handle_delete_post(request):
    """Handle the ``delete_selected`` and ``delete_row`` actions."""
    component, _ = _build_component(request, request.POST)
    action = request.POST.get("action")
    confirmed = request.POST.get("confirm") == "yes"

    if action == "delete_selected":
        try:
            component.handle_row_selection(request.POST.getlist("selected_book_ids"))
        except ValueError:
            return HttpResponseBadRequest("Invalid book selection.")
        question = component.handle_delete_selected_books(confirmed=confirmed)
        row = None
    elif action == "delete_row":
        book = get_object_or_404(
            Book.objects.select_related("author", "genre"),
            pk=_parse_book_id(request.POST.get("book_id")),
        )
        row = book_row(book)
        question = component.handle_row_action("delete", row, confirmed=confirmed)
    else:
        return HttpResponseBadRequest("Unknown action.")

    if question:
        context = {
            "question": question,
            "action": action,
            "row": row,
            "selected_book_ids": component.selected_book_ids,
            "title_filter": component.title_filter,
            "author_filter": component.author_filter,
            "list_url": _list_url(component),
        }
        return render(request, "booklist/confirm_delete.html", context)

    return redirect(_list_url(component))


@login_required
@require_http_methods(["GET", "POST"])
def book_edit_view(request, book_id):
    """Save the edit modal for ``book_id``.

    A GET opens the list with the modal shown. A valid POST saves the
    book and redirects to the refreshed list; an invalid one re-renders
    the list with the modal still open and the form errors.

    Parameters
    ----------
    request : django.http.HttpRequest
        The incoming request.
    book_id : int
        Primary key of the edited book.

    Returns
    -------
    django.http.HttpResponse
        A redirect on success or the re-rendered list.
    """
    book = get_object_or_404(Book, pk=book_id)
    data = request.POST if request.method == "POST" else request.GET
    component, filter_form = _build_component(request, data)

    if request.method != "POST":
        return redirect(_list_url(component, edit=book.pk))

    component.open_edit_modal(book.pk)
    edit_form = BookEditForm(request.POST, instance=book)
    if edit_form.is_valid():
        try:
            component.service.update_book(book, edit_form.cleaned_data)
        except LibraryServiceError as e:
            component.show_toast("Error", e.message, "error")
        else:
            component.handle_edit_success()
            return redirect(_list_url(component))

    component.refresh()
    return _render_list(request, component, filter_form, edit_form, status=400)


@login_required
@require_GET
def book_data_view(request):
    """Export the currently filtered rows as JSON or CSV.

    ``?format=csv`` returns a CSV attachment; any other value returns
    ``{"books": [...]}`` as JSON.

    Parameters
    ----------
    request : django.http.HttpRequest
        The incoming request with the list filters in ``GET``.

    Returns
    -------
    django.http.HttpResponse
        The exported data.
    """
    component, _ = _build_component(request, request.GET)
    component.refresh()
    rows = component.get_book_data()

    if request.GET.get("format") == "csv":
        response = HttpResponse(content_type="text/csv; charset=utf-8")
        response["Content-Disposition"] = 'attachment; filename="books.csv"'
        response.write("\ufeff")
        writer_csv = writer(response)
        writer_csv.writerow([col["label"] for col in component.columns if "field_name" in col])
        for row in rows:
            writer_csv.writerow([row[col["field_name"]] for col in component.columns if "field_name" in col])
        return response

    return JsonResponse({"books": rows})
