"""Forms used by the book list page and its edit modal."""

from django import forms

from .models import Book

MAX_FILTER_LENGTH = 300 #: Longer filter values are cut to this many characters.


class BookFilterForm(forms.Form):
    """The two text filters bound to the book query.

    Filters never invalidate the form: values longer than
    :data:`MAX_FILTER_LENGTH` are truncated, so one over-long filter does
    not discard the other.
    """
    title_filter = forms.CharField(
        required=False,
        label="Title",
        widget=forms.TextInput(attrs={"placeholder": "Filter by title", "type": "search", "maxlength": MAX_FILTER_LENGTH}),
    ) #: Substring matched against the book title.
    author_filter = forms.CharField(
        required=False,
        label="Author",
        widget=forms.TextInput(attrs={"placeholder": "Filter by author", "type": "search", "maxlength": MAX_FILTER_LENGTH}),
    ) #: Substring matched against the author name.

    def clean_title_filter(self):
        return self.cleaned_data.get("title_filter", "")[:MAX_FILTER_LENGTH]

    def clean_author_filter(self):
        return self.cleaned_data.get("author_filter", "")[:MAX_FILTER_LENGTH]

    def filters(self):
        """Return ``(title_filter, author_filter)``."""
        self.is_valid()
        cleaned = getattr(self, "cleaned_data", {})
        return cleaned.get("title_filter", ""), cleaned.get("author_filter", "")


class BookEditForm(forms.ModelForm):
    """Form rendered inside the edit modal for a single book."""

    class Meta:
        """Meta configuration linking the form to the Book model."""
        model = Book #: Model used for this form.
        fields = ("title", "genre", "author") #: Editable fields.

    def clean_title(self):
        """Reject titles made only of whitespace.

        Returns
        -------
        str
            The stripped title.
        """
        title = (self.cleaned_data.get("title") or "").strip()
        if not title:
            raise forms.ValidationError("Please enter a book title.")
        return title
