from django import forms
from django.conf import settings
from django.core.validators import RegexValidator
from django.utils.text import slugify
from PyPDF2 import PdfReader

from .models import Category, Study, Validation

MIN_YEAR = 1900
MAX_YEAR = 2100


def split_list(value) -> list:
    """'a, b,,c' -> ['a', 'b', 'c']"""
    return [part.strip() for part in (value or "").split(",") if part.strip()]


# =========================
#  Envío de estudios
# =========================

class StudySubmitForm(forms.Form):
    title = forms.CharField(min_length=5, max_length=300)
    abstract = forms.CharField(min_length=100, max_length=5000, widget=forms.Textarea)
    co_authors = forms.CharField(required=False, help_text="Comma-separated names")
    adviser = forms.CharField(min_length=2, max_length=160)
    date_completed = forms.DateField(widget=forms.DateInput(attrs={"type": "date"}))
    keywords = forms.CharField(help_text="At least 3, comma-separated")
    citation = forms.CharField(required=False, widget=forms.Textarea)
    year_level = forms.CharField(required=False, max_length=40)
    course = forms.CharField(max_length=160)
    department = forms.CharField(max_length=160)
    category = forms.ModelChoiceField(queryset=Category.objects.all(), empty_label="Select a category")
    file = forms.FileField(widget=forms.ClearableFileInput(attrs={"accept": "application/pdf"}))

    def clean_abstract(self):
        abstract = self.cleaned_data["abstract"].strip()
        if len(abstract) < 100:
            raise forms.ValidationError("Abstract must be at least 100 characters.")
        return abstract

    def clean_keywords(self):
        keywords = split_list(self.cleaned_data.get("keywords"))
        if len(keywords) < 3:
            raise forms.ValidationError("Please provide at least 3 keywords.")
        return keywords

    def clean_co_authors(self):
        return split_list(self.cleaned_data.get("co_authors"))

    def clean_citation(self):
        return (self.cleaned_data.get("citation") or "").strip() or None

    def clean_year_level(self):
        return (self.cleaned_data.get("year_level") or "").strip() or None

    def clean_file(self):
        f = self.cleaned_data["file"]
        content_type = (getattr(f, "content_type", "") or "").lower()
        if content_type != "application/pdf":
            raise forms.ValidationError("Only PDF files are allowed.")

        max_bytes = settings.MAX_UPLOAD_MB * 1024 * 1024
        if f.size > max_bytes:
            raise forms.ValidationError(f"File size must be less than {settings.MAX_UPLOAD_MB}MB.")

        try:
            pages = len(PdfReader(f).pages)
        except Exception:
            # cualquier fallo de lectura cuenta como PDF inválido
            raise forms.ValidationError("The file is not a readable PDF document.")
        finally:
            f.seek(0)
        if pages < 1:
            raise forms.ValidationError("The PDF has no pages.")
        return f


# =========================
#  Validación / comentarios
# =========================

class ValidationDecisionForm(forms.Form):
    status = forms.ChoiceField(choices=Validation.DECISIONS)
    notes = forms.CharField(required=False, max_length=2000, widget=forms.Textarea)


class CommentForm(forms.Form):
    body = forms.CharField(max_length=2000, widget=forms.Textarea(attrs={"rows": 3}))
    parent_id = forms.IntegerField(required=False, widget=forms.HiddenInput)

    def clean_body(self):
        body = (self.cleaned_data.get("body") or "").strip()
        if len(body) < 3:
            raise forms.ValidationError("Comment must be at least 3 characters.")
        return body


# =========================
#  Catálogo
# =========================

class CatalogFilterForm(forms.Form):
    SORT_CHOICES = [("date_desc", "Newest first"), ("date_asc", "Oldest first")]

    q = forms.CharField(required=False, max_length=200)
    category = forms.CharField(required=False, max_length=140)
    year_from = forms.IntegerField(required=False, min_value=MIN_YEAR, max_value=MAX_YEAR)
    year_to = forms.IntegerField(required=False, min_value=MIN_YEAR, max_value=MAX_YEAR)
    sort = forms.ChoiceField(required=False, choices=SORT_CHOICES)

    def filters(self) -> dict:
        """Filtros válidos; los campos con error se ignoran."""
        self.is_valid()
        data = getattr(self, "cleaned_data", {})
        return {
            "query": (data.get("q") or "").strip() or None,
            "category": (data.get("category") or "").strip() or None,
            "year_from": data.get("year_from"),
            "year_to": data.get("year_to"),
            "sort": data.get("sort") or "date_desc",
        }


# =========================
#  Administración
# =========================

class CategoryForm(forms.ModelForm):
    color = forms.CharField(
        max_length=7,
        initial="#8f1535",
        validators=[RegexValidator(r"^#[0-9a-fA-F]{6}$", "Color must be a hex value like #8f1535.")],
    )

    class Meta:
        model = Category
        fields = ["name", "slug", "description", "color"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["slug"].required = False

    def clean_slug(self):
        slug = slugify(self.cleaned_data.get("slug") or self.cleaned_data.get("name") or "")
        if not slug:
            raise forms.ValidationError("A slug could not be derived from the name.")
        if Category.objects.filter(slug=slug).exclude(pk=self.instance.pk).exists():
            raise forms.ValidationError("A category with this slug already exists.")
        return slug


class StudyAdminFilterForm(forms.Form):
    q = forms.CharField(required=False, max_length=200)
    status = forms.ChoiceField(required=False, choices=[("all", "All")] + list(Study.Status.choices))
