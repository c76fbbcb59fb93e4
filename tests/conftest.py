import itertools
from datetime import date
from io import BytesIO

import pytest
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import SimpleUploadedFile
from django.utils import timezone
from PyPDF2 import PdfWriter

from accounts.models import Profile, User
from studies.models import Category, Study

_seq = itertools.count(1)


@pytest.fixture
def make_user(db):
    """Crea un usuario con perfil y rol."""

    def _make(role=Profile.Role.STUDENT, email=None, password="secret-pass-123", full_name="Test User"):
        email = email or f"user{next(_seq)}@spark.test"
        user = User.objects.create_user(email=email, password=password)
        profile = user.profile
        profile.role = role
        profile.full_name = full_name
        profile.department = "College of Computing"
        profile.save()
        return user

    return _make


@pytest.fixture
def student(make_user):
    return make_user(Profile.Role.STUDENT, email="student@spark.test", full_name="Ana Student")


@pytest.fixture
def faculty(make_user):
    return make_user(Profile.Role.FACULTY, email="faculty@spark.test", full_name="Frank Faculty")


@pytest.fixture
def admin_user(make_user):
    return make_user(Profile.Role.ADMIN, email="admin@spark.test", full_name="Ada Admin")


@pytest.fixture
def category(db):
    return Category.objects.create(name="Computer Science")


@pytest.fixture
def pdf_bytes():
    writer = PdfWriter()
    writer.add_blank_page(width=612, height=792)
    out = BytesIO()
    writer.write(out)
    return out.getvalue()


@pytest.fixture
def pdf_upload(pdf_bytes):
    return SimpleUploadedFile("My Paper (final).pdf", pdf_bytes, content_type="application/pdf")


@pytest.fixture
def submit_data(category):
    return {
        "title": "Machine Learning for Campus Energy Use",
        "abstract": "A" * 100,
        "co_authors": "Ben Two, Cara Three",
        "adviser": "Dr. Reyes",
        "date_completed": "2024-05-10",
        "keywords": "energy, machine learning, campus",
        "citation": "",
        "year_level": "4th Year",
        "course": "BS Computer Science",
        "department": "College of Computing",
        "category": category.pk,
    }


@pytest.fixture
def make_study(db, student, pdf_bytes):
    """Inserta un estudio directamente, con archivo real en el storage."""

    def _make(
        author=None,
        status=Study.Status.PENDING,
        is_published=False,
        published_at=None,
        category=None,
        date_completed=date(2024, 1, 15),
        **extra,
    ):
        author = author or student
        name = default_storage.save(f"study-files/{author.pk}/{next(_seq)}-paper.pdf", ContentFile(pdf_bytes))
        if is_published and published_at is None:
            published_at = timezone.now()
        fields = {
            "title": f"Study {next(_seq)}",
            "abstract": "B" * 120,
            "adviser": "Dr. Reyes",
            "keywords": ["one", "two", "three"],
            "course": "BS Computer Science",
            "department": "College of Computing",
        }
        fields.update(extra)
        return Study.objects.create(
            author=author,
            status=status,
            is_published=is_published,
            published_at=published_at,
            category=category,
            date_completed=date_completed,
            file=name,
            file_name="paper.pdf",
            file_size_bytes=len(pdf_bytes),
            **fields,
        )

    return _make


@pytest.fixture
def published_study(make_study, category):
    return make_study(status=Study.Status.APPROVED, is_published=True, category=category)
