import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils.text import slugify


# =========================
#  Categorías
# =========================

class Category(models.Model):
    name = models.CharField(max_length=120, unique=True)
    slug = models.SlugField(max_length=140, unique=True)
    description = models.TextField(blank=True, null=True)
    color = models.CharField(max_length=7, default="#8f1535")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "categories"
        ordering = ["name"]
        verbose_name_plural = "categories"

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)
        super().save(*args, **kwargs)

    def __str__(self):
        return self.name


# =========================
#  Estudios
# =========================

class Study(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"
        REVISION_REQUESTED = "revision_requested", "Revision requested"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=300)
    abstract = models.TextField()
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="studies",
    )
    co_authors = models.JSONField(default=list, blank=True)
    adviser = models.CharField(max_length=160)
    date_completed = models.DateField()
    keywords = models.JSONField(default=list, blank=True)
    citation = models.TextField(blank=True, null=True)
    year_level = models.CharField(max_length=40, blank=True, null=True)
    course = models.CharField(max_length=160)
    department = models.CharField(max_length=160)
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="studies",
    )

    # ruta en el storage: study-files/{user_id}/{ms}-{nombre}
    file = models.FileField(max_length=500)
    file_name = models.CharField(max_length=255)
    file_size_bytes = models.PositiveBigIntegerField(default=0)

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    is_published = models.BooleanField(default=False, db_index=True)

    submitted_at = models.DateTimeField(auto_now_add=True)
    published_at = models.DateTimeField(blank=True, null=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "studies"
        ordering = ["-submitted_at"]
        verbose_name_plural = "studies"
        constraints = [
            models.CheckConstraint(
                condition=Q(is_published=False) | Q(status="approved"),
                name="studies_published_requires_approved",
            ),
        ]

    @property
    def is_pending(self) -> bool:
        return self.status == self.Status.PENDING

    def __str__(self):
        return self.title


# =========================
#  Validaciones (auditoría)
# =========================

class Validation(models.Model):
    DECISIONS = [
        (Study.Status.APPROVED, Study.Status.APPROVED.label),
        (Study.Status.REJECTED, Study.Status.REJECTED.label),
        (Study.Status.REVISION_REQUESTED, Study.Status.REVISION_REQUESTED.label),
    ]
    NOTES_REQUIRED = (Study.Status.REJECTED, Study.Status.REVISION_REQUESTED)

    study = models.ForeignKey(Study, on_delete=models.CASCADE, related_name="validations")
    reviewer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="validations",
    )
    status = models.CharField(max_length=20, choices=DECISIONS)
    notes = models.TextField(blank=True, null=True)
    reviewed_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = "validations"
        ordering = ["-reviewed_at"]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Validation records are immutable.")
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.study_id} -> {self.status}"


# =========================
#  Comentarios
# =========================

class Comment(models.Model):
    study = models.ForeignKey(Study, on_delete=models.CASCADE, related_name="comments")
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="comments",
    )
    body = models.TextField()
    parent = models.ForeignKey(
        "self",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="replies",
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "comments"
        ordering = ["created_at"]

    def __str__(self):
        return f"Comment #{self.pk} on {self.study_id}"


# =========================
#  Descargas / Notificaciones
# =========================

class Download(models.Model):
    study = models.ForeignKey(Study, on_delete=models.CASCADE, related_name="downloads")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="downloads",
    )
    downloaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "downloads"
        ordering = ["-downloaded_at"]


class Notification(models.Model):
    class Type(models.TextChoices):
        DOWNLOAD = "download", "Download"
        COMMENT = "comment", "Comment"
        VALIDATION = "validation", "Validation"
        SYSTEM = "system", "System"

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    type = models.CharField(max_length=12, choices=Type.choices, default=Type.SYSTEM)
    study = models.ForeignKey(
        Study,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="notifications",
    )
    message = models.CharField(max_length=500)
    is_read = models.BooleanField(default=False, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "notifications"
        ordering = ["-created_at"]

    def __str__(self):
        return f"[{self.type}] {self.message}"
