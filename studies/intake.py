import logging
import re
import time
from typing import Optional

from django.conf import settings
from django.core.files.storage import default_storage
from django.db import transaction

from accounts import permissions as perms

from .models import Study

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def sanitize_filename(name: str) -> str:
    return _UNSAFE_CHARS.sub("_", name or "")


def build_storage_path(user_id, filename: str, timestamp_ms: Optional[int] = None) -> str:
    """study-files/{user_id}/{timestamp_ms}-{nombre saneado}"""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    prefix = getattr(settings, "STUDY_FILES_PREFIX", "study-files").strip("/")
    return f"{prefix}/{user_id}/{timestamp_ms}-{sanitize_filename(filename)}"


def submit_study(author, data: dict) -> Study:
    """
    Guarda el PDF y crea el estudio en estado pending.

    `data` es el cleaned_data de StudySubmitForm. Si el INSERT falla, el
    archivo ya subido se elimina y el error se propaga.
    """
    perms.require_capability(author, perms.SUBMIT_STUDY, "You must be signed in to submit a study.")

    upload = data["file"]
    stored_name = default_storage.save(build_storage_path(author.pk, upload.name), upload)

    try:
        with transaction.atomic():
            study = Study.objects.create(
                title=data["title"].strip(),
                abstract=data["abstract"],
                author=author,
                co_authors=data.get("co_authors") or [],
                adviser=data["adviser"].strip(),
                date_completed=data["date_completed"],
                keywords=data["keywords"],
                citation=data.get("citation"),
                year_level=data.get("year_level"),
                course=data["course"].strip(),
                department=data["department"].strip(),
                category=data.get("category"),
                file=stored_name,
                file_name=upload.name,
                file_size_bytes=upload.size,
                status=Study.Status.PENDING,
                is_published=False,
            )
    except Exception:
        logger.error("Falló el alta del estudio; se elimina %s", stored_name)
        default_storage.delete(stored_name)
        raise

    logger.info("Estudio enviado study=%s autor=%s archivo=%s", study.pk, author.pk, stored_name)
    return study
