"""
Ciclo de vida de un estudio.

    pending -> approved | rejected | revision_requested

Un revisor puede emitir una nueva decisión en cualquier momento; no existe
transición de vuelta a pending (un reenvío crea un estudio nuevo).
Toda escritura pasa por estas funciones, que validan rol y datos antes de
tocar la base de datos.
"""
import logging
from typing import Optional

from django.core.exceptions import PermissionDenied, ValidationError
from django.core.files.storage import default_storage
from django.db import transaction
from django.utils import timezone

from accounts import permissions as perms

from .models import Notification, Study, Validation
from .notifications import notify
from .utils.validation_email import send_validation_result_email

logger = logging.getLogger(__name__)

MAX_NOTES = 2000

RESULT_MESSAGES = {
    Study.Status.APPROVED: 'Your study "{title}" has been approved and published.',
    Study.Status.REJECTED: 'Your study "{title}" was rejected.',
    Study.Status.REVISION_REQUESTED: 'Revisions were requested for your study "{title}".',
}


def apply_validation(
    study: Study,
    reviewer,
    status: str,
    notes: Optional[str] = None,
    *,
    base_url: Optional[str] = None,
) -> Validation:
    """
    Registra la decisión de un revisor y actualiza el estudio en una sola
    transacción. Si cualquiera de las dos escrituras falla, no queda ninguna.
    """
    perms.require_capability(reviewer, perms.VALIDATE_STUDIES, "Only faculty or admins can validate studies.")

    if status not in dict(Validation.DECISIONS):
        raise ValidationError(f"Invalid validation status '{status}'.")

    notes = (notes or "").strip()
    if status in Validation.NOTES_REQUIRED and not notes:
        raise ValidationError("Please provide notes for rejection or revision request.")
    if len(notes) > MAX_NOTES:
        raise ValidationError(f"Notes must be at most {MAX_NOTES} characters.")

    approved = status == Study.Status.APPROVED

    with transaction.atomic():
        validation = Validation.objects.create(
            study=study,
            reviewer=reviewer,
            status=status,
            notes=notes or None,
        )
        study.status = status
        study.is_published = approved
        study.published_at = timezone.now() if approved else None
        study.save(update_fields=["status", "is_published", "published_at", "updated_at"])

    logger.info("Validación study=%s status=%s por revisor=%s", study.pk, status, reviewer.pk)

    notify(
        study.author,
        Notification.Type.VALIDATION,
        RESULT_MESSAGES[status].format(title=study.title),
        study=study,
    )
    try:
        send_validation_result_email(study=study, status=status, notes=notes, base_url=base_url)
    except Exception as e:
        logger.error("Error enviando email de validación study=%s: %s", study.pk, e)

    return validation


def set_publication(study: Study, actor, publish: bool) -> Study:
    """Publicar / despublicar desde el panel admin. Solo estudios aprobados se publican."""
    perms.require_capability(actor, perms.MANAGE_STUDIES, "Only admins can publish or unpublish studies.")

    if publish and study.status != Study.Status.APPROVED:
        raise ValidationError("Only approved studies can be published.")

    study.is_published = bool(publish)
    study.published_at = timezone.now() if publish else None
    study.save(update_fields=["is_published", "published_at", "updated_at"])
    logger.info("Publicación study=%s -> %s por admin=%s", study.pk, study.is_published, actor.pk)
    return study


def can_delete(study: Study, actor) -> bool:
    if perms.has_capability(actor, perms.MANAGE_STUDIES):
        return True
    return study.author_id == getattr(actor, "pk", None) and study.is_pending


def delete_study(study: Study, actor) -> None:
    """
    Admin: cualquier estudio. Autor: solo el propio y mientras esté pending.
    El archivo se borra del storage después de eliminar la fila.
    """
    if not can_delete(study, actor):
        raise PermissionDenied("You cannot delete this study.")

    study_id = study.pk
    file_name = study.file.name
    study.delete()
    logger.info("Estudio eliminado study=%s por user=%s", study_id, actor.pk)

    if file_name:
        try:
            default_storage.delete(file_name)
        except OSError as e:
            logger.warning("No se pudo borrar el archivo %s: %s", file_name, e)
