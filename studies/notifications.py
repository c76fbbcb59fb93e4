import logging
from typing import Optional

from .models import Notification, Study

logger = logging.getLogger(__name__)


def notify(recipient, type: str, message: str, study: Optional[Study] = None) -> Notification:
    n = Notification.objects.create(recipient=recipient, type=type, message=message, study=study)
    logger.info("Notificación %s para user=%s study=%s", type, recipient.pk, getattr(study, "pk", None))
    return n


def mark_all_read(user) -> int:
    return Notification.objects.filter(recipient=user, is_read=False).update(is_read=True)
