# studies/utils/validation_email.py
from typing import Optional

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

from studies.models import Study

SUBJECTS = {
    Study.Status.APPROVED: "Your study has been APPROVED",
    Study.Status.REJECTED: "Your study was not approved",
    Study.Status.REVISION_REQUESTED: "Revisions requested for your study",
}


def send_validation_result_email(
    *,
    study: Study,
    status: str,
    notes: Optional[str],
    base_url: Optional[str] = None,
) -> None:
    """
    Envía al autor el resultado de la validación.

    - study: instancia Study (debe tener .author.email)
    - status: approved / rejected / revision_requested
    - notes: comentario del revisor (puede ser None o "")
    - base_url: URL a "My Submissions" (opcional)
    """
    author = getattr(study, "author", None)
    author_email = getattr(author, "email", None)

    if not author_email:
        return

    context = {
        "study": study,
        "author": author,
        "status": status,
        "status_label": Study.Status(status).label,
        "notes": (notes or "").strip() or None,
        "base_url": base_url,
    }

    subject = f"{SUBJECTS[status]}: {study.title[:80]}"
    text_body = render_to_string("emails/validation_result.txt", context)
    html_body = render_to_string("emails/validation_result.html", context)

    msg = EmailMultiAlternatives(
        subject=subject,
        body=text_body,
        from_email=getattr(settings, "DEFAULT_FROM_EMAIL", None),
        to=[author_email],
    )
    msg.attach_alternative(html_body, "text/html")
    msg.send()
