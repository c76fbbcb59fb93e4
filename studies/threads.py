import logging
from typing import List, Optional

from django.core.exceptions import PermissionDenied, ValidationError

from accounts import permissions as perms

from .models import Comment, Notification, Study
from .notifications import notify

logger = logging.getLogger(__name__)

MIN_BODY = 3
MAX_BODY = 2000


def post_comment(study: Study, author, body: str, parent: Optional[Comment] = None) -> Comment:
    """Un solo nivel de respuestas: el padre debe ser un comentario raíz del mismo estudio."""
    perms.require_capability(author, perms.COMMENT, "Please sign in to comment.")

    if not study.is_published:
        raise ValidationError("Comments are only allowed on published studies.")

    body = (body or "").strip()
    if len(body) < MIN_BODY:
        raise ValidationError(f"Comment must be at least {MIN_BODY} characters.")
    if len(body) > MAX_BODY:
        raise ValidationError(f"Comment must be at most {MAX_BODY} characters.")

    if parent is not None:
        if parent.study_id != study.pk:
            raise ValidationError("Reply does not belong to this study.")
        if parent.parent_id is not None:
            raise ValidationError("Replies cannot be nested more than one level.")

    comment = Comment.objects.create(study=study, author=author, body=body, parent=parent)
    logger.info("Comentario %s en study=%s por user=%s", comment.pk, study.pk, author.pk)

    if study.author_id != author.pk:
        name = author.profile.full_name or author.email
        notify(
            study.author,
            Notification.Type.COMMENT,
            f'{name} commented on "{study.title}".',
            study=study,
        )
    return comment


def delete_comment(comment: Comment, actor) -> None:
    if not perms.has_capability(actor, perms.DELETE_COMMENTS):
        raise PermissionDenied("Only admins can delete comments.")
    comment_id = comment.pk
    comment.delete()
    logger.info("Comentario %s eliminado por admin=%s", comment_id, actor.pk)


def build_threads(study: Study) -> List[dict]:
    """[{"comment": raíz, "replies": [...]}] en orden de creación."""
    comments = list(
        Comment.objects.filter(study=study)
        .select_related("author__profile")
        .order_by("created_at", "pk")
    )
    replies = {}
    for c in comments:
        if c.parent_id is not None:
            replies.setdefault(c.parent_id, []).append(c)
    return [
        {"comment": c, "replies": replies.get(c.pk, [])}
        for c in comments
        if c.parent_id is None
    ]
