# studies/templatetags/study_extras.py
from django import template
from django.utils import timezone
from django.utils.timesince import timesince

register = template.Library()


@register.filter(name="filesize")
def filesize(num_bytes):
    """
    1536 -> "1.5 KB"
    Uso en template: {{ study.file_size_bytes|filesize }}
    """
    try:
        n = int(num_bytes)
    except (TypeError, ValueError):
        return "0 B"
    if n < 1024:
        return f"{n} B"
    if n < 1024 * 1024:
        return f"{n / 1024:.1f} KB"
    return f"{n / (1024 * 1024):.1f} MB"


@register.filter(name="join_list")
def join_list(values, sep=", "):
    if not values:
        return ""
    return sep.join(str(v) for v in values)


@register.filter(name="truncate")
def truncate(value, length=150):
    text = str(value or "")
    length = int(length)
    if len(text) <= length:
        return text
    return text[:length].rstrip() + "..."


@register.filter(name="timeago")
def timeago(value):
    if not value:
        return ""
    delta = timezone.now() - value
    if delta.total_seconds() < 60:
        return "just now"
    return f"{timesince(value).split(',')[0]} ago"


@register.filter(name="status_badge")
def status_badge(status):
    """Clase CSS para el estado de un estudio."""
    return {
        "pending": "badge-pending",
        "approved": "badge-approved",
        "rejected": "badge-rejected",
        "revision_requested": "badge-revision",
    }.get(status, "badge-default")
