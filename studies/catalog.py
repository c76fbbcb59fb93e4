from typing import List, Optional

from django.core.paginator import Paginator
from django.db.models import Q, QuerySet

from .models import Category, Study

PER_PAGE = 12


def published_studies(
    query: Optional[str] = None,
    category: Optional[str] = None,
    year_from: Optional[int] = None,
    year_to: Optional[int] = None,
    sort: str = "date_desc",
) -> QuerySet:
    """
    Estudios publicados con filtros opcionales.

    - query: subcadena (sin mayúsculas) en título, resumen o asesor
    - category: slug; si no existe, el filtro no se aplica
    - year_from / year_to: año de date_completed, inclusivo
    - sort: date_desc (por defecto) o date_asc sobre published_at
    """
    qs = Study.objects.filter(is_published=True).select_related("category", "author__profile")

    if query:
        qs = qs.filter(
            Q(title__icontains=query) | Q(abstract__icontains=query) | Q(adviser__icontains=query)
        )

    if category:
        category_id = Category.objects.filter(slug=category).values_list("pk", flat=True).first()
        if category_id is not None:
            qs = qs.filter(category_id=category_id)

    if year_from:
        qs = qs.filter(date_completed__year__gte=year_from)
    if year_to:
        qs = qs.filter(date_completed__year__lte=year_to)

    order = "published_at" if sort == "date_asc" else "-published_at"
    return qs.order_by(order)


def paginate(qs, page) -> tuple:
    paginator = Paginator(qs, PER_PAGE)
    page_obj = paginator.get_page(page)
    meta = {
        "count": paginator.count,
        "page": page_obj.number,
        "per_page": PER_PAGE,
        "total_pages": paginator.num_pages,
    }
    return page_obj, meta


def available_years() -> List[int]:
    dates = (
        Study.objects.filter(is_published=True)
        .dates("date_completed", "year", order="DESC")
    )
    return [d.year for d in dates]


def related_studies(study: Study, limit: int = 3) -> QuerySet:
    if not study.category_id:
        return Study.objects.none()
    return (
        Study.objects.filter(is_published=True, category_id=study.category_id)
        .exclude(pk=study.pk)
        .order_by("-published_at")[:limit]
    )
