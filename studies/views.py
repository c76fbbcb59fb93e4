from __future__ import annotations

import logging
from datetime import timedelta

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.exceptions import PermissionDenied, ValidationError
from django.core.files.storage import default_storage
from django.db import DatabaseError
from django.db.models import Count, Q
from django.http import Http404, HttpRequest, HttpResponse, JsonResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.urls import reverse
from django.utils import timezone
from django.utils.decorators import method_decorator
from django.utils.http import content_disposition_header
from django.views import View

from accounts import permissions as perms
from accounts.models import Profile

from .catalog import available_years, paginate, published_studies, related_studies
from .forms import (
    CatalogFilterForm,
    CategoryForm,
    CommentForm,
    StudyAdminFilterForm,
    StudySubmitForm,
    ValidationDecisionForm,
)
from .intake import submit_study
from .models import Category, Comment, Download, Notification, Study
from .notifications import mark_all_read, notify
from .serializers import CommentDTO, StudyDTO, ValidationDTO
from .threads import build_threads, delete_comment, post_comment
from .utils.pdf import cover_page_pdf_bytes, merge_pdf_streams
from .workflow import apply_validation, can_delete, delete_study, set_publication

logger = logging.getLogger(__name__)

URGENT_DAYS = 7
NEW_DAYS = 2


def _json_error(e: Exception) -> JsonResponse:
    if isinstance(e, PermissionDenied):
        return JsonResponse({"ok": False, "error": str(e) or "Not authorized."}, status=403)
    if isinstance(e, ValidationError):
        return JsonResponse({"ok": False, "error": "; ".join(e.messages)}, status=400)
    return JsonResponse({"ok": False, "error": str(e)}, status=500)


# =========================
#  Público: inicio / catálogo / detalle
# =========================

def home(request: HttpRequest) -> HttpResponse:
    published = Study.objects.filter(is_published=True)
    stats = published.aggregate(
        studies=Count("pk"),
        authors=Count("author", distinct=True),
    )
    latest = published.select_related("category", "author__profile").order_by("-published_at")[:6]
    categories = Category.objects.annotate(
        published_count=Count("studies", filter=Q(studies__is_published=True))
    )
    return render(
        request,
        "studies/home.html",
        {"stats": stats, "latest": latest, "categories": categories},
    )


def catalog(request: HttpRequest) -> HttpResponse:
    form = CatalogFilterForm(request.GET or None)
    filters = form.filters()
    page_obj, meta = paginate(published_studies(**filters), request.GET.get("page"))
    return render(
        request,
        "studies/catalog.html",
        {
            "form": form,
            "filters": filters,
            "page_obj": page_obj,
            "studies": page_obj.object_list,
            "meta": meta,
            "categories": Category.objects.all(),
            "years": available_years(),
        },
    )


class CatalogAPI(View):
    """GET: mismos filtros que el catálogo HTML, paginado."""

    def get(self, request: HttpRequest) -> HttpResponse:
        form = CatalogFilterForm(request.GET or None)
        page_obj, meta = paginate(published_studies(**form.filters()), request.GET.get("page"))
        return JsonResponse(
            {
                "ok": True,
                "results": [StudyDTO.from_model(s).to_dict() for s in page_obj.object_list],
                **meta,
            }
        )


def study_detail(request: HttpRequest, pk) -> HttpResponse:
    study = get_object_or_404(
        Study.objects.select_related("category", "author__profile"),
        pk=pk,
        is_published=True,
    )
    return render(
        request,
        "studies/detail.html",
        {
            "study": study,
            "threads": build_threads(study),
            "related": related_studies(study),
            "comment_form": CommentForm(),
            "can_comment": perms.has_capability(request.user, perms.COMMENT),
            "can_delete_comments": perms.has_capability(request.user, perms.DELETE_COMMENTS),
            "download_count": study.downloads.count(),
        },
    )


def download_study(request: HttpRequest, pk) -> HttpResponse:
    study = get_object_or_404(Study.objects.select_related("author__profile", "category"), pk=pk, is_published=True)

    try:
        with default_storage.open(study.file.name, "rb") as fh:
            original = fh.read()
    except OSError:
        logger.error("Archivo no encontrado para study=%s (%s)", study.pk, study.file.name)
        raise Http404("File not found.")

    try:
        content = merge_pdf_streams([cover_page_pdf_bytes(study), original])
    except Exception as e:
        logger.error("No se pudo generar portada study=%s: %s", study.pk, e)
        content = original

    user = request.user if request.user.is_authenticated else None
    Download.objects.create(study=study, user=user)
    if user is None or user.pk != study.author_id:
        notify(
            study.author,
            Notification.Type.DOWNLOAD,
            f'Your study "{study.title}" was downloaded.',
            study=study,
        )
    logger.info("Descarga study=%s user=%s", study.pk, getattr(user, "pk", None))

    resp = HttpResponse(content, content_type="application/pdf")
    resp["Content-Disposition"] = content_disposition_header(True, study.file_name)
    return resp


# =========================
#  Envío / mis estudios
# =========================

@method_decorator(login_required, name="dispatch")
class SubmitStudyView(View):
    template_name = "studies/submit.html"

    def get(self, request: HttpRequest) -> HttpResponse:
        return render(request, self.template_name, {"form": StudySubmitForm()})

    def post(self, request: HttpRequest) -> HttpResponse:
        form = StudySubmitForm(request.POST, request.FILES)
        if not form.is_valid():
            return render(request, self.template_name, {"form": form}, status=400)

        try:
            submit_study(request.user, form.cleaned_data)
        except PermissionDenied as e:
            messages.error(request, str(e))
            return render(request, self.template_name, {"form": form}, status=403)
        except (DatabaseError, OSError) as e:
            logger.error("Error al enviar estudio user=%s: %s", request.user.pk, e)
            messages.error(request, "Failed to submit study. Please try again.")
            return render(request, self.template_name, {"form": form}, status=500)

        messages.success(request, "Study submitted successfully! It will be reviewed by faculty.")
        return redirect("my_submissions")


@login_required
def my_submissions(request: HttpRequest) -> HttpResponse:
    studies = (
        Study.objects.filter(author=request.user)
        .select_related("category")
        .prefetch_related("validations__reviewer__profile")
        .order_by("-submitted_at")
    )
    rows = []
    for s in studies:
        validations = sorted(s.validations.all(), key=lambda v: v.reviewed_at, reverse=True)
        rows.append(
            {
                "study": s,
                "latest_validation": validations[0] if validations else None,
                "can_delete": can_delete(s, request.user),
            }
        )
    return render(request, "studies/my_submissions.html", {"rows": rows})


@method_decorator(login_required, name="dispatch")
class DeleteStudyAPI(View):
    def post(self, request: HttpRequest, pk) -> HttpResponse:
        study = get_object_or_404(Study, pk=pk)
        try:
            delete_study(study, request.user)
        except PermissionDenied as e:
            return _json_error(e)
        return JsonResponse({"ok": True, "message": "Study deleted."})


# =========================
#  Comentarios
# =========================

@method_decorator(login_required, name="dispatch")
class PostCommentAPI(View):
    """
    POST: body, parent_id (opcional)
    """

    def post(self, request: HttpRequest, pk) -> HttpResponse:
        study = get_object_or_404(Study, pk=pk)
        form = CommentForm(request.POST)
        if not form.is_valid():
            return JsonResponse({"ok": False, "errors": form.errors.get_json_data()}, status=400)

        parent = None
        parent_id = form.cleaned_data.get("parent_id")
        if parent_id:
            parent = get_object_or_404(Comment, pk=parent_id)

        try:
            comment = post_comment(study, request.user, form.cleaned_data["body"], parent=parent)
        except (PermissionDenied, ValidationError) as e:
            return _json_error(e)

        return JsonResponse({"ok": True, "comment": CommentDTO.from_model(comment).to_dict()})


@method_decorator(login_required, name="dispatch")
class DeleteCommentAPI(View):
    def post(self, request: HttpRequest, comment_id: int) -> HttpResponse:
        comment = get_object_or_404(Comment, pk=comment_id)
        try:
            delete_comment(comment, request.user)
        except PermissionDenied as e:
            return _json_error(e)
        return JsonResponse({"ok": True, "message": "Comment deleted."})


@method_decorator(login_required, name="dispatch")
class MarkNotificationsReadAPI(View):
    def post(self, request: HttpRequest) -> HttpResponse:
        updated = mark_all_read(request.user)
        return JsonResponse({"ok": True, "updated": updated})


# =========================
#  Panel admin / revisor
# =========================

@method_decorator(login_required, name="dispatch")
class AdminDashboardView(View):
    template_name = "admin_panel/dashboard.html"

    def get(self, request: HttpRequest) -> HttpResponse:
        stats = Study.objects.aggregate(
            total=Count("pk"),
            pending=Count("pk", filter=Q(status=Study.Status.PENDING)),
            published=Count("pk", filter=Q(is_published=True)),
        )
        stats["users"] = Profile.objects.count()
        recent = Study.objects.filter(status=Study.Status.PENDING).select_related("author__profile").order_by("-submitted_at")[:5]
        return render(request, self.template_name, {"stats": stats, "recent_pending": recent})


@method_decorator(login_required, name="dispatch")
class SubmissionsQueueView(View):
    """Cola de revisión: pending, más antiguos primero."""

    template_name = "admin_panel/submissions.html"

    def get(self, request: HttpRequest) -> HttpResponse:
        now = timezone.now()
        pending = (
            Study.objects.filter(status=Study.Status.PENDING)
            .select_related("author__profile", "category")
            .order_by("submitted_at")
        )
        counters = pending.aggregate(
            awaiting=Count("pk"),
            urgent=Count("pk", filter=Q(submitted_at__lt=now - timedelta(days=URGENT_DAYS))),
            new=Count("pk", filter=Q(submitted_at__gte=now - timedelta(days=NEW_DAYS))),
        )
        return render(
            request,
            self.template_name,
            {
                "pending": pending,
                "counters": counters,
                "decision_form": ValidationDecisionForm(),
                "urgent_cutoff": now - timedelta(days=URGENT_DAYS),
            },
        )


@method_decorator(login_required, name="dispatch")
class ValidateStudyAPI(View):
    """
    POST: status (approved/rejected/revision_requested), notes
    """

    def post(self, request: HttpRequest, pk) -> HttpResponse:
        study = get_object_or_404(Study.objects.select_related("author"), pk=pk)
        form = ValidationDecisionForm(request.POST)
        if not form.is_valid():
            return JsonResponse({"ok": False, "errors": form.errors.get_json_data()}, status=400)

        try:
            validation = apply_validation(
                study,
                request.user,
                form.cleaned_data["status"],
                form.cleaned_data.get("notes"),
                base_url=request.build_absolute_uri(reverse("my_submissions")),
            )
        except (PermissionDenied, ValidationError) as e:
            return _json_error(e)
        except DatabaseError as e:
            logger.error("Error al validar study=%s: %s", study.pk, e)
            return _json_error(e)

        return JsonResponse(
            {
                "ok": True,
                "message": f"Study {validation.get_status_display().lower()}.",
                "validation": ValidationDTO.from_model(validation).to_dict(),
                "study": StudyDTO.from_model(study).to_dict(),
            }
        )


@method_decorator(login_required, name="dispatch")
class AdminStudiesView(View):
    template_name = "admin_panel/studies.html"

    def get(self, request: HttpRequest) -> HttpResponse:
        form = StudyAdminFilterForm(request.GET or None)
        form.is_valid()
        data = getattr(form, "cleaned_data", {})
        q = (data.get("q") or "").strip()
        status = data.get("status") or "all"

        studies = Study.objects.select_related("author__profile", "category").order_by("-submitted_at")
        counters = Study.objects.aggregate(
            total=Count("pk"),
            pending=Count("pk", filter=Q(status=Study.Status.PENDING)),
            approved=Count("pk", filter=Q(status=Study.Status.APPROVED)),
            rejected=Count("pk", filter=Q(status=Study.Status.REJECTED)),
            revision_requested=Count("pk", filter=Q(status=Study.Status.REVISION_REQUESTED)),
            published=Count("pk", filter=Q(is_published=True)),
        )
        if q:
            studies = studies.filter(
                Q(title__icontains=q) | Q(author__profile__full_name__icontains=q) | Q(adviser__icontains=q)
            )
        if status != "all":
            studies = studies.filter(status=status)

        return render(
            request,
            self.template_name,
            {"form": form, "studies": studies, "counters": counters, "q": q, "status_filter": status},
        )


@method_decorator(login_required, name="dispatch")
class TogglePublishAPI(View):
    """
    POST: publish=true|false
    """

    def post(self, request: HttpRequest, pk) -> HttpResponse:
        study = get_object_or_404(Study, pk=pk)
        publish = (request.POST.get("publish") or "").lower() in ("1", "true", "on", "yes")
        try:
            set_publication(study, request.user, publish)
        except (PermissionDenied, ValidationError) as e:
            return _json_error(e)
        return JsonResponse(
            {
                "ok": True,
                "message": "Study published." if study.is_published else "Study unpublished.",
                "study": StudyDTO.from_model(study).to_dict(),
            }
        )


@method_decorator(login_required, name="dispatch")
class AdminCategoriesView(View):
    template_name = "admin_panel/categories.html"

    def _render(self, request: HttpRequest, form, status: int = 200) -> HttpResponse:
        categories = Category.objects.annotate(study_count=Count("studies"))
        return render(request, self.template_name, {"form": form, "categories": categories}, status=status)

    def get(self, request: HttpRequest) -> HttpResponse:
        return self._render(request, CategoryForm())

    def post(self, request: HttpRequest) -> HttpResponse:
        if not perms.has_capability(request.user, perms.MANAGE_CATEGORIES):
            raise PermissionDenied("Only admins can manage categories.")
        form = CategoryForm(request.POST)
        if not form.is_valid():
            return self._render(request, form, status=400)
        category = form.save()
        logger.info("Categoría creada %s por admin=%s", category.slug, request.user.pk)
        messages.success(request, f'Category "{category.name}" created.')
        return redirect("admin_categories")


@method_decorator(login_required, name="dispatch")
class DeleteCategoryAPI(View):
    def post(self, request: HttpRequest, category_id: int) -> HttpResponse:
        category = get_object_or_404(Category, pk=category_id)
        if not perms.has_capability(request.user, perms.MANAGE_CATEGORIES):
            return _json_error(PermissionDenied("Only admins can manage categories."))
        slug = category.slug
        category.delete()
        logger.info("Categoría eliminada %s por admin=%s", slug, request.user.pk)
        return JsonResponse({"ok": True, "message": "Category deleted."})
