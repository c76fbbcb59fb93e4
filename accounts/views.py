from __future__ import annotations

import logging

from django.conf import settings
from django.contrib import messages
from django.contrib.auth import get_user_model, login, logout, update_session_auth_hash
from django.contrib.auth.decorators import login_required
from django.contrib.auth.forms import SetPasswordForm
from django.contrib.auth.tokens import default_token_generator
from django.core.exceptions import PermissionDenied, ValidationError
from django.core.mail import send_mail
from django.db.models import Count, Q
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.urls import reverse
from django.utils.decorators import method_decorator
from django.utils.encoding import force_bytes, force_str
from django.utils.http import url_has_allowed_host_and_scheme, urlsafe_base64_decode, urlsafe_base64_encode
from django.views import View

from .forms import AvatarForm, ProfileForm, RegisterForm, RoleChangeForm
from .models import Profile
from .serializers import ProfileDTO
from .utils.roles import change_role

logger = logging.getLogger(__name__)

CALLBACK_ERROR = "Invalid or expired reset link"
RECOVERY = "recovery"
SIGNUP = "signup"


def _callback_link(request: HttpRequest, user, flow: str) -> str:
    uid = urlsafe_base64_encode(force_bytes(user.pk))
    token = default_token_generator.make_token(user)
    return request.build_absolute_uri(
        f"{reverse('auth_callback')}?uid={uid}&token={token}&type={flow}"
    )


def _send_confirmation_email(request: HttpRequest, user) -> None:
    link = _callback_link(request, user, SIGNUP)
    send_mail(
        "Confirm your SPARK account",
        f"Welcome to SPARK!\n\nConfirm your email address to activate your account:\n{link}\n",
        None,
        [user.email],
        fail_silently=False,
    )


# =========================
#  Registro / sesión
# =========================

def register(request: HttpRequest) -> HttpResponse:
    if request.method == "POST":
        form = RegisterForm(request.POST)
        if form.is_valid():
            user = form.save()
            logger.info("Usuario registrado user=%s", user.pk)

            if getattr(settings, "REQUIRE_EMAIL_CONFIRMATION", False):
                user.is_active = False
                user.save(update_fields=["is_active"])
                try:
                    _send_confirmation_email(request, user)
                except Exception as e:
                    logger.error("Error email confirmación user=%s: %s", user.pk, e)
                messages.success(request, "Check your email to confirm your account.")
            else:
                messages.success(request, "Account created. You can now sign in.")
            return redirect("login")
    else:
        form = RegisterForm()

    return render(request, "accounts/register.html", {"form": form})


def logout_to_login(request: HttpRequest) -> HttpResponse:
    logout(request)
    return redirect("login")


def auth_callback(request: HttpRequest) -> HttpResponse:
    """
    Canjea un enlace de correo (uid + token) por una sesión.
    - type=recovery -> /reset-password/
    - otro tipo     -> ?next= (mismo host) o /
    """
    uidb64 = request.GET.get("uid") or ""
    token = request.GET.get("token") or ""
    flow = request.GET.get("type") or ""
    next_url = request.GET.get("next") or "/"

    error_url = f"{reverse('login')}?error={CALLBACK_ERROR.replace(' ', '+')}"

    if not uidb64 or not token or not flow:
        return redirect(error_url)

    UserModel = get_user_model()
    try:
        user = UserModel.objects.get(pk=force_str(urlsafe_base64_decode(uidb64)))
    except (TypeError, ValueError, OverflowError, UserModel.DoesNotExist):
        return redirect(error_url)

    if not default_token_generator.check_token(user, token):
        logger.warning("Token de callback inválido user=%s type=%s", user.pk, flow)
        return redirect(error_url)

    if flow == SIGNUP and not user.is_active:
        user.is_active = True
        user.save(update_fields=["is_active"])

    if not user.is_active:
        return redirect(error_url)

    login(request, user, backend="django.contrib.auth.backends.ModelBackend")
    logger.info("Sesión desde callback user=%s type=%s", user.pk, flow)

    if flow == RECOVERY:
        return redirect("reset_password")

    if not url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
        next_url = "/"
    return redirect(next_url)


@login_required
def reset_password(request: HttpRequest) -> HttpResponse:
    if request.method == "POST":
        form = SetPasswordForm(request.user, request.POST)
        if form.is_valid():
            user = form.save()
            update_session_auth_hash(request, user)
            messages.success(request, "Password updated.")
            return redirect("profile")
    else:
        form = SetPasswordForm(request.user)
    return render(request, "accounts/reset_password.html", {"form": form})


# =========================
#  Perfil propio
# =========================

@method_decorator(login_required, name="dispatch")
class ProfileView(View):
    template_name = "accounts/profile.html"

    def _context(self, request: HttpRequest, form=None, avatar_form=None) -> dict:
        profile = request.user.profile
        return {
            "profile": profile,
            "form": form or ProfileForm(instance=profile),
            "avatar_form": avatar_form or AvatarForm(),
            "notifications": request.user.notifications.select_related("study")[:20],
            "unread_count": request.user.notifications.filter(is_read=False).count(),
        }

    def get(self, request: HttpRequest) -> HttpResponse:
        return render(request, self.template_name, self._context(request))

    def post(self, request: HttpRequest) -> HttpResponse:
        profile = request.user.profile

        if "avatar" in request.FILES:
            avatar_form = AvatarForm(request.POST, request.FILES)
            if not avatar_form.is_valid():
                messages.error(request, "Failed to upload avatar.")
                return render(request, self.template_name, self._context(request, avatar_form=avatar_form), status=400)
            if profile.avatar:
                profile.avatar.delete(save=False)
            profile.avatar = avatar_form.cleaned_data["avatar"]
            profile.save(update_fields=["avatar", "updated_at"])
            logger.info("Avatar actualizado user=%s", profile.pk)
            messages.success(request, "Avatar updated!")
            return redirect("profile")

        form = ProfileForm(request.POST, instance=profile)
        if not form.is_valid():
            messages.error(request, "Failed to save profile.")
            return render(request, self.template_name, self._context(request, form=form), status=400)

        form.save()
        logger.info("Perfil actualizado user=%s", profile.pk)
        messages.success(request, "Profile updated!")
        return redirect("profile")


# =========================
#  Administración de usuarios
# =========================

@method_decorator(login_required, name="dispatch")
class AdminUsersView(View):
    template_name = "admin_panel/users.html"

    def get(self, request: HttpRequest) -> HttpResponse:
        q = (request.GET.get("q") or "").strip()
        role = (request.GET.get("role") or "all").strip()

        profiles = Profile.objects.select_related("user").order_by("-created_at")
        stats = Profile.objects.aggregate(
            total=Count("pk"),
            admins=Count("pk", filter=Q(role=Profile.Role.ADMIN)),
            faculty=Count("pk", filter=Q(role=Profile.Role.FACULTY)),
            students=Count("pk", filter=Q(role=Profile.Role.STUDENT)),
        )

        if q:
            profiles = profiles.filter(
                Q(full_name__icontains=q) | Q(email__icontains=q) | Q(student_id__icontains=q)
            )
        if role != "all" and role in Profile.Role.values:
            profiles = profiles.filter(role=role)

        return render(
            request,
            self.template_name,
            {
                "profiles": profiles,
                "stats": stats,
                "q": q,
                "role_filter": role,
                "roles": Profile.Role.choices,
            },
        )


@method_decorator(login_required, name="dispatch")
class UpdateUserRoleAPI(View):
    """
    POST: role (student/faculty/admin)
    Solo ADMIN, nunca sobre la propia cuenta.
    """

    def post(self, request: HttpRequest, user_id: int) -> HttpResponse:
        target = get_object_or_404(Profile, pk=user_id)
        form = RoleChangeForm(request.POST)
        if not form.is_valid():
            return JsonResponse({"ok": False, "errors": form.errors.get_json_data()}, status=400)

        try:
            profile = change_role(target, request.user, form.cleaned_data["role"])
        except PermissionDenied as e:
            return JsonResponse({"ok": False, "error": str(e) or "Not authorized."}, status=403)
        except ValidationError as e:
            return JsonResponse({"ok": False, "error": "; ".join(e.messages)}, status=400)

        return JsonResponse(
            {
                "ok": True,
                "message": f"Role updated to {profile.get_role_display()}.",
                "profile": ProfileDTO.from_model(profile).to_dict(),
            }
        )
