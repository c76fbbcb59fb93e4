from django.contrib.auth import views as auth_views
from django.urls import path

from .views import (
    register,
    logout_to_login,
    auth_callback,
    reset_password,
    ProfileView,
    AdminUsersView,
    UpdateUserRoleAPI,
)

urlpatterns = [
    # Auth/registro
    path("register/", register, name="register"),
    path("logout/", logout_to_login, name="logout"),
    path("auth/callback/", auth_callback, name="auth_callback"),
    path("reset-password/", reset_password, name="reset_password"),

    # Perfil
    path("profile/", ProfileView.as_view(), name="profile"),
    path(
        "profile/password/",
        auth_views.PasswordChangeView.as_view(
            template_name="accounts/password_change_form.html",
            success_url="/profile/password/done/",
        ),
        name="password_change",
    ),
    path(
        "profile/password/done/",
        auth_views.PasswordChangeDoneView.as_view(
            template_name="accounts/password_change_done.html"
        ),
        name="password_change_done",
    ),

    # Panel admin: usuarios
    path("admin/users/", AdminUsersView.as_view(), name="admin_users"),
    path("api/admin/users/<int:user_id>/role/", UpdateUserRoleAPI.as_view(), name="api_update_user_role"),
]
