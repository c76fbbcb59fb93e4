from . import permissions as perms


def navigation(request):
    role = perms.role_of(getattr(request, "user", None))
    return {
        "current_role": role,
        "capabilities": perms.capabilities_for(role),
        "admin_nav": perms.admin_nav_for(role),
        "user_menu": perms.user_menu_for(role),
    }
