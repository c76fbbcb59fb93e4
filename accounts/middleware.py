import logging
from urllib.parse import urlencode

from django.shortcuts import redirect

from . import permissions as perms

logger = logging.getLogger(__name__)

# Rutas que requieren sesión
PROTECTED_PREFIXES = ("/studies/submit", "/profile")

# Rutas de administración: (prefijo, capacidad, destino si falta la capacidad)
ADMIN_ROUTES = [
    ("/admin/users", perms.MANAGE_USERS, "/admin/"),
    ("/admin/categories", perms.MANAGE_CATEGORIES, "/admin/"),
    ("/admin/studies", perms.MANAGE_STUDIES, "/admin/"),
    ("/admin", perms.ACCESS_ADMIN, "/"),
]


def _matches(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


class RoleRouteMiddleware:
    """
    Guarda de rutas por prefijo.
    - Sin sesión en ruta protegida o de administración -> login con ?next=
    - Sin la capacidad requerida -> redirección según ADMIN_ROUTES
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        path = request.path
        is_protected = any(_matches(path, p) for p in PROTECTED_PREFIXES)
        admin_rule = next((r for r in ADMIN_ROUTES if _matches(path, r[0])), None)

        if (is_protected or admin_rule) and not request.user.is_authenticated:
            return redirect(f"/login/?{urlencode({'next': path})}")

        if admin_rule:
            _, capability, fallback = admin_rule
            if not perms.has_capability(request.user, perms.ACCESS_ADMIN):
                logger.info("Acceso admin denegado user=%s path=%s", request.user.pk, path)
                return redirect("/")
            if not perms.has_capability(request.user, capability):
                return redirect(fallback)

        return self.get_response(request)
