"""
Tabla rol -> capacidades.

El middleware, los menús y las funciones que escriben datos consultan
ROLE_CAPABILITIES; no hay otra fuente de permisos.
"""
from typing import FrozenSet, List, Optional

from django.core.exceptions import PermissionDenied

from .models import Profile

Role = Profile.Role

SUBMIT_STUDY = "submit_study"
COMMENT = "comment"
ACCESS_ADMIN = "access_admin"
VALIDATE_STUDIES = "validate_studies"
MANAGE_STUDIES = "manage_studies"
MANAGE_USERS = "manage_users"
MANAGE_CATEGORIES = "manage_categories"
DELETE_COMMENTS = "delete_comments"

_STUDENT = frozenset({SUBMIT_STUDY, COMMENT})
_FACULTY = _STUDENT | {ACCESS_ADMIN, VALIDATE_STUDIES}
_ADMIN = _FACULTY | {MANAGE_STUDIES, MANAGE_USERS, MANAGE_CATEGORIES, DELETE_COMMENTS}

ROLE_CAPABILITIES = {
    Role.STUDENT: _STUDENT,
    Role.FACULTY: _FACULTY,
    Role.ADMIN: _ADMIN,
}

# (capability, url name, label)
ADMIN_NAV = [
    (VALIDATE_STUDIES, "admin_submissions", "Pending Validation"),
    (MANAGE_STUDIES, "admin_studies", "All Studies"),
    (MANAGE_USERS, "admin_users", "Users"),
    (MANAGE_CATEGORIES, "admin_categories", "Categories"),
]

USER_MENU = [
    (None, "profile", "My Profile"),
    (None, "my_submissions", "My Submissions"),
    (SUBMIT_STUDY, "submit_study", "Submit a Study"),
    (ACCESS_ADMIN, "admin_dashboard", "Admin Panel"),
]


def role_of(user) -> Optional[str]:
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    profile = getattr(user, "profile", None)
    return profile.role if profile else None


def capabilities_for(role: Optional[str]) -> FrozenSet[str]:
    return ROLE_CAPABILITIES.get(role, frozenset())


def has_capability(user, capability: str) -> bool:
    return capability in capabilities_for(role_of(user))


def require_capability(user, capability: str, message: str = "Not authorized.") -> None:
    if not has_capability(user, capability):
        raise PermissionDenied(message)


def _filter_menu(items, role) -> List[dict]:
    caps = capabilities_for(role)
    return [
        {"url_name": url_name, "label": label}
        for cap, url_name, label in items
        if cap is None or cap in caps
    ]


def admin_nav_for(role: Optional[str]) -> List[dict]:
    return _filter_menu(ADMIN_NAV, role)


def user_menu_for(role: Optional[str]) -> List[dict]:
    if role is None:
        return []
    return _filter_menu(USER_MENU, role)
