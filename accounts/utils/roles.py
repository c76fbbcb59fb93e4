import logging

from django.core.exceptions import PermissionDenied, ValidationError

from accounts import permissions as perms
from accounts.models import Profile

logger = logging.getLogger(__name__)


def change_role(target: Profile, actor, role: str) -> Profile:
    """
    Cambia el rol de un perfil.

    Solo un admin puede hacerlo y nunca sobre su propia cuenta; la regla se
    aplica aquí, no en la plantilla.
    """
    perms.require_capability(actor, perms.MANAGE_USERS, "Only admins can change roles.")

    if target.pk == actor.pk:
        raise PermissionDenied("You cannot change your own role.")

    if role not in Profile.Role.values:
        raise ValidationError(f"Invalid role '{role}'.")

    if target.role == role:
        return target

    old_role = target.role
    target.role = role
    target.save(update_fields=["role", "updated_at"])
    logger.info("Rol actualizado user=%s %s -> %s por admin=%s", target.pk, old_role, role, actor.pk)
    return target
