from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Profile

User = get_user_model()

GROUP_BY_ROLE = {
    Profile.Role.STUDENT: "Student",
    Profile.Role.FACULTY: "Faculty",
    Profile.Role.ADMIN: "Admin",
}


@receiver(post_save, sender=User)
def ensure_profile(sender, instance, created, **kwargs):
    # cada usuario tiene exactamente un perfil; el email se refleja en él
    profile, made = Profile.objects.get_or_create(
        user=instance,
        defaults={"email": instance.email},
    )
    if not made and profile.email != instance.email:
        profile.email = instance.email
        profile.save(update_fields=["email", "updated_at"])


@receiver(post_save, sender=Profile)
def ensure_groups_and_assign(sender, instance, **kwargs):
    # crea si faltan
    groups = {
        role: Group.objects.get_or_create(name=name)[0]
        for role, name in GROUP_BY_ROLE.items()
    }

    # limpia y asigna según el rol
    instance.user.groups.remove(*groups.values())
    group = groups.get(instance.role)
    if group:
        instance.user.groups.add(group)
