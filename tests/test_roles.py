import pytest
from django.core.exceptions import PermissionDenied, ValidationError
from django.urls import reverse

from accounts import permissions as perms
from accounts.models import Profile
from accounts.utils.roles import change_role

pytestmark = pytest.mark.django_db


class TestCapabilityTable:
    def test_faculty_extends_student(self):
        student = perms.capabilities_for("student")
        faculty = perms.capabilities_for("faculty")
        assert student == {perms.SUBMIT_STUDY, perms.COMMENT}
        assert student < faculty
        assert faculty - student == {perms.ACCESS_ADMIN, perms.VALIDATE_STUDIES}

    def test_admin_has_everything(self):
        admin = perms.capabilities_for("admin")
        assert {perms.MANAGE_USERS, perms.MANAGE_STUDIES, perms.MANAGE_CATEGORIES, perms.DELETE_COMMENTS} <= admin

    def test_unknown_role_has_nothing(self):
        assert perms.capabilities_for(None) == frozenset()
        assert perms.capabilities_for("janitor") == frozenset()

    def test_menus_follow_capabilities(self):
        assert [i["url_name"] for i in perms.admin_nav_for("faculty")] == ["admin_submissions"]
        assert len(perms.admin_nav_for("admin")) == 4
        assert perms.admin_nav_for("student") == []
        assert "admin_dashboard" not in [i["url_name"] for i in perms.user_menu_for("student")]
        assert perms.user_menu_for(None) == []


class TestChangeRole:
    def test_admin_promotes_student(self, student, admin_user, client):
        client.force_login(student)
        assert client.get("/admin/submissions/").url == "/"

        change_role(student.profile, admin_user, Profile.Role.FACULTY)

        student.refresh_from_db()
        assert student.profile.role == Profile.Role.FACULTY
        assert student.groups.filter(name="Faculty").exists()
        assert client.get("/admin/submissions/").status_code == 200

    def test_admin_cannot_change_own_role(self, admin_user):
        with pytest.raises(PermissionDenied):
            change_role(admin_user.profile, admin_user, Profile.Role.STUDENT)
        admin_user.profile.refresh_from_db()
        assert admin_user.profile.role == Profile.Role.ADMIN

    def test_faculty_cannot_change_roles(self, student, faculty):
        with pytest.raises(PermissionDenied):
            change_role(student.profile, faculty, Profile.Role.ADMIN)

    def test_invalid_role(self, student, admin_user):
        with pytest.raises(ValidationError):
            change_role(student.profile, admin_user, "superuser")


class TestRoleAPI:
    def test_update_role(self, client, student, admin_user):
        client.force_login(admin_user)
        resp = client.post(reverse("api_update_user_role", args=[student.pk]), {"role": "faculty"})
        assert resp.status_code == 200
        assert resp.json()["profile"]["role"] == "faculty"

    def test_self_change_returns_403(self, client, admin_user):
        client.force_login(admin_user)
        resp = client.post(reverse("api_update_user_role", args=[admin_user.pk]), {"role": "student"})
        assert resp.status_code == 403
        assert resp.json() == {"ok": False, "error": "You cannot change your own role."}

    def test_bad_role_returns_field_errors(self, client, student, admin_user):
        client.force_login(admin_user)
        resp = client.post(reverse("api_update_user_role", args=[student.pk]), {"role": "owner"})
        assert resp.status_code == 400
        assert "role" in resp.json()["errors"]

    def test_users_page_filters(self, client, admin_user, student, faculty):
        client.force_login(admin_user)
        resp = client.get(reverse("admin_users"), {"role": "faculty"})
        assert resp.status_code == 200
        assert list(resp.context["profiles"]) == [faculty.profile]
        assert resp.context["stats"] == {"total": 3, "admins": 1, "faculty": 1, "students": 1}
