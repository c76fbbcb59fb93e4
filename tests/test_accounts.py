from io import BytesIO

import pytest
from django.contrib.auth.tokens import default_token_generator
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from django.utils.encoding import force_bytes
from django.utils.http import urlsafe_base64_encode
from PIL import Image

from accounts.models import Profile, User

pytestmark = pytest.mark.django_db

ERROR_URL = "/login/?error=Invalid+or+expired+reset+link"


def _callback(user, flow, token=None, **extra):
    params = {
        "uid": urlsafe_base64_encode(force_bytes(user.pk)),
        "token": token or default_token_generator.make_token(user),
        "type": flow,
    }
    params.update(extra)
    return reverse("auth_callback"), params


class TestRegistration:
    def _payload(self, **overrides):
        data = {
            "full_name": "Nina New",
            "email": "Nina@Spark.test",
            "password": "correct-horse-42",
            "confirm_password": "correct-horse-42",
            "department": "College of Nursing",
            "student_id": "",
        }
        data.update(overrides)
        return data

    def test_creates_user_and_profile(self, client):
        resp = client.post(reverse("register"), self._payload())
        assert resp.status_code == 302
        user = User.objects.get(email="nina@spark.test")
        assert user.is_active
        assert user.check_password("correct-horse-42")
        assert user.profile.full_name == "Nina New"
        assert user.profile.department == "College of Nursing"
        assert user.profile.student_id is None
        assert user.profile.role == Profile.Role.STUDENT

    def test_password_mismatch(self, client):
        resp = client.post(reverse("register"), self._payload(confirm_password="something-else"))
        assert resp.status_code == 200
        assert "confirm_password" in resp.context["form"].errors
        assert not User.objects.exists()

    def test_duplicate_email(self, client, student):
        resp = client.post(reverse("register"), self._payload(email="STUDENT@spark.test"))
        assert "email" in resp.context["form"].errors

    def test_short_password(self, client):
        resp = client.post(reverse("register"), self._payload(password="short", confirm_password="short"))
        assert "password" in resp.context["form"].errors

    def test_email_confirmation_flow(self, client, settings, mailoutbox):
        settings.REQUIRE_EMAIL_CONFIRMATION = True
        client.post(reverse("register"), self._payload())
        user = User.objects.get(email="nina@spark.test")
        assert user.is_active is False
        assert len(mailoutbox) == 1
        assert "/auth/callback/?uid=" in mailoutbox[0].body
        assert "type=signup" in mailoutbox[0].body

        url, params = _callback(user, "signup")
        resp = client.get(url, params)
        assert resp.status_code == 302
        assert resp.url == "/"
        user.refresh_from_db()
        assert user.is_active is True


class TestAuthCallback:
    def test_recovery_goes_to_reset_password(self, client, student):
        url, params = _callback(student, "recovery")
        resp = client.get(url, params)
        assert resp.status_code == 302
        assert resp.url == reverse("reset_password")
        assert client.session["_auth_user_id"] == str(student.pk)

    def test_next_same_host(self, client, student):
        url, params = _callback(student, "magiclink", next="/studies/")
        assert client.get(url, params).url == "/studies/"

    def test_external_next_falls_back_to_root(self, client, student):
        url, params = _callback(student, "magiclink", next="https://evil.example/")
        assert client.get(url, params).url == "/"

    def test_bad_token(self, client, student):
        url, params = _callback(student, "recovery", token="1-bogus")
        resp = client.get(url, params)
        assert resp.url == ERROR_URL
        assert "_auth_user_id" not in client.session

    def test_missing_params(self, client):
        assert client.get(reverse("auth_callback")).url == ERROR_URL

    def test_unknown_user(self, client):
        resp = client.get(reverse("auth_callback"), {"uid": "OTk5OTk", "token": "x-y", "type": "recovery"})
        assert resp.url == ERROR_URL

    def test_reset_password_after_recovery(self, client, student):
        url, params = _callback(student, "recovery")
        client.get(url, params)
        resp = client.post(
            reverse("reset_password"),
            {"new_password1": "brand-new-pass-99", "new_password2": "brand-new-pass-99"},
        )
        assert resp.status_code == 302
        student.refresh_from_db()
        assert student.check_password("brand-new-pass-99")

    def test_forgot_password_email_links_to_callback(self, client, student, mailoutbox):
        resp = client.post(reverse("password_reset"), {"email": student.email})
        assert resp.status_code == 302
        assert len(mailoutbox) == 1
        assert "/auth/callback/?uid=" in mailoutbox[0].body
        assert "type=recovery" in mailoutbox[0].body


class TestProfile:
    def test_update_profile_fields(self, client, student):
        client.force_login(student)
        resp = client.post(reverse("profile"), {"full_name": "  Ana Updated ", "department": "", "student_id": "2021-0001"})
        assert resp.status_code == 302
        student.profile.refresh_from_db()
        assert student.profile.full_name == "Ana Updated"
        assert student.profile.department is None
        assert student.profile.student_id == "2021-0001"

    def test_empty_name_rejected(self, client, student):
        client.force_login(student)
        resp = client.post(reverse("profile"), {"full_name": "   ", "department": "X"})
        assert resp.status_code == 400

    def test_avatar_upload(self, client, student):
        buf = BytesIO()
        Image.new("RGB", (8, 8), "red").save(buf, format="PNG")
        upload = SimpleUploadedFile("me.png", buf.getvalue(), content_type="image/png")

        client.force_login(student)
        resp = client.post(reverse("profile"), {"avatar": upload})
        assert resp.status_code == 302
        student.profile.refresh_from_db()
        assert student.profile.avatar.name == f"avatars/{student.pk}/avatar.png"

    def test_avatar_wrong_type_rejected(self, client, student):
        buf = BytesIO()
        Image.new("RGB", (8, 8), "red").save(buf, format="GIF")
        upload = SimpleUploadedFile("me.gif", buf.getvalue(), content_type="image/gif")
        client.force_login(student)
        resp = client.post(reverse("profile"), {"avatar": upload})
        assert resp.status_code == 400

    def test_notifications_mark_all_read(self, client, published_study, faculty):
        from studies.threads import post_comment

        post_comment(published_study, faculty, "Nice work")
        author = published_study.author
        client.force_login(author)
        assert client.get(reverse("profile")).context["unread_count"] == 1

        resp = client.post(reverse("api_mark_notifications_read"))
        assert resp.json() == {"ok": True, "updated": 1}
        assert author.notifications.filter(is_read=False).count() == 0
