from django import forms
from django.conf import settings
from django.contrib.auth import get_user_model, password_validation

from .models import Profile


class RegisterForm(forms.Form):
    full_name = forms.CharField(min_length=2, max_length=160)
    email = forms.EmailField()
    password = forms.CharField(widget=forms.PasswordInput, min_length=8)
    confirm_password = forms.CharField(widget=forms.PasswordInput)
    department = forms.CharField(max_length=160)
    student_id = forms.CharField(required=False, max_length=40)

    error_messages = {
        "password_mismatch": "Passwords do not match.",
        "email_taken": "An account with this email already exists.",
    }

    def clean_email(self):
        email = self.cleaned_data["email"].strip().lower()
        if get_user_model().objects.filter(email__iexact=email).exists():
            raise forms.ValidationError(self.error_messages["email_taken"])
        return email

    def clean(self):
        cleaned = super().clean()
        password = cleaned.get("password")
        confirm = cleaned.get("confirm_password")
        if password and confirm and password != confirm:
            self.add_error("confirm_password", self.error_messages["password_mismatch"])
        elif password:
            try:
                password_validation.validate_password(password)
            except forms.ValidationError as e:
                self.add_error("password", e)
        return cleaned

    def save(self):
        data = self.cleaned_data
        user = get_user_model().objects.create_user(
            email=data["email"],
            password=data["password"],
        )
        profile = user.profile
        profile.full_name = data["full_name"].strip()
        profile.department = data["department"].strip()
        profile.student_id = (data.get("student_id") or "").strip() or None
        profile.save(update_fields=["full_name", "department", "student_id", "updated_at"])
        return user


class ProfileForm(forms.ModelForm):
    class Meta:
        model = Profile
        fields = ["full_name", "department", "student_id"]

    def clean_full_name(self):
        name = (self.cleaned_data.get("full_name") or "").strip()
        if not name:
            raise forms.ValidationError("Name cannot be empty.")
        return name

    def clean_department(self):
        return (self.cleaned_data.get("department") or "").strip() or None

    def clean_student_id(self):
        return (self.cleaned_data.get("student_id") or "").strip() or None


class AvatarForm(forms.Form):
    ALLOWED_TYPES = ("image/jpeg", "image/png", "image/webp")

    avatar = forms.ImageField(
        widget=forms.ClearableFileInput(attrs={"accept": "image/jpeg,image/png,image/webp"}),
    )

    def clean_avatar(self):
        f = self.cleaned_data["avatar"]
        content_type = (getattr(f, "content_type", "") or "").lower()
        if content_type not in self.ALLOWED_TYPES:
            raise forms.ValidationError("Only JPG, PNG, or WebP images are accepted.")
        if f.size > settings.MAX_AVATAR_MB * 1024 * 1024:
            raise forms.ValidationError(f"Image must be under {settings.MAX_AVATAR_MB} MB.")
        return f


class RoleChangeForm(forms.Form):
    role = forms.ChoiceField(choices=Profile.Role.choices)
