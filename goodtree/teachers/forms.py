from django import forms
from django.contrib.auth.models import User
from django.contrib.auth.forms import UserCreationForm
from .models import Teacher, TeacherRole


class TeacherUserCreationForm(UserCreationForm):
    """Form for creating the login account of a new teacher"""

    first_name = forms.CharField(max_length=30, required=True)
    last_name = forms.CharField(max_length=30, required=True)
    email = forms.EmailField(required=True)

    class Meta:
        model = User
        fields = (
            "username",
            "first_name",
            "last_name",
            "email",
            "password1",
            "password2",
        )

    def clean_email(self):
        email = self.cleaned_data["email"].strip()
        if User.objects.filter(email__iexact=email).exists():
            raise forms.ValidationError("A user with this email already exists")
        return email


class TeacherProfileForm(forms.ModelForm):
    """Form for teacher profile details"""

    role = forms.ModelChoiceField(
        queryset=TeacherRole.objects.all(),
        required=False,
        widget=forms.Select(attrs={"class": "form-control"}),
    )

    class Meta:
        model = Teacher
        fields = ["role", "subject", "specialization", "department"]


class TeacherEditForm(forms.ModelForm):
    """Form for editing teacher details"""

    first_name = forms.CharField(max_length=30, required=False)
    last_name = forms.CharField(max_length=30, required=False)
    email = forms.EmailField(
        required=True,
        error_messages={
            "required": "Email is required",
            "invalid": "Please enter a valid email address",
        },
    )
    role = forms.ModelChoiceField(
        queryset=TeacherRole.objects.all(),
        required=True,
        error_messages={"required": "Teaching role is required"},
        widget=forms.Select(attrs={"class": "form-control"}),
    )

    class Meta:
        model = Teacher
        fields = ["role", "subject", "specialization", "department"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["subject"].required = True
        self.fields["subject"].error_messages["required"] = "Subject is required"
        if self.instance and self.instance.pk:
            self.fields["first_name"].initial = self.instance.user.first_name
            self.fields["last_name"].initial = self.instance.user.last_name
            self.fields["email"].initial = self.instance.user.email

    def clean_email(self):
        email = self.cleaned_data["email"].strip()
        others = User.objects.filter(email__iexact=email)
        if self.instance and self.instance.pk:
            others = others.exclude(pk=self.instance.user_id)
        if others.exists():
            raise forms.ValidationError("A user with this email already exists")
        return email

    def clean(self):
        cleaned_data = super().clean()
        first = (cleaned_data.get("first_name") or "").strip()
        last = (cleaned_data.get("last_name") or "").strip()
        if not first and not last:
            raise forms.ValidationError("Name is required")
        return cleaned_data


class TeacherRoleForm(forms.ModelForm):
    """Add or rename a teaching role"""

    class Meta:
        model = TeacherRole
        fields = ["name", "color"]
        widgets = {"color": forms.TextInput(attrs={"type": "color"})}

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["name"].error_messages["required"] = "Role name is required"
        self.fields["color"].required = False

    def clean_name(self):
        name = self.cleaned_data["name"].strip()
        if not name:
            raise forms.ValidationError("Role name is required")
        existing = TeacherRole.objects.filter(name__iexact=name)
        if self.instance.pk:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise forms.ValidationError("A role with this name already exists")
        return name

    def clean_color(self):
        return self.cleaned_data.get("color") or "#6366F1"
