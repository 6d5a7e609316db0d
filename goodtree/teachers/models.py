from django.db import models
from django.contrib.auth.models import User

from base.views import display_name


DEFAULT_TEACHER_ROLES = [
    ("administrator", "Administrator", "#3B82F6"),
    ("super_user", "Super User", "#10B981"),
    ("user", "User", "#6B7280"),
]


class TeacherRole(models.Model):
    code = models.SlugField(max_length=100, unique=True)
    name = models.CharField(max_length=100, unique=True)
    color = models.CharField(max_length=7, default="#6366F1")
    is_default = models.BooleanField(default=False)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Teacher(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE)
    role = models.ForeignKey(
        TeacherRole,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="teachers",
    )
    subject = models.CharField(max_length=100, blank=True)
    specialization = models.CharField(max_length=100, blank=True)
    department = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["user__first_name", "user__last_name"]

    @property
    def name(self):
        return display_name(self.user)

    @property
    def email(self):
        return self.user.email

    @property
    def role_label(self):
        return f"{self.subject} Teacher" if self.subject else "Teacher"

    def __str__(self):
        return self.name
