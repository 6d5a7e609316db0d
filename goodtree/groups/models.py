from django.db import models
from django.contrib.auth.models import User


class TeacherGroup(models.Model):
    name = models.CharField(max_length=150, unique=True)
    description = models.TextField(blank=True)
    members = models.ManyToManyField(
        "teachers.Teacher", related_name="staff_groups", blank=True
    )
    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_groups",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


def groups_for_teacher(teacher):
    return TeacherGroup.objects.filter(members=teacher).order_by("name")
