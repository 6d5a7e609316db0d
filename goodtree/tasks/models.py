import re

from django.db import models
from django.contrib.auth.models import User
from django.utils.functional import cached_property


DEFAULT_TASK_STATUSES = [
    ("outstanding", "Outstanding", "#FCD34D"),
    ("in_progress", "In Progress", "#60A5FA"),
    ("complete_for_approval", "Complete for approval", "#34D399"),
    ("late", "Late", "#F87171"),
    ("approved", "Approved", "#10B981"),
    ("archived", "Archived", "#9CA3AF"),
]


def status_code_for(name):
    return re.sub(r"\s+", "_", name.strip().lower())


def status_label_for(code, names):
    return names.get(code) or code.replace("_", " ").capitalize()


class TaskStatus(models.Model):
    code = models.SlugField(max_length=100, unique=True)
    name = models.CharField(max_length=100)
    color = models.CharField(max_length=7, default="#6366F1")
    is_default = models.BooleanField(default=False)
    order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["order"]
        verbose_name_plural = "task statuses"

    def __str__(self):
        return self.name


class Task(models.Model):
    class Priority(models.TextChoices):
        LOW = "low", "Low"
        MEDIUM = "medium", "Medium"
        HIGH = "high", "High"
        URGENT = "urgent", "Urgent"

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    assigned_to = models.ManyToManyField(
        "teachers.Teacher", related_name="tasks", blank=True
    )
    assigned_to_groups = models.ManyToManyField(
        "groups.TeacherGroup", related_name="tasks", blank=True
    )
    assigned_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, related_name="assigned_tasks"
    )
    created_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, related_name="created_tasks"
    )
    due_date = models.DateTimeField()
    status = models.CharField(max_length=100, default="outstanding")
    priority = models.CharField(
        max_length=10, choices=Priority.choices, default=Priority.MEDIUM
    )
    resolution = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["due_date"]

    def __str__(self):
        return f"{self.title} ({self.status})"

    @cached_property
    def status_label(self):
        names = dict(TaskStatus.objects.filter(code=self.status).values_list("code", "name"))
        return status_label_for(self.status, names)


def task_attachment_path(instance, filename):
    return f"tasks/{instance.task_id}/attachments/{filename}"


class TaskAttachment(models.Model):
    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name="attachments")
    name = models.CharField(max_length=255)
    file = models.FileField(upload_to=task_attachment_path)
    uploaded_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name


class DocumentLink(models.Model):
    task = models.ForeignKey(
        Task, on_delete=models.CASCADE, related_name="document_links"
    )
    title = models.CharField(max_length=255)
    url = models.URLField(max_length=500)
    description = models.CharField(max_length=500, blank=True)

    def __str__(self):
        return self.title
