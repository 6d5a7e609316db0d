from django.db import models
from django.contrib.auth.models import User


class SchoolEvent(models.Model):
    class TargetType(models.TextChoices):
        CLASS = "class", "Class"
        GRADE = "grade", "Grade"
        PHASE = "phase", "Phase"
        SCHOOL = "school", "Whole School"

    title = models.CharField(max_length=255)
    description = models.TextField()
    start = models.DateTimeField()
    end = models.DateTimeField()
    location = models.CharField(max_length=255)
    target_type = models.CharField(max_length=10, choices=TargetType.choices)
    target_classes = models.ManyToManyField(
        "students.Classroom", related_name="events", blank=True
    )
    target_grades = models.ManyToManyField(
        "students.Grade", related_name="events", blank=True
    )
    target_phases = models.ManyToManyField(
        "students.Phase", related_name="events", blank=True
    )
    created_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, related_name="created_events"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["start"]

    def __str__(self):
        return self.title
