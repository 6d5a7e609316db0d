from django.db import models
from django.contrib.auth.models import User


DEFAULT_INCIDENT_TYPES = [
    ("bullying", "Bullying", "#F87171"),
    ("fighting", "Fighting", "#EF4444"),
    ("property_damage", "Property Damage", "#FB923C"),
    ("behavior", "Disruptive Behavior", "#FBBF24"),
    ("medical", "Medical Incident", "#60A5FA"),
    ("other", "Other", "#A3A3A3"),
]


class IncidentType(models.Model):
    code = models.SlugField(max_length=100, unique=True)
    name = models.CharField(max_length=100, unique=True)
    color = models.CharField(max_length=7, default="#6366F1")
    is_default = models.BooleanField(default=False)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Incident(models.Model):
    class Severity(models.TextChoices):
        MINOR = "minor", "Minor"
        MODERATE = "moderate", "Moderate"
        MAJOR = "major", "Major"
        CRITICAL = "critical", "Critical"

    class Status(models.TextChoices):
        OPEN = "open", "Open"
        UNDER_INVESTIGATION = "under_investigation", "Under Investigation"
        RESOLVED = "resolved", "Resolved"

    title = models.CharField(max_length=255)
    incident_type = models.ForeignKey(
        IncidentType, on_delete=models.PROTECT, related_name="incidents"
    )
    description = models.TextField()
    date = models.DateTimeField()
    location = models.CharField(max_length=255)

    initiators = models.ManyToManyField(
        "students.Student", related_name="initiated_incidents", blank=True
    )
    affected_students = models.ManyToManyField(
        "students.Student", related_name="affected_incidents", blank=True
    )
    witnesses = models.ManyToManyField(
        "students.Student", related_name="witnessed_incidents", blank=True
    )
    involved_teachers = models.ManyToManyField(
        "teachers.Teacher", related_name="incidents", blank=True
    )

    severity = models.CharField(
        max_length=10, choices=Severity.choices, default=Severity.MINOR
    )
    reported_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, related_name="reported_incidents"
    )
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.OPEN
    )
    resolution = models.TextField(blank=True)

    parent_notified = models.BooleanField(default=False)
    requires_parent_notification = models.BooleanField(default=False)
    requires_intervention = models.BooleanField(default=False)
    intervened = models.BooleanField(default=False)
    post_incident_intervention = models.TextField(blank=True)
    follow_up_actions = models.TextField(blank=True, help_text="One action per line")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.title} ({self.status})"

    @property
    def follow_up_list(self):
        return [line.strip() for line in self.follow_up_actions.splitlines() if line.strip()]
