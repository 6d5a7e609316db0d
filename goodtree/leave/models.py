from django.db import models
from django.contrib.auth.models import User


class LeaveRequest(models.Model):
    class LeaveType(models.TextChoices):
        SICK = "sick", "Sick Leave"
        ANNUAL = "annual", "Annual Leave"
        COMPASSIONATE = "compassionate", "Compassionate Leave"
        STUDY = "study", "Study Leave"
        OTHER = "other", "Other Leave"

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"
        CANCELLED = "cancelled", "Cancelled"

    teacher = models.ForeignKey(
        "teachers.Teacher", on_delete=models.CASCADE, related_name="leave_requests"
    )
    leave_type = models.CharField(
        max_length=20, choices=LeaveType.choices, default=LeaveType.SICK
    )
    start_date = models.DateField()
    end_date = models.DateField()
    reason = models.TextField()
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.PENDING
    )
    reviewed_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviewed_leave_requests",
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    review_notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(start_date__lte=models.F("end_date")),
                name="leave_start_before_end",
            )
        ]

    def __str__(self):
        return f"{self.teacher} - {self.start_date} to {self.end_date} - {self.status}"

    @property
    def duration_days(self):
        return (self.end_date - self.start_date).days + 1


def leave_document_path(instance, filename):
    return f"leave/{instance.leave_request.teacher.user.username}/{filename}"


class LeaveDocument(models.Model):
    leave_request = models.ForeignKey(
        LeaveRequest, on_delete=models.CASCADE, related_name="documents"
    )
    file = models.FileField(upload_to=leave_document_path)
    uploaded_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.file.name.split("/")[-1]
