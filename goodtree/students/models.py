from django.db import models
from django.contrib.auth.models import User
from django.core.validators import MinValueValidator, MaxValueValidator


DEFAULT_GRADES = [
    "BC",
    "M1",
    "M2",
    "M3",
    "Grade 1",
    "Grade 2",
    "Grade 3",
    "Grade 4",
    "Grade 5",
    "Grade 6",
    "Grade 7",
    "Grade 8",
    "Grade 9",
    "Grade 10",
    "Grade 11",
    "Grade 12",
]

DEFAULT_PHASES = [
    ("Elementary School", ["Grade 1", "Grade 2", "Grade 3", "Grade 4", "Grade 5"]),
    ("Middle School", ["Grade 6", "Grade 7", "Grade 8"]),
    ("High School", ["Grade 9", "Grade 10", "Grade 11", "Grade 12"]),
]


class Grade(models.Model):
    name = models.CharField(max_length=50, unique=True)
    order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["order", "name"]

    def __str__(self):
        return self.name


class Phase(models.Model):
    name = models.CharField(max_length=100, unique=True)
    grades = models.ManyToManyField(Grade, related_name="phases", blank=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Classroom(models.Model):
    name = models.CharField(max_length=50, unique=True)
    grade = models.ForeignKey(
        Grade,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="classrooms",
    )

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Student(models.Model):
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(unique=True)
    grade = models.ForeignKey(
        Grade, on_delete=models.PROTECT, related_name="students"
    )
    classroom = models.ForeignKey(
        Classroom,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="students",
    )
    guardian = models.CharField(max_length=200, blank=True)
    guardian_email = models.EmailField(blank=True)
    guardian_phone = models.CharField(max_length=30, blank=True)
    enrollment_date = models.DateField(null=True, blank=True)
    gpa = models.DecimalField(
        max_digits=3,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(4)],
    )
    attendance = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["last_name", "first_name"]

    @property
    def name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def homeroom(self):
        return self.classroom.name if self.classroom else ""

    def __str__(self):
        return self.name


class StudentDocument(models.Model):
    class DocumentType(models.TextChoices):
        PARENT_MEETING = "parent_meeting", "Parent Meeting Notes"
        WELLBEING = "wellbeing", "Wellbeing Entry"
        ACADEMIC_INTERVENTION = "academic_intervention", "Academic Intervention"

    student = models.ForeignKey(
        Student, on_delete=models.CASCADE, related_name="documents"
    )
    doc_type = models.CharField(max_length=30, choices=DocumentType.choices)
    title = models.CharField(max_length=255)
    content = models.TextField(blank=True)
    created_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, related_name="student_documents"
    )

    # Wellbeing
    observation = models.TextField(blank=True)
    reflections = models.TextField(blank=True)

    # Academic intervention
    subjects = models.CharField(max_length=255, blank=True)
    academic_concerns = models.TextField(blank=True)
    proposed_interventions = models.TextField(blank=True)

    # Parent meeting
    staff_attendees = models.ManyToManyField(
        "teachers.Teacher", related_name="attended_meetings", blank=True
    )
    parent_guardians = models.CharField(max_length=255, blank=True)
    concerns = models.TextField(blank=True)
    agreed_next_steps = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.student} - {self.title}"
