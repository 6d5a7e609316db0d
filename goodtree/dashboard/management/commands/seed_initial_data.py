from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.contrib.auth.models import User, Group
from django.db import transaction
from django.utils import timezone

from administration.models import CampusLocation, DEFAULT_CAMPUS_LOCATIONS
from events.models import SchoolEvent
from groups.models import TeacherGroup
from incidents.models import Incident, IncidentType, DEFAULT_INCIDENT_TYPES
from leave.models import LeaveRequest
from students.models import (
    Classroom,
    Grade,
    Phase,
    Student,
    DEFAULT_GRADES,
    DEFAULT_PHASES,
)
from tasks.services import create_task, ensure_default_statuses
from teachers.models import TeacherRole, DEFAULT_TEACHER_ROLES
from teachers.services import convert_user_to_teacher

DEMO_PASSWORD = "password123"


class Command(BaseCommand):
    help = "Seed default lookup data; --demo adds sample staff, students and records"

    def add_arguments(self, parser):
        parser.add_argument(
            "--demo", action="store_true", help="Also create sample demo records"
        )

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write("Seeding task statuses...")
        created = ensure_default_statuses()
        self.stdout.write(f"Created {created} task status(es)")

        self.stdout.write("Seeding incident types...")
        self.seed_lookup(IncidentType, DEFAULT_INCIDENT_TYPES)

        self.stdout.write("Seeding teacher roles...")
        self.seed_lookup(TeacherRole, DEFAULT_TEACHER_ROLES)

        self.stdout.write("Seeding school structure...")
        self.seed_structure()

        self.stdout.write("Seeding campus locations...")
        for name, address in DEFAULT_CAMPUS_LOCATIONS:
            CampusLocation.objects.get_or_create(name=name, defaults={"address": address})

        if options["demo"]:
            self.stdout.write("Seeding demo records...")
            self.seed_demo()

        self.stdout.write(self.style.SUCCESS("Data seeding completed successfully!"))

    def seed_lookup(self, model, defaults):
        for code, name, color in defaults:
            _, created = model.objects.get_or_create(
                code=code, defaults={"name": name, "color": color, "is_default": True}
            )
            if created:
                self.stdout.write(f"Created {model._meta.verbose_name}: {name}")

    def seed_structure(self):
        for order, name in enumerate(DEFAULT_GRADES):
            Grade.objects.get_or_create(name=name, defaults={"order": order})

        for phase_name, grade_names in DEFAULT_PHASES:
            phase, created = Phase.objects.get_or_create(name=phase_name)
            if created:
                phase.grades.set(Grade.objects.filter(name__in=grade_names))
                self.stdout.write(f"Created phase: {phase_name}")

    def seed_demo(self):
        now = timezone.now()
        groups = {name: Group.objects.get_or_create(name=name)[0] for name in ("Admin", "Manager")}

        staff = [
            ("jsmith", "John", "Smith", "john.smith@goodtree.edu", "Mathematics", "Manager"),
            ("mjones", "Mary", "Jones", "mary.jones@goodtree.edu", "English", None),
            ("pkhan", "Priya", "Khan", "priya.khan@goodtree.edu", "Science", None),
        ]
        user_role = TeacherRole.objects.filter(code="user").first()
        teachers = []
        for username, first, last, email, subject, group in staff:
            user, created = User.objects.get_or_create(
                username=username,
                defaults={"first_name": first, "last_name": last, "email": email},
            )
            if created:
                user.set_password(DEMO_PASSWORD)
                user.save()
            if group:
                user.groups.add(groups[group])
            teachers.append(
                convert_user_to_teacher(user, subject=subject, role=user_role)
            )

        manager = teachers[0].user
        science, _ = TeacherGroup.objects.get_or_create(
            name="Science Department", defaults={"created_by": manager}
        )
        science.members.add(teachers[2])

        grade = Grade.objects.get(name="Grade 9")
        classroom, _ = Classroom.objects.get_or_create(name="9A", defaults={"grade": grade})
        pupils = []
        for first, last in [("Amit", "Kumar"), ("Sneha", "Patel"), ("Liam", "Brown")]:
            student, _ = Student.objects.get_or_create(
                email=f"{first.lower()}.{last.lower()}@students.goodtree.edu",
                defaults={
                    "first_name": first,
                    "last_name": last,
                    "grade": grade,
                    "classroom": classroom,
                    "guardian": f"Parent of {first}",
                    "guardian_email": f"{last.lower()}.family@example.com",
                    "guardian_phone": "555-0100",
                    "gpa": Decimal("3.20"),
                    "attendance": Decimal("96.50"),
                },
            )
            pupils.append(student)

        if not manager.assigned_tasks.exists():
            create_task(
                title="Submit term reports",
                description="Upload the end of term reports for your classes.",
                due_date=now + timedelta(days=5),
                created_by=manager,
                assigned_to=[teachers[1]],
                groups=[science],
            )

        bullying = IncidentType.objects.get(code="bullying")
        if not Incident.objects.exists():
            incident = Incident.objects.create(
                title="Name calling at break",
                incident_type=bullying,
                description="Verbal bullying reported by a classmate.",
                date=now - timedelta(days=1),
                location=CampusLocation.objects.order_by("name").first().name,
                reported_by=teachers[1].user,
                requires_parent_notification=True,
            )
            incident.initiators.add(pupils[0])
            incident.affected_students.add(pupils[1])

        if not SchoolEvent.objects.exists():
            SchoolEvent.objects.create(
                title="Sports Day",
                description="Annual whole school sports day.",
                start=now + timedelta(days=10),
                end=now + timedelta(days=10, hours=6),
                location="Main field",
                target_type=SchoolEvent.TargetType.SCHOOL,
                created_by=manager,
            )

        if not LeaveRequest.objects.exists():
            LeaveRequest.objects.create(
                teacher=teachers[2],
                leave_type=LeaveRequest.LeaveType.ANNUAL,
                start_date=(now + timedelta(days=20)).date(),
                end_date=(now + timedelta(days=22)).date(),
                reason="Family visit",
            )
