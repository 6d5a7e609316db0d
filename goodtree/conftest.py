from datetime import datetime, timedelta

import pytest
from django.contrib.auth.models import Group, User
from django.utils import timezone

from incidents.models import Incident, IncidentType
from students.models import Classroom, Grade, Phase, Student
from tasks.services import create_task, ensure_default_statuses
from teachers.models import Teacher

PASSWORD = "s3cret-pass-123"


def make_user(username, role=None, first_name="", last_name=""):
    user = User.objects.create_user(
        username=username,
        email=f"{username}@goodtree.edu",
        password=PASSWORD,
        first_name=first_name,
        last_name=last_name,
    )
    if role:
        user.groups.add(Group.objects.get_or_create(name=role)[0])
    return user


def make_teacher(username, first_name="", last_name="", role="Teacher", **profile):
    user = make_user(username, role, first_name, last_name)
    return Teacher.objects.create(user=user, **profile)


def aware(*args):
    return timezone.make_aware(datetime(*args))


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path):
    settings.MEDIA_ROOT = tmp_path / "media"


@pytest.fixture
def school_admin(db):
    return make_user("head", "Admin", "Helen", "Head")


@pytest.fixture
def manager(db):
    return make_user("deputy", "Manager", "Dan", "Deputy")


@pytest.fixture
def teacher(db):
    return make_teacher("mjones", "Mary", "Jones", subject="English")


@pytest.fixture
def other_teacher(db):
    return make_teacher("pkhan", "Priya", "Khan", subject="Science")


@pytest.fixture
def statuses(db):
    ensure_default_statuses()


@pytest.fixture
def grade(db):
    return Grade.objects.create(name="Grade 9", order=9)


@pytest.fixture
def classroom(grade):
    return Classroom.objects.create(name="9A", grade=grade)


@pytest.fixture
def phase(grade):
    phase = Phase.objects.create(name="High School")
    phase.grades.add(grade)
    return phase


@pytest.fixture
def student(grade, classroom):
    return Student.objects.create(
        first_name="Amit",
        last_name="Kumar",
        email="amit.kumar@students.goodtree.edu",
        grade=grade,
        classroom=classroom,
    )


@pytest.fixture
def another_student(grade):
    return Student.objects.create(
        first_name="Sneha",
        last_name="Patel",
        email="sneha.patel@students.goodtree.edu",
        grade=grade,
    )


@pytest.fixture
def bullying(db):
    return IncidentType.objects.create(
        code="bullying", name="Bullying", color="#F87171", is_default=True
    )


@pytest.fixture
def incident_factory(bullying, teacher):
    def factory(title="Name calling", initiators=(), affected=(), **fields):
        fields.setdefault("incident_type", bullying)
        fields.setdefault("description", "Reported at break time")
        fields.setdefault("date", timezone.now())
        fields.setdefault("location", "Barnstaple Campus")
        fields.setdefault("reported_by", teacher.user)
        incident = Incident.objects.create(title=title, **fields)
        incident.initiators.set(initiators)
        incident.affected_students.set(affected)
        return incident

    return factory


@pytest.fixture
def task_factory(statuses, manager):
    def factory(title="Mark essays", assigned_to=(), groups=(), due_in_days=3, **fields):
        fields.setdefault("created_by", manager)
        fields.setdefault("description", "Mark and return the essays")
        return create_task(
            title=title,
            due_date=timezone.now() + timedelta(days=due_in_days),
            assigned_to=assigned_to,
            groups=groups,
            **fields,
        )

    return factory
