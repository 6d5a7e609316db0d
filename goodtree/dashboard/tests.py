from datetime import date

import pytest
from django.core.management import call_command
from django.urls import reverse

from administration.models import CampusLocation
from incidents.models import Incident, IncidentType
from leave.models import LeaveRequest
from students.models import Grade, Phase
from tasks.models import Task, TaskStatus
from teachers.models import Teacher, TeacherRole
from .views import get_dashboard_data, get_dashboard_sections

pytestmark = pytest.mark.django_db


def test_sections_depend_on_role():
    teacher_sections = get_dashboard_sections("Teacher")
    admin_sections = get_dashboard_sections("Admin")

    assert len(admin_sections) > len(teacher_sections)
    assert "Administration" in [s["name"] for s in admin_sections]
    assert "Administration" not in [s["name"] for s in teacher_sections]
    assert get_dashboard_sections("Parent") == []


def test_teacher_stats_cover_own_tasks(task_factory, teacher, other_teacher):
    task_factory(assigned_to=[teacher])
    task_factory(assigned_to=[teacher], status="late", due_in_days=-1)
    task_factory(assigned_to=[other_teacher])

    data = get_dashboard_data(teacher.user, "Teacher")

    assert data["stats"]["outstanding"] == 1
    assert data["stats"]["late"] == 1
    assert "pending_leave" not in data["stats"]
    assert len(data["upcoming_tasks"]) == 1


def test_upcoming_tasks_leave_out_submitted_and_overdue_work(task_factory, teacher):
    task_factory(title="Submitted", assigned_to=[teacher], status="complete_for_approval", due_in_days=2)
    task_factory(title="Approved", assigned_to=[teacher], status="approved", due_in_days=2)
    task_factory(title="Overdue", assigned_to=[teacher], status="late", due_in_days=-1)
    task_factory(title="Next week", assigned_to=[teacher], status="in_progress", due_in_days=6)
    task_factory(title="Tomorrow", assigned_to=[teacher], due_in_days=1)

    upcoming = get_dashboard_data(teacher.user, "Teacher")["upcoming_tasks"]

    assert [task.title for task in upcoming] == ["Tomorrow", "Next week"]


def test_manager_stats_include_leave_and_incidents(manager, teacher, incident_factory, statuses):
    LeaveRequest.objects.create(
        teacher=teacher,
        leave_type=LeaveRequest.LeaveType.ANNUAL,
        start_date=date(2025, 7, 1),
        end_date=date(2025, 7, 4),
        reason="Holiday",
    )
    incident_factory()

    stats = get_dashboard_data(manager, "Manager")["stats"]

    assert stats["pending_leave"] == 1
    assert stats["open_incidents"] == 1


def test_dashboard_page_renders(client, teacher, statuses):
    client.force_login(teacher.user)
    response = client.get(reverse("dashboard:dashboard"))

    assert response.status_code == 200
    assert response.context["role"] == "Teacher"


def test_dashboard_requires_login(client):
    response = client.get(reverse("dashboard:dashboard"))
    assert response.status_code == 302


def test_seed_initial_data_is_repeatable():
    call_command("seed_initial_data")
    call_command("seed_initial_data")

    assert TaskStatus.objects.count() == 6
    assert IncidentType.objects.filter(is_default=True).count() == 6
    assert TeacherRole.objects.count() == 3
    assert Grade.objects.count() == 16
    assert Phase.objects.get(name="Middle School").grades.count() == 3
    assert CampusLocation.objects.count() == 3


def test_seed_demo_data():
    call_command("seed_initial_data", demo=True)

    assert Teacher.objects.count() == 3
    assert Task.objects.get().assigned_to.count() == 2
    assert Incident.objects.get().initiators.count() == 1
    assert LeaveRequest.objects.get().status == LeaveRequest.Status.PENDING
