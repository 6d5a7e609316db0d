from datetime import timedelta

from django.http import HttpRequest
from django.shortcuts import render
from django.contrib.auth.decorators import login_required
from django.utils import timezone

from base.views import get_user_role, is_manager_role
from events.models import SchoolEvent
from incidents.models import Incident
from leave.models import LeaveRequest
from tasks.filters import filter_tasks, sort_tasks
from tasks.services import status_counts, visible_tasks

UPCOMING_TASK_DAYS = 7
UPCOMING_EVENT_DAYS = 14


@login_required
def dashboard_home(request: HttpRequest):
    """Main dashboard home view - provides navigation to different modules"""
    user = request.user
    role = get_user_role(user)

    context = {
        "dashboard_sections": get_dashboard_sections(role),
        "role": role,
        "user": user,
        "current_time": timezone.localtime(),
        **get_dashboard_data(user, role),
    }
    return render(request, "dashboard/index.html", context)


def get_dashboard_sections(role):
    """Get available dashboard sections based on user role"""
    staff = [
        {"name": "Tasks", "url": "/tasks/", "icon": "check-square"},
        {"name": "Task Calendar", "url": "/tasks/calendar/", "icon": "calendar"},
        {"name": "Groups", "url": "/groups/", "icon": "users"},
        {"name": "Incidents", "url": "/incidents/", "icon": "alert-triangle"},
        {"name": "Events", "url": "/events/", "icon": "calendar"},
        {"name": "Learner Development", "url": "/students/learner-development/", "icon": "book"},
        {"name": "Leave", "url": "/leave/", "icon": "sun"},
    ]
    sections = {
        "Teacher": staff,
        "Manager": staff,
        "Admin": staff
        + [
            {"name": "Administration", "url": "/administration/", "icon": "settings"},
            {"name": "Teacher Management", "url": "/teachers/management/", "icon": "user"},
            {"name": "Student Management", "url": "/students/management/", "icon": "users"},
            {"name": "Django Admin", "url": "/admin/", "icon": "cog"},
        ],
    }
    return sections.get(role, [])


def get_dashboard_data(user, role):
    """Get role-specific dashboard data and statistics"""
    now = timezone.now()
    today = timezone.localdate(now)
    tasks = list(visible_tasks(user, role, "all"))
    counts = status_counts(tasks)

    data = {
        "stats": {
            "outstanding": counts.get("outstanding", 0),
            "in_progress": counts.get("in_progress", 0),
            "complete_for_approval": counts.get("complete_for_approval", 0),
            "late": counts.get("late", 0),
        },
        "upcoming_tasks": sort_tasks(
            task
            for task in filter_tasks(
                tasks, tab="active", due_within=UPCOMING_TASK_DAYS, today=today
            )
            if task.due_date > now
        ),
        "upcoming_events": SchoolEvent.objects.filter(
            end__gte=now,
            start__lte=now + timedelta(days=UPCOMING_EVENT_DAYS),
        ).order_by("start"),
    }

    if is_manager_role(role):
        data["stats"]["pending_leave"] = LeaveRequest.objects.filter(
            status=LeaveRequest.Status.PENDING
        ).count()
        data["stats"]["open_incidents"] = Incident.objects.exclude(
            status=Incident.Status.RESOLVED
        ).count()

    return data
