"""
In-memory filtering and sorting for the task list.

Tasks are loaded once per request (with assignees and groups prefetched) and
then narrowed here, so the order of predicates matches what the list page
shows: archived tasks first, then the dropdown filters, then the due window
and finally the tab.
"""

from datetime import date, timedelta

from django.utils import timezone

from base.views import display_name

ACTIVE_STATUSES = {"outstanding", "in_progress", "late"}
COMPLETED_STATUSES = {"approved", "completed"}
DUE_WINDOWS = (7, 30)

TAB_PREDICATES = {
    "active": lambda task: task.status in ACTIVE_STATUSES,
    "submitted": lambda task: task.status == "complete_for_approval",
    "completed": lambda task: task.status in COMPLETED_STATUSES,
    "archived": lambda task: task.status == "archived",
    "groups": lambda task: bool(_group_ids(task)),
}


def _assignee_ids(task):
    return [teacher.id for teacher in task.assigned_to.all()]


def _group_ids(task):
    return [group.id for group in task.assigned_to_groups.all()]


def _due_day(task):
    due = task.due_date
    if timezone.is_aware(due):
        due = timezone.localtime(due)
    return due.date()


def _is_selected(value):
    return value not in (None, "", "all")


def filter_tasks(
    tasks,
    tab="active",
    status="all",
    teacher_id="all",
    group_id="all",
    due_within=None,
    assigned_by_id="all",
    today=None,
):
    today = today or timezone.localdate()
    result = []

    for task in tasks:
        if task.status == "archived" and tab != "archived":
            continue

        if _is_selected(status) and task.status != status:
            continue

        if _is_selected(teacher_id) and int(teacher_id) not in _assignee_ids(task):
            continue

        if _is_selected(group_id) and int(group_id) not in _group_ids(task):
            continue

        if _is_selected(assigned_by_id) and task.assigned_by_id != int(assigned_by_id):
            continue

        if due_within in DUE_WINDOWS:
            due = _due_day(task)
            if not today <= due <= today + timedelta(days=due_within):
                continue

        predicate = TAB_PREDICATES.get(tab)
        if predicate and not predicate(task):
            continue

        result.append(task)

    return result


def _first_assignee_name(task):
    assignees = list(task.assigned_to.all())
    return assignees[0].name if assignees else ""


SORT_KEYS = {
    "title": lambda task: task.title.lower(),
    "assignedTo": lambda task: _first_assignee_name(task).lower(),
    "assignedBy": lambda task: display_name(task.assigned_by).lower(),
    "dueDate": lambda task: task.due_date,
    "status": lambda task: task.status.lower(),
    "description": lambda task: (task.description or "").lower(),
}


def sort_tasks(tasks, column="dueDate", direction="asc"):
    key = SORT_KEYS.get(column, SORT_KEYS["dueDate"])
    return sorted(tasks, key=key, reverse=direction == "desc")


def parse_due_window(value):
    try:
        days = int(value)
    except (TypeError, ValueError):
        return None
    return days if days in DUE_WINDOWS else None


def tasks_due_on(tasks, day: date):
    return [task for task in tasks if _due_day(task) == day]
