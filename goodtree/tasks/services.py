import logging

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction
from django.db.models import Count

from base.views import is_manager_role
from teachers.models import Teacher
from .models import DocumentLink, Task, TaskStatus, DEFAULT_TASK_STATUSES, status_label_for

logger = logging.getLogger(__name__)

LINKS_INCOMPLETE = "Please provide both title and URL for all document links"


def expand_assignees(teachers, groups):
    """Direct assignees plus every current member of the given groups."""
    assignees = {teacher.id: teacher for teacher in teachers}
    for group in groups:
        for member in group.members.all():
            assignees.setdefault(member.id, member)
    return list(assignees.values())


@transaction.atomic
def create_task(
    *,
    title,
    due_date,
    created_by,
    description="",
    assigned_to=(),
    groups=(),
    priority=Task.Priority.MEDIUM,
    status="outstanding",
    assigned_by=None,
):
    task = Task.objects.create(
        title=title,
        description=description,
        due_date=due_date,
        priority=priority,
        status=status,
        created_by=created_by,
        assigned_by=assigned_by or created_by,
    )
    task.assigned_to_groups.set(groups)
    task.assigned_to.set(expand_assignees(assigned_to, groups))
    logger.info(
        "Task %s created by %s for %d assignee(s)",
        task.id,
        created_by.username,
        task.assigned_to.count(),
    )
    return task


@transaction.atomic
def update_task(task, *, assigned_to=None, groups=None, **fields):
    for field, value in fields.items():
        setattr(task, field, value)
    task.save()

    if groups is not None:
        task.assigned_to_groups.set(groups)
    if assigned_to is not None or groups is not None:
        direct = assigned_to if assigned_to is not None else task.assigned_to.all()
        current_groups = groups if groups is not None else task.assigned_to_groups.all()
        task.assigned_to.set(expand_assignees(direct, current_groups))

    logger.info("Task %s updated", task.id)
    return task


def clean_links(links):
    """Drop blank rows and reject rows with only one of title and URL."""
    cleaned = []
    for link in links:
        title = (link.get("title") or "").strip()
        url = (link.get("url") or "").strip()
        description = (link.get("description") or "").strip()
        if not title and not url and not description:
            continue
        if not title or not url:
            raise ValidationError(LINKS_INCOMPLETE)
        cleaned.append({"title": title, "url": url, "description": description})
    return cleaned


@transaction.atomic
def submit_task(task, resolution, links=()):
    cleaned = clean_links(links)
    task.resolution = resolution
    task.status = "complete_for_approval"
    task.save(update_fields=["resolution", "status", "updated_at"])
    for link in cleaned:
        DocumentLink.objects.create(task=task, **link)
    logger.info("Task %s submitted with %d new link(s)", task.id, len(cleaned))
    return task


def _require_assigner(task, user):
    if task.assigned_by_id != user.id:
        raise PermissionDenied("Only the person who assigned this task can review it")


def approve_task(task, user):
    _require_assigner(task, user)
    if task.status != "complete_for_approval":
        raise ValidationError("Only tasks awaiting approval can be approved")
    task.status = "approved"
    task.save(update_fields=["status", "updated_at"])
    logger.info("Task %s approved by %s", task.id, user.username)
    return task


def reject_task(task, user):
    _require_assigner(task, user)
    task.status = "in_progress"
    task.save(update_fields=["status", "updated_at"])
    logger.info("Task %s sent back by %s", task.id, user.username)
    return task


def set_archived(task, archive):
    task.status = "archived" if archive else "complete_for_approval"
    task.save(update_fields=["status", "updated_at"])
    logger.info("Task %s %s", task.id, "archived" if archive else "unarchived")
    return task


def visible_tasks(user, role, tab="active"):
    tasks = Task.objects.select_related("assigned_by", "created_by").prefetch_related(
        "assigned_to__user", "assigned_to_groups"
    )

    if is_manager_role(role):
        if tab == "groups":
            tasks = tasks.annotate(group_count=Count("assigned_to_groups")).filter(
                group_count__gt=0
            )
        return tasks

    if tab == "created":
        return tasks.filter(created_by=user)
    if tab == "to_review":
        return tasks.filter(assigned_by=user, status="complete_for_approval")

    teacher = Teacher.objects.filter(user=user).first()
    if teacher is None:
        return tasks.none()
    if tab == "teacher_groups":
        return tasks.filter(assigned_to_groups__members=teacher).distinct()
    return tasks.filter(assigned_to=teacher)


def attach_status_labels(tasks):
    """Fill in ``status_label`` for a batch of tasks with a single query."""
    names = dict(TaskStatus.objects.values_list("code", "name"))
    for task in tasks:
        task.status_label = status_label_for(task.status, names)
    return tasks


def can_view_task(task, user, role):
    if is_manager_role(role):
        return True
    if user.id in (task.created_by_id, task.assigned_by_id):
        return True
    return task.assigned_to.filter(user=user).exists()


def status_counts(tasks):
    counts = {code: 0 for code, _, _ in DEFAULT_TASK_STATUSES}
    for task in tasks:
        counts[task.status] = counts.get(task.status, 0) + 1
    return counts


def ensure_default_statuses():
    created = 0
    for order, (code, name, color) in enumerate(DEFAULT_TASK_STATUSES):
        _, was_created = TaskStatus.objects.get_or_create(
            code=code,
            defaults={"name": name, "color": color, "is_default": True, "order": order},
        )
        created += was_created
    return created
