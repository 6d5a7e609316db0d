import logging
from itertools import zip_longest

from django.http import HttpRequest, HttpResponse
from django.shortcuts import render, redirect, get_object_or_404
from django.contrib.auth.decorators import login_required
from django.contrib import messages
from django.core.exceptions import PermissionDenied, ValidationError
from django.views.decorators.http import require_POST

from base.calendar_utils import build_month_grid, grid_weeks, parse_month, shift_month
from base.views import get_user_role, is_manager_role
from groups.models import TeacherGroup
from teachers.models import Teacher
from .filters import filter_tasks, parse_due_window, sort_tasks, tasks_due_on
from .forms import TaskEditForm, TaskForm, TaskStatusForm, TaskSubmitForm
from .models import DocumentLink, Task, TaskAttachment, TaskStatus
from . import services

logger = logging.getLogger(__name__)

MANAGER_TABS = ["active", "submitted", "completed", "archived", "groups"]
TEACHER_TABS = ["active", "submitted", "completed", "created", "to_review", "teacher_groups"]


def _clean_id(value):
    if value in (None, "", "all"):
        return "all"
    try:
        return int(value)
    except (TypeError, ValueError):
        return "all"


def _save_attachments(request, task):
    for upload in request.FILES.getlist("attachments"):
        TaskAttachment.objects.create(task=task, name=upload.name, file=upload)


@login_required
def task_list(request: HttpRequest):
    role = get_user_role(request.user)
    manager = is_manager_role(role)
    tabs = MANAGER_TABS if manager else TEACHER_TABS

    tab = request.GET.get("tab", "active")
    if tab not in tabs:
        tab = "active"

    status = request.GET.get("status", "all")
    teacher_id = _clean_id(request.GET.get("teacher")) if manager else "all"
    group_id = _clean_id(request.GET.get("group")) if manager else "all"
    assigned_by_id = _clean_id(request.GET.get("assigned_by"))
    due_within = parse_due_window(request.GET.get("due"))
    sort = request.GET.get("sort", "dueDate")
    direction = "desc" if request.GET.get("dir") == "desc" else "asc"

    tasks = services.visible_tasks(request.user, role, tab)
    tasks = filter_tasks(
        tasks,
        tab=tab,
        status=status,
        teacher_id=teacher_id,
        group_id=group_id,
        due_within=due_within,
        assigned_by_id=assigned_by_id,
    )
    tasks = services.attach_status_labels(sort_tasks(tasks, sort, direction))

    context = {
        "tasks": tasks,
        "tabs": tabs,
        "active_tab": tab,
        "statuses": TaskStatus.objects.all(),
        "teachers": Teacher.objects.select_related("user") if manager else [],
        "groups": TeacherGroup.objects.all() if manager else [],
        "current_status": status,
        "current_teacher": teacher_id,
        "current_group": group_id,
        "current_due": due_within,
        "sort": sort,
        "direction": direction,
        "role": role,
    }
    return render(request, "tasks/task_list.html", context)


@login_required
def create_task(request: HttpRequest):
    role = get_user_role(request.user)

    if request.method == "POST":
        form = TaskForm(request.POST, request.FILES)
        if form.is_valid():
            data = form.cleaned_data
            task = services.create_task(
                title=data["title"].strip(),
                description=data["description"].strip(),
                due_date=data["due_date"],
                priority=data["priority"],
                assigned_to=data["assigned_to"],
                groups=data["assigned_to_groups"],
                created_by=request.user,
            )
            for url in data["document_urls"]:
                DocumentLink.objects.create(task=task, title=url, url=url)
            _save_attachments(request, task)
            messages.success(request, f"Task {task.title} created successfully.")
            return redirect("tasks:task_list")
        messages.error(request, "Please correct the errors below.")
    else:
        form = TaskForm()

    context = {"form": form, "role": role}
    return render(request, "tasks/task_form.html", context)


@login_required
def task_detail(request: HttpRequest, task_id: int):
    role = get_user_role(request.user)
    task = get_object_or_404(
        Task.objects.select_related("assigned_by", "created_by"), id=task_id
    )

    if not services.can_view_task(task, request.user, role):
        return HttpResponse("Access denied", status=403)

    is_assignee = task.assigned_to.filter(user=request.user).exists()
    context = {
        "task": task,
        "assignees": task.assigned_to.select_related("user"),
        "groups": task.assigned_to_groups.all(),
        "links": task.document_links.all(),
        "attachments": task.attachments.all(),
        "status": TaskStatus.objects.filter(code=task.status).first(),
        "can_submit": is_assignee and task.status not in ("approved", "archived"),
        "can_review": task.assigned_by_id == request.user.id
        and task.status == "complete_for_approval",
        "can_edit": is_manager_role(role) or task.created_by_id == request.user.id,
        "can_archive": is_manager_role(role) or task.assigned_by_id == request.user.id,
        "role": role,
    }
    return render(request, "tasks/task_detail.html", context)


@login_required
def edit_task(request: HttpRequest, task_id: int):
    role = get_user_role(request.user)
    task = get_object_or_404(Task, id=task_id)

    if not (is_manager_role(role) or task.created_by_id == request.user.id):
        return HttpResponse("Access denied", status=403)

    if request.method == "POST":
        form = TaskEditForm(request.POST, request.FILES, instance=task)
        if form.is_valid():
            data = form.cleaned_data
            services.update_task(
                task,
                title=data["title"].strip(),
                description=data["description"].strip(),
                due_date=data["due_date"],
                priority=data["priority"],
                status=data["status"],
                assigned_to=data["assigned_to"],
                groups=data["assigned_to_groups"],
            )
            for url in data["document_urls"]:
                DocumentLink.objects.create(task=task, title=url, url=url)
            _save_attachments(request, task)
            messages.success(request, f"Task {task.title} updated successfully.")
            return redirect("tasks:task_detail", task_id=task.id)
        messages.error(request, "Please correct the errors below.")
    else:
        form = TaskEditForm(instance=task)

    context = {"form": form, "task": task, "role": role}
    return render(request, "tasks/task_form.html", context)


@login_required
def submit_task(request: HttpRequest, task_id: int):
    role = get_user_role(request.user)
    task = get_object_or_404(Task, id=task_id)

    if not task.assigned_to.filter(user=request.user).exists():
        return HttpResponse("Access denied", status=403)

    if request.method == "POST":
        form = TaskSubmitForm(request.POST)
        links = [
            {"title": title, "url": url, "description": description}
            for title, url, description in zip_longest(
                request.POST.getlist("link_title"),
                request.POST.getlist("link_url"),
                request.POST.getlist("link_description"),
                fillvalue="",
            )
        ]
        if form.is_valid():
            try:
                services.submit_task(task, form.cleaned_data["resolution"], links)
            except ValidationError as e:
                form.add_error(None, e)
            else:
                messages.success(request, "Task submitted for approval.")
                return redirect("tasks:task_detail", task_id=task.id)
    else:
        form = TaskSubmitForm(initial={"resolution": task.resolution})

    context = {
        "form": form,
        "task": task,
        "existing_links": task.document_links.all(),
        "role": role,
    }
    return render(request, "tasks/submit_task.html", context)


@login_required
@require_POST
def review_task(request: HttpRequest, task_id: int):
    task = get_object_or_404(Task, id=task_id)
    decision = request.POST.get("decision")

    try:
        if decision == "approve":
            services.approve_task(task, request.user)
            messages.success(request, "Task approved.")
        elif decision == "reject":
            services.reject_task(task, request.user)
            messages.success(request, "Task returned to the assignee.")
        else:
            messages.error(request, "Unknown review decision.")
    except PermissionDenied:
        return HttpResponse("Access denied", status=403)
    except ValidationError as e:
        messages.error(request, e.messages[0])

    return redirect("tasks:task_detail", task_id=task.id)


@login_required
@require_POST
def archive_task(request: HttpRequest, task_id: int):
    role = get_user_role(request.user)
    task = get_object_or_404(Task, id=task_id)

    if not (is_manager_role(role) or task.assigned_by_id == request.user.id):
        return HttpResponse("Access denied", status=403)

    archive = request.POST.get("archive", "1") == "1"
    services.set_archived(task, archive)
    messages.success(request, "Task archived." if archive else "Task restored.")
    return redirect("tasks:task_detail", task_id=task.id)


@login_required
def task_calendar(request: HttpRequest):
    role = get_user_role(request.user)
    year, month = parse_month(request)
    status = request.GET.get("status", "all")

    tasks = list(services.visible_tasks(request.user, role, "all"))
    if status != "all":
        tasks = [task for task in tasks if task.status == status]

    days = build_month_grid(year, month)
    for day in days:
        day.items = tasks_due_on(tasks, day.date)

    context = {
        "weeks": grid_weeks(days),
        "year": year,
        "month": month,
        "previous": shift_month(year, month, -1),
        "next": shift_month(year, month, 1),
        "statuses": TaskStatus.objects.all(),
        "current_status": status,
        "role": role,
    }
    return render(request, "tasks/task_calendar.html", context)


@login_required
def manage_statuses(request: HttpRequest):
    """Admin view for task statuses"""
    role = get_user_role(request.user)

    if role != "Admin":
        return HttpResponse("Access denied", status=403)

    editing = None
    status_id = request.POST.get("status_id") or request.GET.get("edit")
    if status_id:
        editing = get_object_or_404(TaskStatus, id=status_id)

    if request.method == "POST":
        if request.POST.get("action") == "delete" and editing:
            in_use = Task.objects.filter(status=editing.code).count()
            if editing.is_default:
                messages.error(request, "Default statuses cannot be deleted")
            elif in_use:
                messages.error(
                    request,
                    f"Cannot delete status. {in_use} task(s) are currently using this status.",
                )
            else:
                name = editing.name
                editing.delete()
                logger.info("Task status %s deleted", name)
                messages.success(request, f"Status {name} deleted successfully.")
            return redirect("tasks:manage_statuses")

        form = TaskStatusForm(request.POST, instance=editing)
        if form.is_valid():
            saved = form.save()
            logger.info("Task status %s saved", saved.code)
            messages.success(request, f"Status {saved.name} saved successfully.")
            return redirect("tasks:manage_statuses")
    else:
        form = TaskStatusForm(instance=editing)

    context = {
        "form": form,
        "statuses": TaskStatus.objects.all(),
        "editing": editing,
        "role": role,
    }
    return render(request, "tasks/manage_statuses.html", context)
