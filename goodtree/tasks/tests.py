from datetime import timedelta

import pytest
from django.core.exceptions import PermissionDenied, ValidationError
from django.urls import reverse
from django.utils import timezone

from groups.models import TeacherGroup
from .filters import filter_tasks, parse_due_window, sort_tasks, tasks_due_on
from .forms import TaskForm, TaskStatusForm
from .models import Task, TaskStatus, status_code_for
from . import services

pytestmark = pytest.mark.django_db


@pytest.fixture
def science(other_teacher, manager):
    group = TeacherGroup.objects.create(name="Science", created_by=manager)
    group.members.add(other_teacher)
    return group


def test_create_task_expands_group_members(task_factory, teacher, other_teacher, science, manager):
    task = task_factory(assigned_to=[teacher], groups=[science])

    assert set(task.assigned_to.all()) == {teacher, other_teacher}
    assert list(task.assigned_to_groups.all()) == [science]
    assert task.assigned_by == manager
    assert task.status == "outstanding"


def test_update_task_reexpands_when_groups_change(task_factory, teacher, other_teacher, science):
    task = task_factory(assigned_to=[teacher])
    services.update_task(task, groups=[science], title="Mark tests")

    task.refresh_from_db()
    assert task.title == "Mark tests"
    assert set(task.assigned_to.all()) == {teacher, other_teacher}


def test_archived_tasks_only_show_on_archived_tab(task_factory, teacher):
    task = task_factory(assigned_to=[teacher], status="archived")

    assert filter_tasks([task], tab="active") == []
    assert filter_tasks([task], tab="all", status="archived") == []
    assert filter_tasks([task], tab="archived") == [task]


def test_tab_predicates(task_factory, teacher):
    outstanding = task_factory(assigned_to=[teacher])
    submitted = task_factory(assigned_to=[teacher], status="complete_for_approval")
    approved = task_factory(assigned_to=[teacher], status="approved")
    tasks = [outstanding, submitted, approved]

    assert filter_tasks(tasks, tab="active") == [outstanding]
    assert filter_tasks(tasks, tab="submitted") == [submitted]
    assert filter_tasks(tasks, tab="completed") == [approved]


def test_filter_by_teacher_group_and_status(task_factory, teacher, other_teacher, science):
    mine = task_factory(assigned_to=[teacher], status="late")
    theirs = task_factory(groups=[science])
    tasks = [mine, theirs]

    assert filter_tasks(tasks, teacher_id=teacher.id) == [mine]
    assert filter_tasks(tasks, teacher_id=str(other_teacher.id)) == [theirs]
    assert filter_tasks(tasks, group_id=science.id) == [theirs]
    assert filter_tasks(tasks, status="late") == [mine]
    assert filter_tasks(tasks, tab="groups") == [theirs]


def test_filter_by_assigner(task_factory, teacher, school_admin):
    by_admin = task_factory(assigned_to=[teacher], created_by=school_admin)
    by_manager = task_factory(assigned_to=[teacher])

    assert filter_tasks([by_admin, by_manager], assigned_by_id=school_admin.id) == [by_admin]


def test_due_window_counts_from_today(task_factory, teacher):
    soon = task_factory(assigned_to=[teacher], due_in_days=5)
    later = task_factory(assigned_to=[teacher], due_in_days=20)
    overdue = task_factory(assigned_to=[teacher], due_in_days=-2)
    tasks = [soon, later, overdue]

    assert filter_tasks(tasks, due_within=7) == [soon]
    assert filter_tasks(tasks, due_within=30) == [soon, later]
    # windows other than 7 and 30 are ignored
    assert len(filter_tasks(tasks, due_within=14)) == 3


def test_parse_due_window():
    assert parse_due_window("7") == 7
    assert parse_due_window("30") == 30
    assert parse_due_window("14") is None
    assert parse_due_window("soon") is None
    assert parse_due_window(None) is None


def test_sort_tasks(task_factory, teacher, other_teacher):
    b = task_factory(title="b task", assigned_to=[other_teacher], due_in_days=1)
    a = task_factory(title="A task", assigned_to=[teacher], due_in_days=2)

    assert sort_tasks([a, b]) == [b, a]
    assert sort_tasks([a, b], "dueDate", "desc") == [a, b]
    assert sort_tasks([b, a], "title") == [a, b]
    assert sort_tasks([a, b], "assignedTo") == [a, b]
    assert sort_tasks([a, b], "unknown") == [b, a]


def test_tasks_due_on(task_factory, teacher):
    task = task_factory(assigned_to=[teacher], due_in_days=2)
    due_day = timezone.localtime(task.due_date).date()

    assert tasks_due_on([task], due_day) == [task]
    assert tasks_due_on([task], due_day + timedelta(days=1)) == []


def test_submit_skips_blank_links_and_saves_the_rest(task_factory, teacher):
    task = task_factory(assigned_to=[teacher])
    services.submit_task(
        task,
        "Marked and returned",
        [
            {"title": "Marks", "url": "https://example.com/marks", "description": ""},
            {"title": "", "url": "", "description": ""},
        ],
    )

    task.refresh_from_db()
    assert task.status == "complete_for_approval"
    assert task.resolution == "Marked and returned"
    assert task.document_links.count() == 1


def test_submit_rejects_half_filled_link(task_factory, teacher):
    task = task_factory(assigned_to=[teacher])

    with pytest.raises(ValidationError) as exc:
        services.submit_task(task, "Done", [{"title": "Marks", "url": ""}])

    assert exc.value.messages == [services.LINKS_INCOMPLETE]
    task.refresh_from_db()
    assert task.status == "outstanding"


def test_only_assigner_can_review(task_factory, teacher):
    task = task_factory(assigned_to=[teacher], status="complete_for_approval")

    with pytest.raises(PermissionDenied):
        services.approve_task(task, teacher.user)
    with pytest.raises(PermissionDenied):
        services.reject_task(task, teacher.user)


def test_approve_requires_awaiting_approval(task_factory, teacher, manager):
    task = task_factory(assigned_to=[teacher])

    with pytest.raises(ValidationError):
        services.approve_task(task, manager)

    task.status = "complete_for_approval"
    services.approve_task(task, manager)
    assert Task.objects.get(pk=task.pk).status == "approved"


def test_reject_sends_task_back(task_factory, teacher, manager):
    task = task_factory(assigned_to=[teacher], status="complete_for_approval")
    services.reject_task(task, manager)
    assert Task.objects.get(pk=task.pk).status == "in_progress"


def test_unarchive_returns_to_awaiting_approval(task_factory, teacher):
    task = task_factory(assigned_to=[teacher])
    services.set_archived(task, True)
    assert task.status == "archived"
    services.set_archived(task, False)
    assert task.status == "complete_for_approval"


def test_teacher_sees_only_assigned_tasks(task_factory, teacher, other_teacher, manager):
    mine = task_factory(assigned_to=[teacher])
    task_factory(assigned_to=[other_teacher])

    assert list(services.visible_tasks(teacher.user, "Teacher")) == [mine]
    assert services.visible_tasks(manager, "Manager").count() == 2


def test_teacher_tabs_for_created_and_review(task_factory, teacher, other_teacher):
    created = task_factory(
        assigned_to=[other_teacher],
        created_by=teacher.user,
        status="complete_for_approval",
    )

    assert list(services.visible_tasks(teacher.user, "Teacher", "created")) == [created]
    assert list(services.visible_tasks(teacher.user, "Teacher", "to_review")) == [created]
    assert list(services.visible_tasks(teacher.user, "Teacher", "active")) == []


def test_status_counts_include_every_default(task_factory, teacher):
    tasks = [task_factory(assigned_to=[teacher]), task_factory(assigned_to=[teacher], status="late")]
    counts = services.status_counts(tasks)

    assert counts["outstanding"] == 1
    assert counts["late"] == 1
    assert counts["approved"] == 0


def test_status_labels_are_loaded_in_one_query(task_factory, teacher, django_assert_num_queries):
    tasks = [
        task_factory(assigned_to=[teacher]),
        task_factory(assigned_to=[teacher], status="in_progress"),
        task_factory(assigned_to=[teacher], status="on_hold"),
    ]
    tasks = [Task.objects.get(pk=task.pk) for task in tasks]

    with django_assert_num_queries(1):
        services.attach_status_labels(tasks)
        labels = [task.status_label for task in tasks]

    assert labels == ["Outstanding", "In Progress", "On hold"]


def test_status_label_without_batch(task_factory, teacher):
    task = task_factory(assigned_to=[teacher], status="complete_for_approval")
    assert Task.objects.get(pk=task.pk).status_label == "Complete for approval"


def test_ensure_default_statuses_is_idempotent(statuses):
    assert services.ensure_default_statuses() == 0
    assert TaskStatus.objects.filter(is_default=True).count() == 6


def test_task_form_requires_core_fields(teacher):
    form = TaskForm(data={"title": "", "priority": "medium", "assigned_to": [teacher.id]})

    assert not form.is_valid()
    assert form.non_field_errors() == ["Please fill in all required fields"]


def test_task_form_requires_an_assignee():
    form = TaskForm(
        data={
            "title": "Reports",
            "description": "Write reports",
            "due_date": "2030-06-01T09:00",
            "priority": "high",
        }
    )

    assert not form.is_valid()
    assert "Please assign to at least one teacher or group" in form.non_field_errors()


def test_task_form_parses_document_urls(teacher):
    form = TaskForm(
        data={
            "title": "Reports",
            "description": "Write reports",
            "due_date": "2030-06-01T09:00",
            "priority": "high",
            "assigned_to": [teacher.id],
            "document_urls": "https://example.com/a\n\nhttps://example.com/b",
        }
    )

    assert form.is_valid(), form.errors
    assert form.cleaned_data["document_urls"] == [
        "https://example.com/a",
        "https://example.com/b",
    ]


def test_status_form_rejects_duplicates_and_derives_code(statuses):
    assert not TaskStatusForm(data={"name": "in progress"}).is_valid()

    form = TaskStatusForm(data={"name": "Needs Review", "color": ""})
    assert form.is_valid(), form.errors
    saved = form.save()
    assert saved.code == "needs_review"
    assert saved.color == "#6366F1"
    assert saved.order == 6


def test_status_code_for():
    assert status_code_for("  On   Hold ") == "on_hold"


def test_teacher_cannot_manage_statuses(client, teacher):
    client.force_login(teacher.user)
    assert client.get(reverse("tasks:manage_statuses")).status_code == 403


def test_status_in_use_cannot_be_deleted(client, school_admin, task_factory, teacher):
    status = TaskStatus.objects.create(code="on_hold", name="On hold", order=7)
    task_factory(assigned_to=[teacher], status="on_hold")
    client.force_login(school_admin)

    response = client.post(
        reverse("tasks:manage_statuses"),
        {"status_id": status.id, "action": "delete"},
        follow=True,
    )

    assert TaskStatus.objects.filter(pk=status.pk).exists()
    assert any(
        "1 task(s) are currently using this status" in str(m)
        for m in response.context["messages"]
    )


def test_default_status_cannot_be_deleted(client, school_admin, statuses):
    status = TaskStatus.objects.get(code="late")
    client.force_login(school_admin)
    client.post(reverse("tasks:manage_statuses"), {"status_id": status.id, "action": "delete"})
    assert TaskStatus.objects.filter(pk=status.pk).exists()


def test_task_list_renders_for_teacher(client, task_factory, teacher):
    task_factory(title="Visible", assigned_to=[teacher])
    client.force_login(teacher.user)

    response = client.get(reverse("tasks:task_list"), {"tab": "active", "sort": "title"})

    assert response.status_code == 200
    assert [t.title for t in response.context["tasks"]] == ["Visible"]


def test_create_task_view(client, manager, teacher, statuses):
    client.force_login(manager)
    response = client.post(
        reverse("tasks:create_task"),
        {
            "title": "Exam invigilation",
            "description": "Cover room 4",
            "due_date": "2030-06-01T09:00",
            "priority": "urgent",
            "assigned_to": [teacher.id],
        },
    )

    assert response.status_code == 302
    task = Task.objects.get(title="Exam invigilation")
    assert list(task.assigned_to.all()) == [teacher]
    assert task.created_by == manager


def test_submit_and_review_flow(client, task_factory, teacher, manager):
    task = task_factory(assigned_to=[teacher])

    client.force_login(teacher.user)
    client.post(
        reverse("tasks:submit_task", args=[task.id]),
        {
            "resolution": "All done",
            "link_title": ["Sheet"],
            "link_url": ["https://example.com/sheet"],
            "link_description": [""],
        },
    )
    task.refresh_from_db()
    assert task.status == "complete_for_approval"

    response = client.post(reverse("tasks:review_task", args=[task.id]), {"decision": "approve"})
    assert response.status_code == 403

    client.force_login(manager)
    client.post(reverse("tasks:review_task", args=[task.id]), {"decision": "approve"})
    task.refresh_from_db()
    assert task.status == "approved"


def test_unrelated_teacher_cannot_view_task(client, task_factory, teacher, other_teacher):
    task = task_factory(assigned_to=[teacher])
    client.force_login(other_teacher.user)
    assert client.get(reverse("tasks:task_detail", args=[task.id])).status_code == 403


def test_task_calendar_places_tasks_on_due_day(client, task_factory, teacher):
    task = task_factory(assigned_to=[teacher], due_in_days=1)
    due = timezone.localtime(task.due_date)
    client.force_login(teacher.user)

    response = client.get(
        reverse("tasks:task_calendar"), {"year": due.year, "month": due.month}
    )

    days = [day for week in response.context["weeks"] for day in week]
    matching = [day for day in days if day.date == due.date()]
    assert matching and all(day.items == [task] for day in matching)
