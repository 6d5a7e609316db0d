from datetime import date

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse

from .forms import LeaveRequestForm
from .models import LeaveRequest

pytestmark = pytest.mark.django_db

AJAX = {"HTTP_X_REQUESTED_WITH": "XMLHttpRequest"}


@pytest.fixture
def leave_request(teacher):
    return LeaveRequest.objects.create(
        teacher=teacher,
        leave_type=LeaveRequest.LeaveType.SICK,
        start_date=date(2025, 5, 5),
        end_date=date(2025, 5, 7),
        reason="Flu",
    )


def test_duration_counts_both_ends(leave_request):
    assert leave_request.duration_days == 3


def test_form_rejects_end_before_start():
    form = LeaveRequestForm(
        data={
            "leave_type": "annual",
            "start_date": "2025-05-10",
            "end_date": "2025-05-09",
            "reason": "Holiday",
        }
    )

    assert not form.is_valid()
    assert form.errors["end_date"] == ["End date must be after start date"]


def test_form_required_messages():
    form = LeaveRequestForm(data={"leave_type": "annual"})

    assert form.errors["start_date"] == ["Start date is required"]
    assert form.errors["end_date"] == ["End date is required"]
    assert form.errors["reason"] == ["Reason is required"]


def test_single_day_leave_is_allowed():
    form = LeaveRequestForm(
        data={
            "leave_type": "study",
            "start_date": "2025-05-10",
            "end_date": "2025-05-10",
            "reason": "Exam",
        }
    )
    assert form.is_valid(), form.errors


def test_apply_requires_teacher_profile(client, manager):
    client.force_login(manager)
    response = client.get(reverse("leave:apply_leave"))
    assert response.url == reverse("leave:leave_list")


def test_apply_creates_pending_request_with_documents(client, teacher):
    client.force_login(teacher.user)
    response = client.post(
        reverse("leave:apply_leave"),
        {
            "leave_type": "sick",
            "start_date": "2025-05-05",
            "end_date": "2025-05-06",
            "reason": "Doctor's note attached",
            "documents": [
                SimpleUploadedFile("note.pdf", b"%PDF-1.4", content_type="application/pdf")
            ],
        },
    )

    leave = LeaveRequest.objects.get()
    assert response.status_code == 302
    assert leave.teacher == teacher
    assert leave.status == LeaveRequest.Status.PENDING
    assert leave.documents.count() == 1


def test_manager_approves(client, manager, leave_request):
    client.force_login(manager)
    client.post(
        reverse("leave:leave_detail", args=[leave_request.id]),
        {"action": "review", "decision": "approved", "review_notes": "Get well"},
    )

    leave_request.refresh_from_db()
    assert leave_request.status == LeaveRequest.Status.APPROVED
    assert leave_request.reviewed_by == manager
    assert leave_request.reviewed_at is not None
    assert leave_request.review_notes == "Get well"


def test_reviewed_request_cannot_be_reviewed_again(client, manager, leave_request):
    leave_request.status = LeaveRequest.Status.REJECTED
    leave_request.save()
    client.force_login(manager)

    response = client.post(
        reverse("leave:leave_detail", args=[leave_request.id]),
        {"action": "review", "decision": "approved"},
        **AJAX,
    )

    assert response.json() == {
        "success": False,
        "error": "Only pending requests can be reviewed",
    }


def test_teacher_cannot_review_own_request(client, teacher, leave_request):
    client.force_login(teacher.user)
    response = client.post(
        reverse("leave:leave_detail", args=[leave_request.id]),
        {"action": "review", "decision": "approved"},
        **AJAX,
    )

    assert response.json() == {"success": False, "error": "Access denied"}
    leave_request.refresh_from_db()
    assert leave_request.status == LeaveRequest.Status.PENDING


def test_owner_cancels_pending_request(client, teacher, leave_request):
    client.force_login(teacher.user)
    response = client.post(
        reverse("leave:leave_detail", args=[leave_request.id]), {"action": "cancel"}, **AJAX
    )

    assert response.json() == {"success": True, "status": "cancelled"}


def test_other_teacher_cannot_see_request(client, other_teacher, leave_request):
    client.force_login(other_teacher.user)
    response = client.get(reverse("leave:leave_detail", args=[leave_request.id]))
    assert response.status_code == 403


def test_teacher_list_is_limited_to_own_requests(client, teacher, other_teacher, leave_request):
    LeaveRequest.objects.create(
        teacher=other_teacher,
        leave_type=LeaveRequest.LeaveType.ANNUAL,
        start_date=date(2025, 6, 1),
        end_date=date(2025, 6, 2),
        reason="Wedding",
    )
    client.force_login(teacher.user)

    response = client.get(reverse("leave:leave_list"), {"tab": "all"})

    assert response.context["active_tab"] == "my-requests"
    assert list(response.context["leaves"]) == [leave_request]


def test_manager_pending_tab(client, manager, leave_request):
    client.force_login(manager)
    response = client.get(reverse("leave:leave_list"), {"tab": "pending-approval", "type": "sick"})
    assert list(response.context["leaves"]) == [leave_request]
