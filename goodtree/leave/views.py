import logging

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.shortcuts import render, redirect, get_object_or_404
from django.contrib.auth.decorators import login_required
from django.contrib import messages
from django.utils import timezone

from base.views import get_user_role, is_manager_role
from teachers.models import Teacher
from .forms import LeaveRequestForm, LeaveReviewForm
from .models import LeaveDocument, LeaveRequest

logger = logging.getLogger(__name__)

TABS = ["my-requests", "pending-approval", "all"]


def _is_ajax(request):
    return request.headers.get("X-Requested-With") == "XMLHttpRequest"


@login_required
def apply_leave(request: HttpRequest):
    role = get_user_role(request.user)

    teacher = Teacher.objects.filter(user=request.user).first()
    if teacher is None:
        messages.error(request, "Teacher profile not found")
        return redirect("leave:leave_list")

    if request.method == "POST":
        form = LeaveRequestForm(request.POST, request.FILES)
        if form.is_valid():
            leave_request = form.save(commit=False)
            leave_request.teacher = teacher
            leave_request.save()
            for upload in form.cleaned_data["documents"]:
                LeaveDocument.objects.create(leave_request=leave_request, file=upload)
            logger.info(
                "Leave request %s submitted by %s (%s to %s)",
                leave_request.id,
                request.user.username,
                leave_request.start_date,
                leave_request.end_date,
            )
            messages.success(request, "Leave request submitted successfully.")
            return redirect("leave:leave_detail", leave_id=leave_request.id)
        messages.error(request, "Please correct the errors below.")
    else:
        form = LeaveRequestForm()

    context = {"form": form, "role": role}
    return render(request, "leave/apply_leave.html", context)


@login_required
def leave_list(request: HttpRequest):
    role = get_user_role(request.user)
    manager = is_manager_role(role)

    tab = request.GET.get("tab", "my-requests")
    if tab not in TABS or (tab != "my-requests" and not manager):
        tab = "my-requests"
    status = request.GET.get("status", "all")
    leave_type = request.GET.get("type", "all")

    leaves = LeaveRequest.objects.select_related("teacher__user", "reviewed_by")
    if tab == "my-requests":
        leaves = leaves.filter(teacher__user=request.user)
    elif tab == "pending-approval":
        leaves = leaves.filter(status=LeaveRequest.Status.PENDING)

    if status != "all":
        leaves = leaves.filter(status=status)
    if leave_type != "all":
        leaves = leaves.filter(leave_type=leave_type)

    context = {
        "leaves": leaves.order_by("-created_at"),
        "tabs": TABS if manager else TABS[:1],
        "active_tab": tab,
        "statuses": LeaveRequest.Status.choices,
        "leave_types": LeaveRequest.LeaveType.choices,
        "current_status": status,
        "current_type": leave_type,
        "role": role,
    }
    return render(request, "leave/leave_list.html", context)


@login_required
def leave_detail(request: HttpRequest, leave_id: int):
    role = get_user_role(request.user)
    manager = is_manager_role(role)
    leave_request = get_object_or_404(
        LeaveRequest.objects.select_related("teacher__user", "reviewed_by"), id=leave_id
    )
    is_owner = leave_request.teacher.user_id == request.user.id

    if not (manager or is_owner):
        return HttpResponse("Access denied", status=403)

    pending = leave_request.status == LeaveRequest.Status.PENDING

    if request.method == "POST":
        action = request.POST.get("action")
        error = None

        if action == "review":
            form = LeaveReviewForm(request.POST)
            if not manager:
                error = "Access denied"
            elif not pending:
                error = "Only pending requests can be reviewed"
            elif not form.is_valid():
                error = "Invalid review decision"
            else:
                leave_request.status = form.cleaned_data["decision"]
                leave_request.review_notes = form.cleaned_data["review_notes"]
                leave_request.reviewed_by = request.user
                leave_request.reviewed_at = timezone.now()
                leave_request.save()
                logger.info(
                    "Leave request %s %s by %s",
                    leave_request.id,
                    leave_request.status,
                    request.user.username,
                )
        elif action == "cancel":
            if not is_owner:
                error = "Access denied"
            elif not pending:
                error = "Only pending requests can be cancelled"
            else:
                leave_request.status = LeaveRequest.Status.CANCELLED
                leave_request.save()
                logger.info("Leave request %s cancelled", leave_request.id)
        else:
            error = "Invalid action"

        if _is_ajax(request):
            if error:
                return JsonResponse({"success": False, "error": error})
            return JsonResponse({"success": True, "status": leave_request.status})

        if error == "Access denied":
            return HttpResponse("Access denied", status=403)
        if error:
            messages.error(request, error)
        else:
            messages.success(
                request, f"Leave request {leave_request.get_status_display().lower()}."
            )
        return redirect("leave:leave_detail", leave_id=leave_request.id)

    context = {
        "leave": leave_request,
        "documents": leave_request.documents.all(),
        "review_form": LeaveReviewForm(),
        "can_review": manager and pending,
        "can_cancel": is_owner and pending,
        "role": role,
    }
    return render(request, "leave/leave_detail.html", context)
