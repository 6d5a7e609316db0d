import logging

from django.http import HttpRequest, HttpResponse
from django.shortcuts import render, redirect, get_object_or_404
from django.contrib.auth.decorators import login_required
from django.contrib import messages

from base.views import get_user_role, is_manager_role
from teachers.models import Teacher
from .forms import TeacherGroupForm
from .models import TeacherGroup, groups_for_teacher

logger = logging.getLogger(__name__)


@login_required
def group_list(request: HttpRequest):
    role = get_user_role(request.user)

    if is_manager_role(role):
        groups = TeacherGroup.objects.all()
    else:
        teacher = Teacher.objects.filter(user=request.user).first()
        groups = groups_for_teacher(teacher) if teacher else TeacherGroup.objects.none()

    context = {
        "groups": groups.prefetch_related("members__user"),
        "can_manage": is_manager_role(role),
        "role": role,
    }
    return render(request, "groups/group_list.html", context)


@login_required
def group_form(request: HttpRequest, group_id: int = None):
    """Create a group, or edit one when ``group_id`` is given"""
    role = get_user_role(request.user)

    if not is_manager_role(role):
        return HttpResponse("Access denied", status=403)

    group = get_object_or_404(TeacherGroup, id=group_id) if group_id else None

    if request.method == "POST":
        form = TeacherGroupForm(request.POST, instance=group)
        if form.is_valid():
            saved = form.save(commit=False)
            if group is None:
                saved.created_by = request.user
            saved.save()
            form.save_m2m()
            logger.info("Group %s saved by %s", saved.name, request.user.username)
            messages.success(request, f"Group {saved.name} saved successfully.")
            return redirect("groups:group_list")
        messages.error(request, "Please correct the errors below.")
    else:
        form = TeacherGroupForm(instance=group)

    context = {"form": form, "group": group, "role": role}
    return render(request, "groups/group_form.html", context)


@login_required
def delete_group(request: HttpRequest, group_id: int):
    role = get_user_role(request.user)

    if not is_manager_role(role):
        return HttpResponse("Access denied", status=403)

    group = get_object_or_404(TeacherGroup, id=group_id)
    if request.method == "POST":
        name = group.name
        group.delete()
        logger.info("Group %s deleted by %s", name, request.user.username)
        messages.success(request, f"Group {name} deleted successfully.")
    return redirect("groups:group_list")
