import logging

from django.http import HttpRequest, HttpResponse
from django.shortcuts import render, redirect, get_object_or_404
from django.contrib.auth.decorators import login_required
from django.contrib import messages
from django.contrib.auth.models import Group

from base.views import get_user_role
from .models import Teacher, TeacherRole
from .forms import (
    TeacherUserCreationForm,
    TeacherProfileForm,
    TeacherEditForm,
    TeacherRoleForm,
)
from .services import unique_role_code

logger = logging.getLogger(__name__)

NO_TEACHERS_MESSAGE = (
    "No teachers found. Please create a teacher using the 'Add New Teacher' button."
)


@login_required
def teacher_management(request: HttpRequest):
    """Admin view for managing teachers"""
    role = get_user_role(request.user)

    if role != "Admin":
        return HttpResponse("Access denied", status=403)

    teachers = (
        Teacher.objects.select_related("user", "role")
        .all()
        .order_by("user__first_name")
    )
    context = {
        "teachers": teachers,
        "empty_message": NO_TEACHERS_MESSAGE,
        "role": role,
    }
    return render(request, "teachers/teacher_management.html", context)


@login_required
def add_teacher(request: HttpRequest):
    """Admin view for adding a new teacher"""
    role = get_user_role(request.user)

    if role != "Admin":
        return HttpResponse("Access denied", status=403)

    if request.method == "POST":
        user_form = TeacherUserCreationForm(request.POST)
        profile_form = TeacherProfileForm(request.POST)

        if user_form.is_valid() and profile_form.is_valid():
            user = user_form.save()

            teacher_group, created = Group.objects.get_or_create(name="Teacher")
            user.groups.add(teacher_group)

            teacher = profile_form.save(commit=False)
            teacher.user = user
            teacher.save()

            logger.info("Teacher %s created by %s", user.username, request.user.username)
            messages.success(request, f"Teacher {teacher.name} added successfully.")
            return redirect("teachers:teacher_management")
        else:
            messages.error(request, "Please correct the errors below.")
    else:
        user_form = TeacherUserCreationForm()
        profile_form = TeacherProfileForm()

    context = {
        "user_form": user_form,
        "profile_form": profile_form,
        "role": role,
    }
    return render(request, "teachers/add_teacher.html", context)


@login_required
def edit_teacher(request: HttpRequest, teacher_id: int):
    """Admin view for editing a teacher"""
    role = get_user_role(request.user)

    if role != "Admin":
        return HttpResponse("Access denied", status=403)

    teacher = get_object_or_404(Teacher, id=teacher_id)

    if request.method == "POST":
        form = TeacherEditForm(request.POST, instance=teacher)

        if form.is_valid():
            teacher.user.first_name = form.cleaned_data["first_name"].strip()
            teacher.user.last_name = form.cleaned_data["last_name"].strip()
            teacher.user.email = form.cleaned_data["email"]
            teacher.user.save()

            form.save()

            logger.info("Teacher %s updated", teacher.user.username)
            messages.success(request, f"Teacher {teacher.name} updated successfully.")
            return redirect("teachers:teacher_management")
        else:
            messages.error(request, "Please correct the errors below.")
    else:
        form = TeacherEditForm(instance=teacher)

    context = {
        "form": form,
        "teacher": teacher,
        "role": role,
    }
    return render(request, "teachers/edit_teacher.html", context)


@login_required
def delete_teacher(request: HttpRequest, teacher_id: int):
    """Admin view for deleting a teacher"""
    role = get_user_role(request.user)

    if role != "Admin":
        return HttpResponse("Access denied", status=403)

    teacher = get_object_or_404(Teacher, id=teacher_id)

    if request.method == "POST":
        user = teacher.user
        name = teacher.name
        teacher.delete()
        user.delete()
        logger.info("Teacher %s deleted by %s", user.username, request.user.username)
        messages.success(request, f"Teacher {name} deleted successfully.")
        return redirect("teachers:teacher_management")

    context = {
        "teacher": teacher,
        "role": role,
    }
    return render(request, "teachers/delete_teacher.html", context)


@login_required
def manage_roles(request: HttpRequest):
    """Admin view for teaching roles"""
    role = get_user_role(request.user)

    if role != "Admin":
        return HttpResponse("Access denied", status=403)

    editing = None
    role_id = request.POST.get("role_id") or request.GET.get("edit")
    if role_id:
        editing = get_object_or_404(TeacherRole, id=role_id)

    if request.method == "POST":
        action = request.POST.get("action", "save")

        if action == "delete" and editing:
            if editing.is_default:
                messages.error(request, "Default roles cannot be deleted")
            else:
                name = editing.name
                editing.delete()
                logger.info("Teacher role %s deleted", name)
                messages.success(request, f"Role {name} deleted successfully.")
            return redirect("teachers:manage_roles")

        form = TeacherRoleForm(request.POST, instance=editing)
        if form.is_valid():
            teacher_role = form.save(commit=False)
            if not teacher_role.code:
                teacher_role.code = unique_role_code(teacher_role.name)
            teacher_role.save()
            logger.info("Teacher role %s saved", teacher_role.code)
            messages.success(request, f"Role {teacher_role.name} saved successfully.")
            return redirect("teachers:manage_roles")
    else:
        form = TeacherRoleForm(instance=editing)

    context = {
        "form": form,
        "roles": TeacherRole.objects.all(),
        "editing": editing,
        "role": role,
    }
    return render(request, "teachers/manage_roles.html", context)
