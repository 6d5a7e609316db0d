import logging

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.shortcuts import render, redirect, get_object_or_404
from django.contrib.auth.decorators import login_required
from django.contrib import messages
from django.db.models import ProtectedError, Q
from django.utils.dateparse import parse_date

from base.views import get_user_role, is_manager_role
from students.models import Student
from .filters import IncidentCriteria, filter_incidents, parse_flag, sort_incidents
from .forms import IncidentForm, IncidentTypeForm
from .models import Incident, IncidentType

logger = logging.getLogger(__name__)


def _int_list(values):
    ids = []
    for value in values:
        try:
            ids.append(int(value))
        except (TypeError, ValueError):
            continue
    return ids


def criteria_from_request(request):
    params = request.GET
    type_ids = _int_list([params.get("type")])
    return IncidentCriteria(
        incident_type=type_ids[0] if type_ids else None,
        start_date=parse_date(params.get("start_date", "")),
        end_date=parse_date(params.get("end_date", "")),
        search=params.get("q", ""),
        initiators=_int_list(params.getlist("initiator")),
        affected_students=_int_list(params.getlist("affected")),
        requires_intervention=parse_flag(params.get("requires_intervention")),
        parent_notified=parse_flag(params.get("parent_notified")),
        requires_parent_notification=parse_flag(
            params.get("requires_parent_notification")
        ),
        intervened=parse_flag(params.get("intervened")),
    )


@login_required
def incident_list(request: HttpRequest):
    role = get_user_role(request.user)

    try:
        criteria = criteria_from_request(request)
    except ValueError:
        messages.error(request, "Invalid date in filters.")
        criteria = IncidentCriteria()

    sort_field = request.GET.get("sort", "date")
    direction = "asc" if request.GET.get("dir") == "asc" else "desc"

    incidents = Incident.objects.select_related("incident_type", "reported_by").prefetch_related(
        "initiators", "affected_students"
    )
    incidents = filter_incidents(incidents, criteria)
    incidents = sort_incidents(incidents, sort_field, direction)

    context = {
        "incidents": incidents,
        "incident_types": IncidentType.objects.all(),
        "criteria": criteria,
        "students": Student.objects.all(),
        "sort": sort_field,
        "direction": direction,
        "role": role,
    }
    return render(request, "incidents/incident_list.html", context)


@login_required
def incident_form(request: HttpRequest, incident_id: int = None):
    """Report a new incident, or edit one when ``incident_id`` is given"""
    role = get_user_role(request.user)
    incident = get_object_or_404(Incident, id=incident_id) if incident_id else None

    if incident and not (
        is_manager_role(role) or incident.reported_by_id == request.user.id
    ):
        return HttpResponse("Access denied", status=403)

    if request.method == "POST":
        form = IncidentForm(request.POST, instance=incident)
        if form.is_valid():
            saved = form.save(commit=False)
            if incident is None:
                saved.reported_by = request.user
            saved.save()
            form.save_m2m()
            logger.info(
                "Incident %s %s by %s",
                saved.id,
                "updated" if incident else "reported",
                request.user.username,
            )
            messages.success(request, "Incident saved successfully.")
            return redirect("incidents:incident_detail", incident_id=saved.id)
        messages.error(request, "Please correct the errors below.")
    else:
        form = IncidentForm(instance=incident)

    context = {"form": form, "incident": incident, "role": role}
    return render(request, "incidents/incident_form.html", context)


@login_required
def incident_detail(request: HttpRequest, incident_id: int):
    role = get_user_role(request.user)
    incident = get_object_or_404(
        Incident.objects.select_related("incident_type", "reported_by"), id=incident_id
    )
    context = {
        "incident": incident,
        "can_edit": is_manager_role(role) or incident.reported_by_id == request.user.id,
        "can_delete": is_manager_role(role),
        "role": role,
    }
    return render(request, "incidents/incident_detail.html", context)


@login_required
def delete_incident(request: HttpRequest, incident_id: int):
    role = get_user_role(request.user)

    if not is_manager_role(role):
        return HttpResponse("Access denied", status=403)

    incident = get_object_or_404(Incident, id=incident_id)
    if request.method == "POST":
        incident.delete()
        logger.info("Incident %s deleted by %s", incident_id, request.user.username)
        messages.success(request, "Incident deleted successfully.")
        return redirect("incidents:incident_list")
    return redirect("incidents:incident_detail", incident_id=incident.id)


@login_required
def student_search(request: HttpRequest):
    """JSON lookup used by the student pickers on the incident form"""
    term = request.GET.get("q", "").strip()
    if not term:
        return JsonResponse({"success": True, "results": []})

    students = Student.objects.select_related("grade", "classroom").filter(
        Q(first_name__icontains=term)
        | Q(last_name__icontains=term)
        | Q(grade__name__icontains=term)
        | Q(classroom__name__icontains=term)
    )[:20]
    results = [
        {
            "id": student.id,
            "name": student.name,
            "grade": student.grade.name,
            "homeroom": student.homeroom,
        }
        for student in students
    ]
    return JsonResponse({"success": True, "results": results})


@login_required
def manage_types(request: HttpRequest):
    """Admin view for incident types"""
    role = get_user_role(request.user)

    if role != "Admin":
        return HttpResponse("Access denied", status=403)

    editing = None
    type_id = request.POST.get("type_id") or request.GET.get("edit")
    if type_id:
        editing = get_object_or_404(IncidentType, id=type_id)

    if request.method == "POST":
        if request.POST.get("action") == "delete" and editing:
            if editing.is_default:
                messages.error(request, "Default incident types cannot be deleted")
            else:
                try:
                    name = editing.name
                    editing.delete()
                except ProtectedError:
                    messages.error(
                        request, "Cannot delete an incident type that is in use"
                    )
                else:
                    logger.info("Incident type %s deleted", name)
                    messages.success(request, f"Incident type {name} deleted successfully.")
            return redirect("incidents:manage_types")

        form = IncidentTypeForm(request.POST, instance=editing)
        if form.is_valid():
            saved = form.save()
            logger.info("Incident type %s saved", saved.code)
            messages.success(request, f"Incident type {saved.name} saved successfully.")
            return redirect("incidents:manage_types")
    else:
        form = IncidentTypeForm(instance=editing)

    context = {
        "form": form,
        "incident_types": IncidentType.objects.all(),
        "editing": editing,
        "role": role,
    }
    return render(request, "incidents/manage_types.html", context)
