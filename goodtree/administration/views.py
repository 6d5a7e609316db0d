import logging

from django.shortcuts import render, redirect, get_object_or_404
from django.contrib.auth.decorators import login_required
from django.contrib import messages
from django.http import HttpResponse, JsonResponse
from django.utils import timezone

from base.views import get_user_role
from events.models import SchoolEvent
from groups.models import TeacherGroup
from incidents.models import Incident
from leave.models import LeaveRequest
from students.models import Student
from teachers.models import Teacher
from .forms import CampusLocationForm
from .models import CampusLocation

logger = logging.getLogger(__name__)


@login_required
def admin_hub(request):
    role = get_user_role(request.user)

    if role != "Admin":
        return HttpResponse("Access denied", status=403)

    counts = {
        "teachers": Teacher.objects.count(),
        "students": Student.objects.count(),
        "groups": TeacherGroup.objects.count(),
        "open_incidents": Incident.objects.exclude(
            status=Incident.Status.RESOLVED
        ).count(),
        "pending_leave": LeaveRequest.objects.filter(
            status=LeaveRequest.Status.PENDING
        ).count(),
        "upcoming_events": SchoolEvent.objects.filter(end__gte=timezone.now()).count(),
    }
    context = {"counts": counts, "role": role}
    return render(request, "administration/admin_hub.html", context)


@login_required
def campus_locations(request):
    role = get_user_role(request.user)

    if role != "Admin":
        return HttpResponse("Access denied", status=403)

    editing = None
    location_id = request.POST.get("location_id") or request.GET.get("edit")
    if location_id:
        editing = get_object_or_404(CampusLocation, id=location_id)

    if request.method == "POST":
        if request.POST.get("action") == "delete" and editing:
            name = editing.name
            editing.delete()
            logger.info("Campus location %s deleted", name)
            messages.success(request, f"Campus location {name} deleted successfully.")
            return redirect("administration:campus_locations")

        form = CampusLocationForm(request.POST, instance=editing)
        if form.is_valid():
            location = form.save()
            logger.info("Campus location %s saved", location.name)
            messages.success(request, f"Campus location {location.name} saved successfully.")
            return redirect("administration:campus_locations")
    else:
        form = CampusLocationForm(instance=editing)

    context = {
        "form": form,
        "locations": CampusLocation.objects.all(),
        "editing": editing,
        "role": role,
    }
    return render(request, "administration/campus_locations.html", context)


@login_required
def toggle_location(request, location_id):
    role = get_user_role(request.user)

    if role != "Admin":
        return JsonResponse({"success": False, "error": "Access denied"}, status=403)
    if request.method != "POST":
        return JsonResponse({"success": False, "error": "Invalid request"}, status=405)

    location = get_object_or_404(CampusLocation, id=location_id)
    location.is_active = not location.is_active
    location.save(update_fields=["is_active", "updated_at"])
    logger.info(
        "Campus location %s %s",
        location.name,
        "activated" if location.is_active else "deactivated",
    )

    if request.headers.get("X-Requested-With") == "XMLHttpRequest":
        return JsonResponse({"success": True, "is_active": location.is_active})
    return redirect("administration:campus_locations")
