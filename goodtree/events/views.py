import logging

from django.http import HttpRequest, HttpResponse
from django.shortcuts import render, redirect, get_object_or_404
from django.contrib.auth.decorators import login_required
from django.contrib import messages
from django.utils import timezone

from base.calendar_utils import build_month_grid, grid_weeks, parse_month, shift_month
from base.views import get_user_role
from students.models import Classroom, Grade, Phase
from .audience import events_on_day, filter_events, target_display
from .forms import SchoolEventForm
from .models import SchoolEvent

logger = logging.getLogger(__name__)


def _with_targets(events):
    return events.prefetch_related("target_classes", "target_grades", "target_phases")


@login_required
def event_list(request: HttpRequest):
    role = get_user_role(request.user)
    now = timezone.now()

    events = _with_targets(SchoolEvent.objects.all())
    upcoming = list(events.filter(end__gte=now).order_by("start"))
    past = list(events.filter(end__lt=now).order_by("-start"))
    for event in upcoming + past:
        event.audience = target_display(event)

    context = {
        "upcoming_events": upcoming,
        "past_events": past,
        "role": role,
    }
    return render(request, "events/event_list.html", context)


@login_required
def event_form(request: HttpRequest, event_id: int = None):
    """Create an event, or edit one when ``event_id`` is given"""
    role = get_user_role(request.user)

    if role != "Admin":
        return HttpResponse("Access denied", status=403)

    event = get_object_or_404(SchoolEvent, id=event_id) if event_id else None

    if request.method == "POST":
        form = SchoolEventForm(request.POST, instance=event)
        if form.is_valid():
            saved = form.save(commit=False)
            if event is None:
                saved.created_by = request.user
            saved.save()
            form.save_m2m()
            logger.info("Event %s saved by %s", saved.id, request.user.username)
            messages.success(request, f"Event {saved.title} saved successfully.")
            return redirect("events:event_detail", event_id=saved.id)
        messages.error(request, "Please correct the errors below.")
    else:
        form = SchoolEventForm(instance=event)

    context = {"form": form, "event": event, "role": role}
    return render(request, "events/event_form.html", context)


@login_required
def event_detail(request: HttpRequest, event_id: int):
    role = get_user_role(request.user)
    event = get_object_or_404(_with_targets(SchoolEvent.objects.all()), id=event_id)
    context = {
        "event": event,
        "audience": target_display(event),
        "role": role,
    }
    return render(request, "events/event_detail.html", context)


@login_required
def delete_event(request: HttpRequest, event_id: int):
    role = get_user_role(request.user)

    if role != "Admin":
        return HttpResponse("Access denied", status=403)

    event = get_object_or_404(SchoolEvent, id=event_id)
    if request.method == "POST":
        title = event.title
        event.delete()
        logger.info("Event %s deleted by %s", event_id, request.user.username)
        messages.success(request, f"Event {title} deleted successfully.")
        return redirect("events:event_list")
    return redirect("events:event_detail", event_id=event.id)


@login_required
def event_calendar(request: HttpRequest):
    role = get_user_role(request.user)
    year, month = parse_month(request)

    target_types = [
        value
        for value in request.GET.getlist("target_type")
        if value in SchoolEvent.TargetType.values
    ]
    classes = [pk for pk in request.GET.getlist("class") if pk.isdigit()]
    grades = [pk for pk in request.GET.getlist("grade") if pk.isdigit()]
    phases = [pk for pk in request.GET.getlist("phase") if pk.isdigit()]

    events = filter_events(
        _with_targets(SchoolEvent.objects.all()),
        target_types=target_types,
        classes=classes,
        grades=grades,
        phases=phases,
    )

    days = build_month_grid(year, month)
    for day in days:
        day.items = events_on_day(events, day.date)

    context = {
        "weeks": grid_weeks(days),
        "year": year,
        "month": month,
        "previous": shift_month(year, month, -1),
        "next": shift_month(year, month, 1),
        "target_types": SchoolEvent.TargetType.choices,
        "classrooms": Classroom.objects.all(),
        "grades": Grade.objects.all(),
        "phases": Phase.objects.all(),
        "selected_types": target_types,
        "selected_classes": classes,
        "selected_grades": grades,
        "selected_phases": phases,
        "role": role,
    }
    return render(request, "events/event_calendar.html", context)
