"""
Who an event is for, and which events a class, grade or phase should see.
"""

from django.db.models import Q
from django.utils import timezone

from .models import SchoolEvent

TargetType = SchoolEvent.TargetType


def events_for_classroom(classroom):
    query = Q(target_type=TargetType.SCHOOL) | Q(
        target_type=TargetType.CLASS, target_classes=classroom
    )
    if classroom.grade_id:
        query |= Q(target_type=TargetType.GRADE, target_grades=classroom.grade_id)
        query |= Q(
            target_type=TargetType.PHASE, target_phases__grades=classroom.grade_id
        )
    return SchoolEvent.objects.filter(query).distinct()


def events_for_grade(grade):
    query = (
        Q(target_type=TargetType.SCHOOL)
        | Q(target_type=TargetType.GRADE, target_grades=grade)
        | Q(target_type=TargetType.PHASE, target_phases__grades=grade)
    )
    return SchoolEvent.objects.filter(query).distinct()


def events_for_phase(phase):
    query = Q(target_type=TargetType.SCHOOL) | Q(
        target_type=TargetType.PHASE, target_phases=phase
    )
    return SchoolEvent.objects.filter(query).distinct()


def event_targets(event, classroom):
    """Whether ``event`` is addressed to ``classroom``."""
    if event.target_type == TargetType.SCHOOL:
        return True
    if event.target_type == TargetType.CLASS:
        return event.target_classes.filter(pk=classroom.pk).exists()
    if classroom.grade_id is None:
        return False
    if event.target_type == TargetType.GRADE:
        return event.target_grades.filter(pk=classroom.grade_id).exists()
    if event.target_type == TargetType.PHASE:
        return event.target_phases.filter(grades=classroom.grade_id).exists()
    return False


def _selected_ids(related):
    return {obj.id for obj in related.all()}


def filter_events(events, target_types=(), classes=(), grades=(), phases=()):
    """Narrow events by the calendar filter panel.

    With nothing selected every event is kept. A class, grade or phase
    selection only narrows events of that target type.
    """
    events = list(events)
    if not (target_types or classes or grades or phases):
        return events

    if target_types:
        events = [event for event in events if event.target_type in target_types]

    for target_type, selection, relation in (
        (TargetType.CLASS, classes, "target_classes"),
        (TargetType.GRADE, grades, "target_grades"),
        (TargetType.PHASE, phases, "target_phases"),
    ):
        if not selection:
            continue
        wanted = set(int(pk) for pk in selection)
        events = [
            event
            for event in events
            if event.target_type != target_type
            or wanted & _selected_ids(getattr(event, relation))
        ]
    return events


def _local_date(value):
    if timezone.is_aware(value):
        value = timezone.localtime(value)
    return value.date()


def events_on_day(events, day):
    return [
        event
        for event in events
        if _local_date(event.start) <= day <= _local_date(event.end)
    ]


def target_display(event):
    if event.target_type == TargetType.CLASS:
        names = ", ".join(c.name for c in event.target_classes.all())
        return f"Class {names}"
    if event.target_type == TargetType.GRADE:
        names = ", ".join(g.name for g in event.target_grades.all())
        return f"Grade {names}"
    if event.target_type == TargetType.PHASE:
        return ", ".join(p.name for p in event.target_phases.all())
    return "Whole School"
