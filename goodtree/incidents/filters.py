"""
Filtering, sorting and lookups for incident reports.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from functools import cmp_to_key
from typing import List, Optional

from django.db.models import Q
from django.utils import timezone

from .models import Incident

FLAG_FIELDS = (
    "requires_intervention",
    "parent_notified",
    "requires_parent_notification",
    "intervened",
)
DATE_FIELDS = ("date", "created_at", "updated_at")


@dataclass
class IncidentCriteria:
    incident_type: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    search: str = ""
    initiators: List[int] = field(default_factory=list)
    affected_students: List[int] = field(default_factory=list)
    requires_intervention: Optional[bool] = None
    parent_notified: Optional[bool] = None
    requires_parent_notification: Optional[bool] = None
    intervened: Optional[bool] = None


def _local_bound(day, moment):
    value = datetime.combine(day, moment)
    return timezone.make_aware(value) if timezone.is_naive(value) else value


def _ids(related):
    return {obj.id for obj in related.all()}


def filter_incidents(incidents, criteria: IncidentCriteria):
    result = list(incidents)

    if criteria.incident_type:
        result = [i for i in result if i.incident_type_id == criteria.incident_type]

    if criteria.start_date:
        start = _local_bound(criteria.start_date, time.min)
        result = [i for i in result if i.date >= start]

    if criteria.end_date:
        end = _local_bound(criteria.end_date, time.max)
        result = [i for i in result if i.date <= end]

    query = criteria.search.strip().lower()
    if query:
        result = [
            i
            for i in result
            if query in i.title.lower() or query in i.description.lower()
        ]

    if criteria.initiators:
        wanted = set(criteria.initiators)
        result = [i for i in result if wanted & _ids(i.initiators)]

    if criteria.affected_students:
        wanted = set(criteria.affected_students)
        result = [i for i in result if wanted & _ids(i.affected_students)]

    for flag in FLAG_FIELDS:
        expected = getattr(criteria, flag)
        if expected is not None:
            result = [i for i in result if getattr(i, flag) == expected]

    return result


def _sort_value(incident, sort_field):
    if sort_field == "type":
        return incident.incident_type.name
    return getattr(incident, sort_field, None)


def _kind(value):
    if isinstance(value, datetime):
        return "date"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return "number"
    return None


def _compare(a, b):
    kind = _kind(a)
    if kind is None or kind != _kind(b):
        return 0
    if kind == "string":
        a, b = a.lower(), b.lower()
    return (a > b) - (a < b)


def sort_incidents(incidents, sort_field="date", direction="desc"):
    """Dates by time, strings case-insensitively, numbers numerically.

    Values of any other kind, or of mismatched kinds, keep their input order.
    """
    sign = -1 if direction == "desc" else 1

    def compare(x, y):
        return sign * _compare(_sort_value(x, sort_field), _sort_value(y, sort_field))

    return sorted(incidents, key=cmp_to_key(compare))


def incidents_by_status(status):
    return Incident.objects.filter(status=status).order_by("-date")


def incidents_by_type(incident_type):
    return Incident.objects.filter(incident_type=incident_type).order_by("-date")


def incidents_for_student(student):
    return (
        Incident.objects.filter(
            Q(initiators=student) | Q(affected_students=student) | Q(witnesses=student)
        )
        .distinct()
        .order_by("-date")
    )


def incidents_reported_by(user):
    return Incident.objects.filter(reported_by=user).order_by("-date")


def parse_flag(value):
    if value in ("true", "1", "yes"):
        return True
    if value in ("false", "0", "no"):
        return False
    return None
