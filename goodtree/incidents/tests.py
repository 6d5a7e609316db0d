from datetime import date, timedelta

import pytest
from django.urls import reverse
from django.utils import timezone

from administration.models import CampusLocation
from conftest import aware
from .filters import (
    IncidentCriteria,
    filter_incidents,
    incidents_by_status,
    incidents_by_type,
    incidents_for_student,
    incidents_reported_by,
    parse_flag,
    sort_incidents,
)
from .forms import IncidentForm, IncidentTypeForm
from .models import Incident, IncidentType

pytestmark = pytest.mark.django_db


@pytest.fixture
def fighting(db):
    return IncidentType.objects.create(code="fighting", name="Fighting", is_default=True)


def form_data(bullying, **overrides):
    data = {
        "title": "Pushing in the queue",
        "incident_type": bullying.id,
        "description": "Pushed a classmate at lunch",
        "date": "2025-03-04T12:30",
        "location": "Barnstaple Campus",
        "severity": "minor",
        "status": "open",
    }
    data.update(overrides)
    return data


def test_form_requires_an_initiator_or_affected_student(bullying):
    form = IncidentForm(data=form_data(bullying))

    assert not form.is_valid()
    assert form.non_field_errors() == [
        "At least one initiator or affected student must be selected"
    ]


def test_form_requires_resolution_when_resolved(bullying, student):
    form = IncidentForm(data=form_data(bullying, status="resolved", initiators=[student.id]))

    assert not form.is_valid()
    assert form.errors["resolution"] == [
        "Resolution is required when the status is set to Resolved"
    ]


def test_form_required_messages(bullying):
    form = IncidentForm(data={})

    assert not form.is_valid()
    assert form.errors["title"] == ["Title is required"]
    assert form.errors["date"] == ["Date is required"]
    assert form.errors["location"] == ["Location is required"]


def test_form_offers_active_campus_locations(bullying):
    CampusLocation.objects.create(name="Wesbury Campus")
    CampusLocation.objects.create(name="Old Site", is_active=False)

    assert IncidentForm().location_choices == ["Wesbury Campus"]


def test_filter_by_type_and_search(incident_factory, fighting, student):
    bullying_case = incident_factory(title="Teasing", initiators=[student])
    fight = incident_factory(
        title="Scuffle", incident_type=fighting, description="Fight by the gym"
    )
    incidents = [bullying_case, fight]

    assert filter_incidents(incidents, IncidentCriteria(incident_type=fighting.id)) == [fight]
    assert filter_incidents(incidents, IncidentCriteria(search="GYM")) == [fight]
    assert filter_incidents(incidents, IncidentCriteria(search="teas")) == [bullying_case]


def test_filter_by_date_range_is_inclusive(incident_factory):
    early = incident_factory(date=aware(2025, 3, 1, 8, 0))
    late = incident_factory(date=aware(2025, 3, 10, 23, 30))
    incidents = [early, late]

    criteria = IncidentCriteria(start_date=date(2025, 3, 1), end_date=date(2025, 3, 10))
    assert filter_incidents(incidents, criteria) == [early, late]
    assert filter_incidents(incidents, IncidentCriteria(start_date=date(2025, 3, 2))) == [late]
    assert filter_incidents(incidents, IncidentCriteria(end_date=date(2025, 3, 9))) == [early]


def test_filter_by_students_and_flags(incident_factory, student, another_student):
    started = incident_factory(initiators=[student], requires_intervention=True)
    affected = incident_factory(affected=[another_student], parent_notified=True)
    incidents = [started, affected]

    assert filter_incidents(incidents, IncidentCriteria(initiators=[student.id])) == [started]
    assert filter_incidents(
        incidents, IncidentCriteria(affected_students=[another_student.id])
    ) == [affected]
    assert filter_incidents(incidents, IncidentCriteria(requires_intervention=True)) == [started]
    assert filter_incidents(incidents, IncidentCriteria(parent_notified=False)) == [started]


def test_sort_by_date_defaults_to_newest_first(incident_factory):
    old = incident_factory(date=timezone.now() - timedelta(days=3))
    new = incident_factory(date=timezone.now())

    assert sort_incidents([old, new]) == [new, old]
    assert sort_incidents([new, old], "date", "asc") == [old, new]


def test_sort_strings_case_insensitively(incident_factory, fighting):
    a = incident_factory(title="apple", incident_type=fighting)
    b = incident_factory(title="Banana")

    assert sort_incidents([b, a], "title", "asc") == [a, b]
    assert sort_incidents([a, b], "type", "asc") == [b, a]


def test_sort_on_unsortable_field_keeps_order(incident_factory):
    first = incident_factory(title="first")
    second = incident_factory(title="second")

    assert sort_incidents([second, first], "parent_notified") == [second, first]
    assert sort_incidents([second, first], "no_such_field") == [second, first]


def test_incidents_for_student_are_distinct(incident_factory, student):
    incident = incident_factory(initiators=[student])
    incident.witnesses.add(student)

    assert list(incidents_for_student(student)) == [incident]


def test_lookup_helpers(incident_factory, teacher, manager, bullying):
    resolved = incident_factory(status=Incident.Status.RESOLVED, resolution="Apologised")
    incident_factory(reported_by=manager)

    assert list(incidents_by_status(Incident.Status.RESOLVED)) == [resolved]
    assert list(incidents_reported_by(teacher.user)) == [resolved]
    assert incidents_by_type(bullying).count() == 2
    assert not incidents_by_type(IncidentType.objects.create(code="other", name="Other")).exists()


def test_parse_flag():
    assert parse_flag("true") is True
    assert parse_flag("0") is False
    assert parse_flag("") is None
    assert parse_flag(None) is None


def test_type_form_rejects_duplicate_names(bullying):
    assert not IncidentTypeForm(data={"name": "BULLYING"}).is_valid()

    form = IncidentTypeForm(data={"name": "Cyber Bullying", "color": ""})
    assert form.is_valid()
    assert form.save().code == "cyber_bullying"


def test_report_incident_view(client, teacher, bullying, student):
    client.force_login(teacher.user)
    response = client.post(
        reverse("incidents:create_incident"),
        form_data(bullying, initiators=[student.id], follow_up_actions="Call home\n\nDetention"),
    )

    incident = Incident.objects.get()
    assert response.status_code == 302
    assert incident.reported_by == teacher.user
    assert incident.follow_up_list == ["Call home", "Detention"]


def test_only_reporter_or_manager_can_edit(client, incident_factory, other_teacher, manager):
    incident = incident_factory()

    client.force_login(other_teacher.user)
    assert client.get(reverse("incidents:edit_incident", args=[incident.id])).status_code == 403

    client.force_login(manager)
    assert client.get(reverse("incidents:edit_incident", args=[incident.id])).status_code == 200


def test_teacher_cannot_delete(client, incident_factory, teacher):
    incident = incident_factory()
    client.force_login(teacher.user)

    response = client.post(reverse("incidents:delete_incident", args=[incident.id]))

    assert response.status_code == 403
    assert Incident.objects.filter(pk=incident.pk).exists()


def test_incident_list_applies_query_filters(client, incident_factory, teacher, fighting):
    incident_factory(title="Teasing")
    incident_factory(title="Scuffle", incident_type=fighting)
    client.force_login(teacher.user)

    response = client.get(
        reverse("incidents:incident_list"), {"type": fighting.id, "sort": "title"}
    )

    assert [i.title for i in response.context["incidents"]] == ["Scuffle"]


def test_incident_list_reports_bad_dates(client, teacher):
    client.force_login(teacher.user)
    response = client.get(reverse("incidents:incident_list"), {"start_date": "2025-02-30"})
    assert response.status_code == 200


def test_student_search_returns_json(client, teacher, student):
    client.force_login(teacher.user)
    response = client.get(reverse("incidents:student_search"), {"q": "ami"})

    assert response.json() == {
        "success": True,
        "results": [
            {"id": student.id, "name": "Amit Kumar", "grade": "Grade 9", "homeroom": "9A"}
        ],
    }


def test_type_in_use_cannot_be_deleted(client, school_admin, incident_factory):
    custom = IncidentType.objects.create(code="vaping", name="Vaping")
    incident_factory(incident_type=custom)
    client.force_login(school_admin)

    client.post(reverse("incidents:manage_types"), {"type_id": custom.id, "action": "delete"})

    assert IncidentType.objects.filter(pk=custom.pk).exists()
