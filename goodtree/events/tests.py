from datetime import date

import pytest
from django.urls import reverse

from conftest import aware
from students.models import Classroom, Grade
from .audience import (
    event_targets,
    events_for_classroom,
    events_for_grade,
    events_for_phase,
    events_on_day,
    filter_events,
    target_display,
)
from .forms import SchoolEventForm
from .models import SchoolEvent

pytestmark = pytest.mark.django_db

TargetType = SchoolEvent.TargetType


def make_event(title, target_type, start=None, end=None, **targets):
    event = SchoolEvent.objects.create(
        title=title,
        description=f"{title} description",
        start=start or aware(2025, 4, 10, 9, 0),
        end=end or aware(2025, 4, 10, 15, 0),
        location="Main hall",
        target_type=target_type,
    )
    for relation, items in targets.items():
        getattr(event, relation).set(items)
    return event


@pytest.fixture
def other_grade(db):
    return Grade.objects.create(name="Grade 3", order=3)


def event_data(**overrides):
    data = {
        "title": "Sports Day",
        "description": "Whole school sports",
        "location": "Field",
        "start_date": "2025-05-02",
        "start_time": "09:00",
        "end_date": "2025-05-02",
        "end_time": "15:00",
        "target_type": "school",
    }
    data.update(overrides)
    return data


def test_form_rejects_end_before_start():
    form = SchoolEventForm(data=event_data(end_time="08:00"))

    assert not form.is_valid()
    assert form.errors["end_time"] == ["End time must be after start time"]


def test_form_requires_targets_for_chosen_type():
    form = SchoolEventForm(data=event_data(target_type="class"))

    assert not form.is_valid()
    assert form.errors["target_classes"] == ["Select at least one class"]


def test_form_keeps_only_the_chosen_target_list(grade, classroom):
    form = SchoolEventForm(
        data=event_data(
            target_type="grade",
            target_grades=[grade.id],
            target_classes=[classroom.id],
        )
    )
    assert form.is_valid(), form.errors

    event = form.save()
    assert list(event.target_grades.all()) == [grade]
    assert not event.target_classes.exists()
    assert event.start == aware(2025, 5, 2, 9, 0)


def test_edit_form_splits_start_and_end(grade):
    event = make_event("Assembly", TargetType.SCHOOL)
    form = SchoolEventForm(instance=event)

    assert form.initial["start_date"] == date(2025, 4, 10)
    assert form.initial["end_time"].hour == 15


def test_audience_queries(grade, other_grade, classroom, phase):
    school = make_event("Open day", TargetType.SCHOOL)
    for_class = make_event("9A trip", TargetType.CLASS, target_classes=[classroom])
    for_grade = make_event("Grade 9 exam", TargetType.GRADE, target_grades=[grade])
    for_phase = make_event("High school fair", TargetType.PHASE, target_phases=[phase])
    elsewhere = make_event("Grade 3 play", TargetType.GRADE, target_grades=[other_grade])

    assert set(events_for_classroom(classroom)) == {school, for_class, for_grade, for_phase}
    assert set(events_for_grade(grade)) == {school, for_grade, for_phase}
    assert set(events_for_grade(other_grade)) == {school, elsewhere}
    assert set(events_for_phase(phase)) == {school, for_phase}


def test_event_targets(grade, other_grade, classroom, phase):
    other_class = Classroom.objects.create(name="3B", grade=other_grade)
    for_phase = make_event("High school fair", TargetType.PHASE, target_phases=[phase])

    assert event_targets(for_phase, classroom)
    assert not event_targets(for_phase, other_class)
    assert event_targets(make_event("Open day", TargetType.SCHOOL), other_class)


def test_filter_events_without_selection_keeps_everything(grade):
    events = [make_event("a", TargetType.SCHOOL), make_event("b", TargetType.GRADE, target_grades=[grade])]
    assert filter_events(events) == events


def test_filter_events_by_type_and_selection(grade, other_grade):
    school = make_event("Open day", TargetType.SCHOOL)
    nine = make_event("Grade 9 exam", TargetType.GRADE, target_grades=[grade])
    three = make_event("Grade 3 play", TargetType.GRADE, target_grades=[other_grade])
    events = [school, nine, three]

    assert filter_events(events, target_types=["grade"]) == [nine, three]
    # a grade selection leaves events of other target types alone
    assert filter_events(events, grades=[str(grade.id)]) == [school, nine]


def test_events_on_day_spans_multiple_days():
    camp = make_event(
        "Camp", TargetType.SCHOOL, start=aware(2025, 6, 1, 9), end=aware(2025, 6, 3, 12)
    )

    assert events_on_day([camp], date(2025, 6, 2)) == [camp]
    assert events_on_day([camp], date(2025, 6, 3)) == [camp]
    assert events_on_day([camp], date(2025, 6, 4)) == []


def test_target_display(grade, classroom, phase):
    assert target_display(make_event("a", TargetType.SCHOOL)) == "Whole School"
    assert target_display(make_event("b", TargetType.CLASS, target_classes=[classroom])) == "Class 9A"
    assert target_display(make_event("c", TargetType.GRADE, target_grades=[grade])) == "Grade Grade 9"
    assert target_display(make_event("d", TargetType.PHASE, target_phases=[phase])) == "High School"


def test_only_admin_can_create_events(client, teacher, school_admin):
    client.force_login(teacher.user)
    assert client.get(reverse("events:create_event")).status_code == 403

    client.force_login(school_admin)
    response = client.post(reverse("events:create_event"), event_data())
    event = SchoolEvent.objects.get()
    assert response.status_code == 302
    assert event.created_by == school_admin


def test_event_calendar_filters_by_target(client, teacher, grade, other_grade):
    nine = make_event("Grade 9 exam", TargetType.GRADE, target_grades=[grade])
    make_event("Grade 3 play", TargetType.GRADE, target_grades=[other_grade])
    client.force_login(teacher.user)

    response = client.get(
        reverse("events:event_calendar"),
        {"year": 2025, "month": 4, "grade": [grade.id]},
    )

    days = [day for week in response.context["weeks"] for day in week]
    tenth = next(day for day in days if day.date == date(2025, 4, 10))
    assert tenth.items == [nine]


def test_event_list_splits_upcoming_and_past(client, teacher):
    make_event("Long ago", TargetType.SCHOOL)
    client.force_login(teacher.user)

    response = client.get(reverse("events:event_list"))

    assert [e.title for e in response.context["past_events"]] == ["Long ago"]
    assert response.context["past_events"][0].audience == "Whole School"
