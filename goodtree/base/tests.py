from datetime import date

import pytest
from django.contrib.auth.models import User
from django.test import RequestFactory
from django.urls import reverse
from django.utils import timezone

from conftest import PASSWORD, make_user
from .calendar_utils import (
    GRID_CELLS,
    CalendarDay,
    build_month_grid,
    grid_weeks,
    parse_month,
    shift_month,
)
from .views import display_name, get_user_role, is_manager_role


def test_month_grid_starts_on_sunday_before_the_first():
    days = build_month_grid(2024, 3)

    assert len(days) == GRID_CELLS
    assert days[0].date == date(2024, 2, 25)
    assert not days[0].is_current_month
    assert days[5].date == date(2024, 3, 1)
    assert days[5].is_current_month
    assert days[-1].date == date(2024, 4, 6)


def test_month_starting_on_sunday_has_no_leading_days():
    days = build_month_grid(2024, 9)
    assert days[0].date == date(2024, 9, 1)


def test_grid_weeks_are_rows_of_seven():
    weeks = grid_weeks(build_month_grid(2025, 2))
    assert len(weeks) == 6
    assert all(len(week) == 7 for week in weeks)


def test_shift_month_wraps_years():
    assert shift_month(2025, 1, -1) == (2024, 12)
    assert shift_month(2025, 12, 1) == (2026, 1)
    assert shift_month(2025, 6, 0) == (2025, 6)


def test_parse_month_falls_back_to_today_on_bad_input():
    factory = RequestFactory()
    today = date(2025, 5, 17)

    assert parse_month(factory.get("/", {"year": "2024", "month": "2"}), today) == (2024, 2)
    assert parse_month(factory.get("/", {"month": "13"}), today) == (2025, 5)
    assert parse_month(factory.get("/", {"year": "abc"}), today) == (2025, 5)


def test_parse_month_rejects_years_the_grid_cannot_reach():
    factory = RequestFactory()
    today = date(2025, 5, 17)

    assert parse_month(factory.get("/", {"year": "9999", "month": "12"}), today) == (2025, 5)
    assert parse_month(factory.get("/", {"year": "1", "month": "1"}), today) == (2025, 5)
    assert parse_month(factory.get("/", {"year": "9998", "month": "12"}), today) == (9998, 12)
    assert build_month_grid(9998, 12)[-1].date.year == 9999
    assert len(build_month_grid(2, 1)) == GRID_CELLS


def test_parse_month_defaults_to_local_today(settings):
    settings.TIME_ZONE = "Pacific/Kiritimati"
    local_today = timezone.localdate()

    assert parse_month(RequestFactory().get("/")) == (local_today.year, local_today.month)
    assert CalendarDay(date=local_today, is_current_month=True).is_today


@pytest.mark.django_db
def test_calendar_pages_survive_edge_years(client, teacher, statuses):
    client.force_login(teacher.user)

    for params in ({"year": "9999", "month": "12"}, {"year": "1", "month": "1"}):
        assert client.get(reverse("tasks:task_calendar"), params).status_code == 200
        assert client.get(reverse("events:event_calendar"), params).status_code == 200


@pytest.mark.django_db
def test_role_comes_from_group_membership():
    assert get_user_role(make_user("a", "Admin")) == "Admin"
    assert get_user_role(make_user("m", "Manager")) == "Manager"
    assert get_user_role(make_user("t", "Teacher")) == "Teacher"
    assert get_user_role(make_user("n")) == "Teacher"
    assert is_manager_role("Manager")
    assert not is_manager_role("Teacher")


@pytest.mark.django_db
def test_display_name_prefers_full_name_then_email():
    assert display_name(User(username="x", first_name="Ann", last_name="Lee")) == "Ann Lee"
    assert display_name(User(username="x", email="ann.lee@goodtree.edu")) == "ann.lee"
    assert display_name(User(username="x")) == "x"
    assert display_name(None) == ""


@pytest.mark.django_db
def test_login_accepts_email(client, teacher):
    response = client.post(
        reverse("login"), {"username": "mjones@goodtree.edu", "password": PASSWORD}
    )
    assert response.status_code == 302
    assert response.url == reverse("dashboard:dashboard")


@pytest.mark.django_db
def test_login_rejects_wrong_role(client, teacher):
    response = client.post(
        reverse("login"),
        {"username": "mjones", "password": PASSWORD, "role": "Admin"},
    )
    assert response.status_code == 200
    assert response.context["error_message"] == "Invalid Credentials!"


@pytest.mark.django_db
def test_login_requires_both_fields(client):
    response = client.post(reverse("login"), {"username": "", "password": ""})
    assert response.context["error_message"] == "Please enter both email and password"


@pytest.mark.django_db
def test_homepage_redirects_anonymous_users_to_login(client):
    response = client.get(reverse("home"))
    assert response.url == reverse("login")
