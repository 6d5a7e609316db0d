import pytest
from django.urls import reverse

from .forms import CampusLocationForm
from .models import CampusLocation, active_locations

pytestmark = pytest.mark.django_db


@pytest.fixture
def barnstaple(db):
    return CampusLocation.objects.create(name="Barnstaple Campus", address="123 Barnstaple Road")


def test_duplicate_location_names_are_rejected(barnstaple):
    form = CampusLocationForm(data={"name": "barnstaple campus"})
    assert form.errors["name"] == ["A campus location with this name already exists"]


def test_location_name_required():
    form = CampusLocationForm(data={"name": ""})
    assert form.errors["name"] == ["Campus location name is required"]


def test_active_locations_skip_inactive(barnstaple):
    CampusLocation.objects.create(name="Annex", is_active=False)
    assert list(active_locations()) == [barnstaple]


def test_toggle_location_over_ajax(client, school_admin, barnstaple):
    client.force_login(school_admin)
    response = client.post(
        reverse("administration:toggle_location", args=[barnstaple.id]),
        HTTP_X_REQUESTED_WITH="XMLHttpRequest",
    )

    assert response.json() == {"success": True, "is_active": False}
    barnstaple.refresh_from_db()
    assert not barnstaple.is_active


def test_toggle_location_denied_for_teachers(client, teacher, barnstaple):
    client.force_login(teacher.user)
    response = client.post(reverse("administration:toggle_location", args=[barnstaple.id]))

    assert response.status_code == 403
    assert response.json()["error"] == "Access denied"


def test_toggle_requires_post(client, school_admin, barnstaple):
    client.force_login(school_admin)
    response = client.get(reverse("administration:toggle_location", args=[barnstaple.id]))
    assert response.status_code == 405


def test_admin_hub_counts(client, school_admin, teacher, student):
    client.force_login(school_admin)
    response = client.get(reverse("administration:admin_hub"))

    assert response.context["counts"]["teachers"] == 1
    assert response.context["counts"]["students"] == 1


def test_campus_locations_page_saves_new_location(client, school_admin):
    client.force_login(school_admin)
    client.post(
        reverse("administration:campus_locations"),
        {"name": "Wesbury Campus", "address": "456 Wesbury Avenue"},
    )
    assert CampusLocation.objects.get().is_active
