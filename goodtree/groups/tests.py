import pytest
from django.urls import reverse

from .forms import TeacherGroupForm
from .models import TeacherGroup, groups_for_teacher

pytestmark = pytest.mark.django_db


@pytest.fixture
def english(teacher, manager):
    group = TeacherGroup.objects.create(name="English", created_by=manager)
    group.members.add(teacher)
    return group


def test_form_requires_name_and_members():
    form = TeacherGroupForm(data={"name": "", "description": ""})

    assert not form.is_valid()
    assert form.errors["name"] == ["Group name is required"]
    assert form.errors["members"] == ["Please select at least one member"]


def test_groups_for_teacher(english, other_teacher):
    assert list(groups_for_teacher(english.members.get())) == [english]
    assert not groups_for_teacher(other_teacher).exists()


def test_teacher_sees_only_own_groups(client, english, other_teacher, manager):
    science = TeacherGroup.objects.create(name="Science", created_by=manager)
    science.members.add(other_teacher)
    client.force_login(other_teacher.user)

    response = client.get(reverse("groups:group_list"))

    assert list(response.context["groups"]) == [science]
    assert response.context["can_manage"] is False


def test_teacher_cannot_create_groups(client, teacher):
    client.force_login(teacher.user)
    assert client.get(reverse("groups:create_group")).status_code == 403


def test_manager_creates_group(client, manager, teacher, other_teacher):
    client.force_login(manager)
    response = client.post(
        reverse("groups:create_group"),
        {"name": " Year 9 Team ", "description": "", "members": [teacher.id, other_teacher.id]},
    )

    group = TeacherGroup.objects.get()
    assert response.status_code == 302
    assert group.name == "Year 9 Team"
    assert group.created_by == manager
    assert group.members.count() == 2


def test_delete_requires_post(client, manager, english):
    client.force_login(manager)

    client.get(reverse("groups:delete_group", args=[english.id]))
    assert TeacherGroup.objects.exists()

    client.post(reverse("groups:delete_group", args=[english.id]))
    assert not TeacherGroup.objects.exists()
