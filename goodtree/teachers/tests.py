import pytest
from django.contrib.auth.models import User
from django.urls import reverse

from conftest import make_user
from .forms import TeacherEditForm, TeacherRoleForm, TeacherUserCreationForm
from .models import Teacher, TeacherRole
from .services import convert_user_to_teacher, unique_role_code
from .views import NO_TEACHERS_MESSAGE

pytestmark = pytest.mark.django_db


@pytest.fixture
def default_role(db):
    return TeacherRole.objects.create(
        code="administrator", name="Administrator", color="#3B82F6", is_default=True
    )


def test_convert_user_to_teacher_is_idempotent():
    user = make_user("newstaff")

    first = convert_user_to_teacher(user, subject="Art")
    second = convert_user_to_teacher(user, department="Creative")

    assert first.pk == second.pk
    assert second.subject == "Art"
    assert second.department == "Creative"
    assert user.groups.filter(name="Teacher").exists()


def test_unique_role_code_increments(default_role):
    assert unique_role_code("Head of Year") == "head_of_year"
    assert unique_role_code("Administrator") == "administrator_2"


def test_role_label_uses_subject(teacher):
    assert teacher.role_label == "English Teacher"
    assert teacher.name == "Mary Jones"


def test_creation_form_rejects_taken_email(teacher):
    form = TeacherUserCreationForm(
        data={
            "username": "someoneelse",
            "first_name": "Some",
            "last_name": "One",
            "email": "MJONES@goodtree.edu",
            "password1": "Tr1cky-pass-99",
            "password2": "Tr1cky-pass-99",
        }
    )

    assert not form.is_valid()
    assert form.errors["email"] == ["A user with this email already exists"]


def test_edit_form_messages(teacher, default_role):
    form = TeacherEditForm(
        data={"first_name": "", "last_name": " ", "email": "", "subject": ""},
        instance=teacher,
    )

    assert not form.is_valid()
    assert form.errors["email"] == ["Email is required"]
    assert form.errors["role"] == ["Teaching role is required"]
    assert form.errors["subject"] == ["Subject is required"]
    assert form.non_field_errors() == ["Name is required"]


def test_role_form_is_case_insensitive(default_role):
    form = TeacherRoleForm(data={"name": "administrator"})
    assert form.errors["name"] == ["A role with this name already exists"]

    form = TeacherRoleForm(data={"name": "  "})
    assert form.errors["name"] == ["Role name is required"]


def test_management_page_is_admin_only(client, teacher, school_admin):
    client.force_login(teacher.user)
    assert client.get(reverse("teachers:teacher_management")).status_code == 403

    client.force_login(school_admin)
    response = client.get(reverse("teachers:teacher_management"))
    assert list(response.context["teachers"]) == [teacher]


def test_empty_management_page_explains_next_step(client, school_admin):
    client.force_login(school_admin)
    response = client.get(reverse("teachers:teacher_management"))
    assert NO_TEACHERS_MESSAGE in response.content.decode()


def test_add_teacher_creates_account_and_profile(client, school_admin, default_role):
    client.force_login(school_admin)
    response = client.post(
        reverse("teachers:add_teacher"),
        {
            "username": "lwong",
            "first_name": "Lee",
            "last_name": "Wong",
            "email": "lee.wong@goodtree.edu",
            "password1": "Tr1cky-pass-99",
            "password2": "Tr1cky-pass-99",
            "role": default_role.id,
            "subject": "History",
        },
    )

    assert response.status_code == 302
    teacher = Teacher.objects.get(user__username="lwong")
    assert teacher.role == default_role
    assert teacher.user.groups.filter(name="Teacher").exists()


def test_edit_teacher_updates_user(client, school_admin, teacher, default_role):
    client.force_login(school_admin)
    client.post(
        reverse("teachers:edit_teacher", args=[teacher.id]),
        {
            "first_name": "Maria",
            "last_name": "Jones",
            "email": "maria.jones@goodtree.edu",
            "role": default_role.id,
            "subject": "Drama",
        },
    )

    teacher.refresh_from_db()
    assert teacher.user.first_name == "Maria"
    assert teacher.user.email == "maria.jones@goodtree.edu"
    assert teacher.subject == "Drama"


def test_delete_teacher_removes_login(client, school_admin, teacher):
    client.force_login(school_admin)
    client.post(reverse("teachers:delete_teacher", args=[teacher.id]))

    assert not Teacher.objects.exists()
    assert not User.objects.filter(username="mjones").exists()


def test_default_roles_cannot_be_deleted(client, school_admin, default_role):
    custom = TeacherRole.objects.create(code="mentor", name="Mentor")
    client.force_login(school_admin)

    client.post(reverse("teachers:manage_roles"), {"role_id": default_role.id, "action": "delete"})
    client.post(reverse("teachers:manage_roles"), {"role_id": custom.id, "action": "delete"})

    assert list(TeacherRole.objects.all()) == [default_role]


def test_new_role_gets_generated_code(client, school_admin):
    client.force_login(school_admin)
    client.post(reverse("teachers:manage_roles"), {"name": "Head of Year", "color": ""})

    role = TeacherRole.objects.get(name="Head of Year")
    assert role.code == "head_of_year"
    assert role.color == "#6366F1"
