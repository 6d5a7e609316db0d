from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse

from .data_utils import (
    EXPORT_COLUMNS,
    MAX_REPORTED_ERRORS,
    build_dataframe,
    dataframe_to_bytes,
    import_students,
    read_upload,
    resolve_grade,
    student_rows,
    validate_rows,
)
from .forms import GradeForm, StudentDocumentForm, StudentForm
from .models import Classroom, Grade, Student, StudentDocument

pytestmark = pytest.mark.django_db


def row(**overrides):
    data = {
        "firstName": "Liam",
        "lastName": "Brown",
        "email": "liam.brown@students.goodtree.edu",
        "grade": "Grade 9",
        "homeroom": "9B",
        "guardian": "Kate Brown",
        "guardianEmail": "kate@example.com",
        "guardianPhone": "555-0101",
        "enrollmentDate": "2024-09-01",
        "gpa": "3.4",
        "attendance": "97.5",
    }
    data.update(overrides)
    return data


def test_empty_file_is_reported(grade):
    assert validate_rows([]) == (["No data found in the file"], [])


def test_valid_row_is_cleaned(grade):
    errors, cleaned = validate_rows([row()])

    assert errors == []
    assert cleaned[0]["grade"] == grade
    assert cleaned[0]["gpa"] == Decimal("3.40")
    assert cleaned[0]["enrollment_date"].isoformat() == "2024-09-01"


def test_blank_gpa_and_attendance_default_to_zero(grade):
    _, cleaned = validate_rows([row(gpa="", attendance="")])
    assert cleaned[0]["gpa"] == Decimal("0.00")
    assert cleaned[0]["attendance"] == Decimal("0.00")


def test_row_errors_are_numbered(grade):
    errors, cleaned = validate_rows(
        [
            row(),
            row(firstName="", email="not-an-email"),
            row(grade="Grade 42", gpa="4.5", attendance="120", enrollmentDate="soon"),
        ]
    )

    assert len(cleaned) == 1
    assert errors == [
        "Row 2: Missing firstName",
        "Row 2: Invalid email format for not-an-email",
        "Row 3: Unknown grade Grade 42",
        "Row 3: GPA must be a number between 0 and 4",
        "Row 3: Attendance must be a percentage between 0 and 100",
        "Row 3: Invalid enrollmentDate",
    ]


def test_missing_grade_is_distinct_from_unknown(grade):
    errors, _ = validate_rows([row(grade="")])
    assert errors == ["Row 1: Missing grade"]


def test_out_of_range_numeric_grade_is_a_row_error(grade):
    errors, cleaned = validate_rows([row(grade="1e400"), row(grade="9.5")])

    assert cleaned == []
    assert errors == ["Row 1: Unknown grade 1e400", "Row 2: Unknown grade 9.5"]


def test_errors_are_capped(grade):
    errors, _ = validate_rows([row(lastName="") for _ in range(MAX_REPORTED_ERRORS + 2)])

    assert len(errors) == MAX_REPORTED_ERRORS + 1
    assert errors[-1] == "...and 2 more errors"


def test_numeric_grade_resolves_to_grade_name(grade):
    grades = {g.name.lower(): g for g in Grade.objects.all()}

    assert resolve_grade("9", grades) == grade
    assert resolve_grade("9.0", grades) == grade
    assert resolve_grade("grade 9", grades) == grade
    assert resolve_grade("Year 9", grades) is None
    assert resolve_grade("", grades) is None
    assert resolve_grade("9.5", grades) is None
    assert resolve_grade("inf", grades) is None
    assert resolve_grade("1e400", grades) is None


def test_import_creates_and_updates_by_email(grade, student):
    _, cleaned = validate_rows(
        [row(), row(email=student.email.upper(), firstName="Amitabh", homeroom="")]
    )

    assert import_students(cleaned) == (1, 1)
    student.refresh_from_db()
    assert student.first_name == "Amitabh"
    assert student.classroom is None
    liam = Student.objects.get(email="liam.brown@students.goodtree.edu")
    assert liam.classroom == Classroom.objects.get(name="9B")
    assert liam.classroom.grade == grade


def test_read_upload_rejects_other_formats():
    with pytest.raises(ValidationError):
        read_upload(SimpleUploadedFile("students.txt", b"firstName\nAnn\n"))


def test_read_upload_parses_csv_as_text():
    upload = SimpleUploadedFile(
        "students.csv", b"firstName,lastName,gpa\nAnn,Lee,3.5\n,,\n"
    )
    assert read_upload(upload) == [{"firstName": "Ann", "lastName": "Lee", "gpa": "3.5"}]


def test_export_round_trips_through_csv(student):
    df = build_dataframe(student_rows(Student.objects.all()))
    content, content_type, extension = dataframe_to_bytes(df, "csv")

    assert content_type == "text/csv"
    assert extension == "csv"
    lines = content.decode("utf-8").splitlines()
    assert lines[0] == ",".join(EXPORT_COLUMNS)
    assert lines[1].startswith("Amit,Kumar,amit.kumar@students.goodtree.edu,Grade 9,9A")


def test_xlsx_export_is_a_zip(student):
    df = build_dataframe(student_rows(Student.objects.all()))
    content, _, extension = dataframe_to_bytes(df, "xlsx")

    assert extension == "xlsx"
    assert content[:2] == b"PK"


def student_form_data(grade, classroom, **overrides):
    data = {
        "first_name": "Zoe",
        "last_name": "Ng",
        "email": "Zoe.Ng@students.goodtree.edu",
        "grade": grade.id,
        "classroom": classroom.id,
        "guardian": "Tom Ng",
        "guardian_email": "tom@example.com",
        "guardian_phone": "555-0199",
        "gpa": "",
        "attendance": "",
    }
    data.update(overrides)
    return data


def test_student_form_normalises_email_and_defaults(grade, classroom):
    form = StudentForm(data=student_form_data(grade, classroom))

    assert form.is_valid(), form.errors
    student = form.save()
    assert student.email == "zoe.ng@students.goodtree.edu"
    assert student.gpa == 0


def test_student_form_messages(grade, classroom, student):
    form = StudentForm(
        data=student_form_data(
            grade, classroom, email=student.email, gpa="4.5", attendance="101", guardian=""
        )
    )

    assert not form.is_valid()
    assert form.errors["email"] == ["A student with this email already exists"]
    assert form.errors["gpa"] == ["GPA must be between 0 and 4"]
    assert form.errors["attendance"] == ["Attendance must be between 0 and 100"]
    assert form.errors["guardian"] == ["Guardian name is required"]


def test_grade_form_rejects_duplicates_and_orders_new_grades(grade):
    assert GradeForm(data={"name": "grade 9"}).errors["name"] == ["This grade already exists"]

    form = GradeForm(data={"name": "Grade 10"})
    assert form.is_valid(), form.errors
    assert form.save().order == 1


def test_document_requirements_depend_on_type(teacher):
    wellbeing = StudentDocumentForm(
        data={"doc_type": StudentDocument.DocumentType.WELLBEING, "title": "Check-in"}
    )
    assert not wellbeing.is_valid()
    assert wellbeing.errors["observation"] == ["Observation is required for wellbeing entries"]

    meeting = StudentDocumentForm(
        data={
            "doc_type": StudentDocument.DocumentType.PARENT_MEETING,
            "title": "Term review",
            "parent_guardians": "Mrs Kumar",
            "concerns": "Homework",
            "proposed_interventions": "Homework club",
            "agreed_next_steps": "Review in a month",
        }
    )
    assert not meeting.is_valid()
    assert meeting.errors["staff_attendees"] == ["At least one staff attendee is required"]

    data = dict(meeting.data, staff_attendees=[teacher.id])
    assert StudentDocumentForm(data=data).is_valid()


def test_add_document_view(client, teacher, student):
    client.force_login(teacher.user)
    response = client.post(
        reverse("students:add_document", args=[student.id]),
        {
            "doc_type": StudentDocument.DocumentType.ACADEMIC_INTERVENTION,
            "title": "Maths support",
            "subjects": "Mathematics",
            "academic_concerns": "Fractions",
            "proposed_interventions": "Small group sessions",
        },
    )

    assert response.status_code == 302
    document = student.documents.get()
    assert document.created_by == teacher.user


def test_documents_filtered_by_type(client, teacher, student):
    for doc_type in StudentDocument.DocumentType.values:
        StudentDocument.objects.create(student=student, doc_type=doc_type, title=doc_type)
    client.force_login(teacher.user)

    response = client.get(
        reverse("students:student_documents", args=[student.id]), {"type": "wellbeing"}
    )

    assert [d.doc_type for d in response.context["documents"]] == ["wellbeing"]


def test_student_management_is_admin_only(client, teacher, school_admin):
    client.force_login(teacher.user)
    assert client.get(reverse("students:student_management")).status_code == 403

    client.force_login(school_admin)
    assert client.get(reverse("students:student_management")).status_code == 200


def test_export_view_downloads_csv(client, school_admin, student):
    client.force_login(school_admin)
    response = client.get(reverse("students:export_students"), {"format": "csv"})

    assert response["Content-Type"] == "text/csv"
    assert "attachment" in response["Content-Disposition"]
    assert student.email in response.content.decode("utf-8")


def test_import_view_reports_errors_without_saving(client, school_admin, grade):
    client.force_login(school_admin)
    upload = SimpleUploadedFile(
        "students.csv",
        b"firstName,lastName,email,grade\nAnn,Lee,ann@example.com,Grade 9\nBob,,bob@example.com,Grade 9\n",
    )

    response = client.post(reverse("students:import_export"), {"file": upload})

    assert response.context["errors"] == ["Row 2: Missing lastName"]
    assert not Student.objects.exists()


def test_import_view_saves_valid_file(client, school_admin, grade):
    client.force_login(school_admin)
    upload = SimpleUploadedFile(
        "students.csv", b"firstName,lastName,email,grade\nAnn,Lee,ann@example.com,9\n"
    )

    response = client.post(reverse("students:import_export"), {"file": upload})

    assert response.status_code == 302
    assert Student.objects.get().grade == grade


def test_structure_page_deletes_unused_grade(client, school_admin, grade, student):
    spare = Grade.objects.create(name="Grade 12", order=12)
    client.force_login(school_admin)

    client.post(reverse("students:manage_grades"), {"item_id": spare.id, "action": "delete"})
    client.post(reverse("students:manage_grades"), {"item_id": grade.id, "action": "delete"})

    assert not Grade.objects.filter(pk=spare.pk).exists()
    assert Grade.objects.filter(pk=grade.pk).exists()
