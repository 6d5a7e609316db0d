"""
Spreadsheet import and export for student records.

Files are read and written with pandas (openpyxl for .xlsx). Imports are
validated up front and written in a single transaction, so a file either
imports completely or not at all.
"""

import logging
from decimal import Decimal, InvalidOperation
from io import BytesIO

import pandas as pd
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import transaction

from .models import Classroom, Grade, Student

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    "firstName",
    "lastName",
    "email",
    "grade",
    "homeroom",
    "guardian",
    "guardianEmail",
    "guardianPhone",
    "enrollmentDate",
    "gpa",
    "attendance",
]
MAX_REPORTED_ERRORS = 10

TEMPLATE_ROWS = [
    {
        "firstName": "John",
        "lastName": "Doe",
        "email": "john.doe@example.com",
        "grade": "Grade 9",
        "homeroom": "9A",
        "guardian": "Jane Doe",
        "guardianEmail": "jane.doe@example.com",
        "guardianPhone": "555-123-4567",
        "enrollmentDate": "2024-09-01",
        "gpa": 3.5,
        "attendance": 95,
    }
]


def student_rows(students):
    for student in students:
        yield {
            "firstName": student.first_name,
            "lastName": student.last_name,
            "email": student.email,
            "grade": student.grade.name,
            "homeroom": student.homeroom,
            "guardian": student.guardian,
            "guardianEmail": student.guardian_email,
            "guardianPhone": student.guardian_phone,
            "enrollmentDate": (
                student.enrollment_date.isoformat() if student.enrollment_date else ""
            ),
            "gpa": float(student.gpa),
            "attendance": float(student.attendance),
        }


def build_dataframe(rows):
    return pd.DataFrame(list(rows), columns=EXPORT_COLUMNS)


def dataframe_to_bytes(df, file_format):
    """Serialise ``df`` as ``xlsx`` or ``csv``; returns (content, content_type, extension)."""
    if file_format == "xlsx":
        output = BytesIO()
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Students", index=False)
        return (
            output.getvalue(),
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            "xlsx",
        )
    return df.to_csv(index=False).encode("utf-8"), "text/csv", "csv"


def read_upload(upload):
    name = upload.name.lower()
    if name.endswith((".xlsx", ".xls")):
        df = pd.read_excel(upload, dtype=str)
    elif name.endswith(".csv"):
        df = pd.read_csv(upload, dtype=str)
    else:
        raise ValidationError("Please upload a .xlsx or .csv file")
    df = df.dropna(how="all")
    return [
        {key: _text(value) for key, value in row.items()}
        for row in df.to_dict(orient="records")
    ]


def _text(value):
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    return str(value).strip()


def resolve_grade(value, grades_by_name):
    """Match a grade by name, or a bare number like ``9`` to ``Grade 9``."""
    if not value:
        return None
    key = value.lower()
    if key in grades_by_name:
        return grades_by_name[key]
    try:
        number = float(value)
    except ValueError:
        return None
    if not number.is_integer():
        return None
    return grades_by_name.get(f"grade {int(number)}")


def _decimal_in_range(value, low, high):
    try:
        number = Decimal(value)
    except InvalidOperation:
        return None
    if not number.is_finite() or not low <= number <= high:
        return None
    return number


def validate_rows(rows):
    """Return (errors, cleaned rows). Errors are capped for display."""
    if not rows:
        return ["No data found in the file"], []

    grades_by_name = {grade.name.lower(): grade for grade in Grade.objects.all()}
    errors = []
    cleaned = []

    for index, row in enumerate(rows, start=1):
        row_errors = []
        first_name = row.get("firstName", "")
        last_name = row.get("lastName", "")
        email = row.get("email", "")

        if not first_name:
            row_errors.append(f"Row {index}: Missing firstName")
        if not last_name:
            row_errors.append(f"Row {index}: Missing lastName")
        if not email:
            row_errors.append(f"Row {index}: Missing email")
        else:
            try:
                validate_email(email)
            except ValidationError:
                row_errors.append(f"Row {index}: Invalid email format for {email}")

        grade_value = row.get("grade", "")
        grade = resolve_grade(grade_value, grades_by_name)
        if not grade_value:
            row_errors.append(f"Row {index}: Missing grade")
        elif grade is None:
            row_errors.append(f"Row {index}: Unknown grade {grade_value}")

        gpa = Decimal("0")
        if row.get("gpa"):
            gpa = _decimal_in_range(row["gpa"], 0, 4)
            if gpa is None:
                row_errors.append(f"Row {index}: GPA must be a number between 0 and 4")

        attendance = Decimal("0")
        if row.get("attendance"):
            attendance = _decimal_in_range(row["attendance"], 0, 100)
            if attendance is None:
                row_errors.append(
                    f"Row {index}: Attendance must be a percentage between 0 and 100"
                )

        enrollment_date = None
        if row.get("enrollmentDate"):
            parsed = pd.to_datetime(row["enrollmentDate"], errors="coerce")
            if pd.isna(parsed):
                row_errors.append(f"Row {index}: Invalid enrollmentDate")
            else:
                enrollment_date = parsed.date()

        if row_errors:
            errors.extend(row_errors)
            continue

        cleaned.append(
            {
                "first_name": first_name,
                "last_name": last_name,
                "email": email.lower(),
                "grade": grade,
                "homeroom": row.get("homeroom", ""),
                "guardian": row.get("guardian", ""),
                "guardian_email": row.get("guardianEmail", ""),
                "guardian_phone": row.get("guardianPhone", ""),
                "enrollment_date": enrollment_date,
                "gpa": gpa.quantize(Decimal("0.01")),
                "attendance": attendance.quantize(Decimal("0.01")),
            }
        )

    return cap_errors(errors), cleaned


def cap_errors(errors):
    if len(errors) > MAX_REPORTED_ERRORS:
        rest = len(errors) - MAX_REPORTED_ERRORS
        return errors[:MAX_REPORTED_ERRORS] + [f"...and {rest} more errors"]
    return errors


@transaction.atomic
def import_students(cleaned_rows):
    """Create or update students by email. Returns (created, updated)."""
    created = updated = 0
    for data in cleaned_rows:
        homeroom = data.pop("homeroom")
        classroom = None
        if homeroom:
            classroom, _ = Classroom.objects.get_or_create(
                name=homeroom, defaults={"grade": data["grade"]}
            )
        data["classroom"] = classroom

        _, was_created = Student.objects.update_or_create(
            email=data.pop("email"), defaults=data
        )
        if was_created:
            created += 1
        else:
            updated += 1

    logger.info("Imported students: %d created, %d updated", created, updated)
    return created, updated
