import logging
from zipfile import BadZipFile

from django.http import HttpRequest, HttpResponse
from django.shortcuts import render, redirect, get_object_or_404
from django.contrib.auth.decorators import login_required
from django.contrib import messages
from django.core.exceptions import ValidationError
from django.db.models import ProtectedError, Q
from django.utils import timezone

from base.views import get_user_role
from incidents.filters import incidents_for_student
from .data_utils import (
    TEMPLATE_ROWS,
    build_dataframe,
    dataframe_to_bytes,
    import_students,
    read_upload,
    student_rows,
    validate_rows,
)
from .forms import (
    ClassroomForm,
    GradeForm,
    PhaseForm,
    StudentBulkImportForm,
    StudentDocumentForm,
    StudentForm,
)
from .models import Classroom, Grade, Phase, Student, StudentDocument

logger = logging.getLogger(__name__)


def search_students(students, search_query, grade_id):
    if grade_id:
        students = students.filter(grade_id=grade_id)
    if search_query:
        students = students.filter(
            Q(first_name__icontains=search_query)
            | Q(last_name__icontains=search_query)
            | Q(email__icontains=search_query)
            | Q(guardian__icontains=search_query)
        )
    return students


def _grade_param(request):
    value = request.GET.get("grade", "")
    return int(value) if value.isdigit() else None


@login_required
def student_management(request: HttpRequest):
    """Admin view for managing students"""
    role = get_user_role(request.user)

    if role != "Admin":
        return HttpResponse("Access denied", status=403)

    search_query = request.GET.get("search", "").strip()
    grade_id = _grade_param(request)

    students = Student.objects.select_related("grade", "classroom")
    students = search_students(students, search_query, grade_id)

    context = {
        "students": students,
        "grades": Grade.objects.all(),
        "search_query": search_query,
        "selected_grade": grade_id,
        "role": role,
    }
    return render(request, "students/student_management.html", context)


@login_required
def student_form(request: HttpRequest, student_id: int = None):
    """Admin view for adding a student, or editing one when ``student_id`` is given"""
    role = get_user_role(request.user)

    if role != "Admin":
        return HttpResponse("Access denied", status=403)

    student = get_object_or_404(Student, id=student_id) if student_id else None

    if request.method == "POST":
        form = StudentForm(request.POST, instance=student)
        if form.is_valid():
            saved = form.save()
            logger.info(
                "Student %s %s by %s",
                saved.id,
                "updated" if student else "created",
                request.user.username,
            )
            messages.success(request, f"Student {saved.name} saved successfully.")
            return redirect("students:student_detail", student_id=saved.id)
        messages.error(request, "Please correct the errors below.")
    else:
        form = StudentForm(instance=student)

    context = {"form": form, "student": student, "role": role}
    return render(request, "students/student_form.html", context)


@login_required
def student_detail(request: HttpRequest, student_id: int):
    role = get_user_role(request.user)

    if role != "Admin":
        return HttpResponse("Access denied", status=403)

    student = get_object_or_404(
        Student.objects.select_related("grade", "classroom"), id=student_id
    )
    context = {
        "student": student,
        "documents": student.documents.select_related("created_by"),
        "incidents": incidents_for_student(student).select_related("incident_type"),
        "role": role,
    }
    return render(request, "students/student_detail.html", context)


@login_required
def delete_student(request: HttpRequest, student_id: int):
    role = get_user_role(request.user)

    if role != "Admin":
        return HttpResponse("Access denied", status=403)

    student = get_object_or_404(Student, id=student_id)
    if request.method == "POST":
        name = student.name
        student.delete()
        logger.info("Student %s deleted by %s", student_id, request.user.username)
        messages.success(request, f"Student {name} deleted successfully.")
        return redirect("students:student_management")
    return redirect("students:student_detail", student_id=student.id)


@login_required
def import_export(request: HttpRequest):
    """Admin page for spreadsheet import and export"""
    role = get_user_role(request.user)

    if role != "Admin":
        return HttpResponse("Access denied", status=403)

    errors = []
    if request.method == "POST":
        form = StudentBulkImportForm(request.POST, request.FILES)
        if form.is_valid():
            try:
                rows = read_upload(form.cleaned_data["file"])
            except ValidationError as e:
                errors = e.messages
            except (ValueError, KeyError, BadZipFile) as e:
                logger.exception("Could not read uploaded student file")
                errors = [f"Error processing file: {e}"]
            else:
                errors, cleaned = validate_rows(rows)
                if not errors:
                    created, updated = import_students(cleaned)
                    messages.success(
                        request,
                        f"Successfully imported {created + updated} students "
                        f"({created} new, {updated} updated).",
                    )
                    return redirect("students:student_management")
    else:
        form = StudentBulkImportForm()

    context = {
        "form": form,
        "errors": errors,
        "student_count": Student.objects.count(),
        "role": role,
    }
    return render(request, "students/import_export.html", context)


def _spreadsheet_response(df, file_format, basename):
    content, content_type, extension = dataframe_to_bytes(df, file_format)
    response = HttpResponse(content, content_type=content_type)
    response["Content-Disposition"] = f'attachment; filename="{basename}.{extension}"'
    return response


@login_required
def export_students(request: HttpRequest):
    """Admin view for exporting students to CSV/Excel"""
    role = get_user_role(request.user)

    if role != "Admin":
        return HttpResponse("Access denied", status=403)

    file_format = "xlsx" if request.GET.get("format") == "xlsx" else "csv"
    students = Student.objects.select_related("grade", "classroom").order_by(
        "last_name", "first_name"
    )
    df = build_dataframe(student_rows(students))
    stamp = timezone.localtime().strftime("%Y%m%d_%H%M%S")
    logger.info("Exported %d students as %s", len(df), file_format)
    return _spreadsheet_response(df, file_format, f"students_export_{stamp}")


@login_required
def download_template(request: HttpRequest):
    role = get_user_role(request.user)

    if role != "Admin":
        return HttpResponse("Access denied", status=403)

    file_format = "xlsx" if request.GET.get("format") == "xlsx" else "csv"
    return _spreadsheet_response(
        build_dataframe(TEMPLATE_ROWS), file_format, "student_import_template"
    )


def _structure_page(request, model, form_class, template, url_name, label):
    """Shared add / edit / delete handling for grades, classes and phases"""
    role = get_user_role(request.user)

    if role != "Admin":
        return HttpResponse("Access denied", status=403)

    editing = None
    item_id = request.POST.get("item_id") or request.GET.get("edit")
    if item_id:
        editing = get_object_or_404(model, id=item_id)

    if request.method == "POST":
        if request.POST.get("action") == "delete" and editing:
            name = str(editing)
            try:
                editing.delete()
            except ProtectedError:
                messages.error(request, f"{label} {name} is in use and cannot be deleted")
            else:
                logger.info("%s %s deleted", label, name)
                messages.success(request, f"{label} {name} deleted successfully.")
            return redirect(url_name)

        form = form_class(request.POST, instance=editing)
        if form.is_valid():
            saved = form.save()
            logger.info("%s %s saved", label, saved)
            messages.success(request, f"{label} {saved} saved successfully.")
            return redirect(url_name)
    else:
        form = form_class(instance=editing)

    context = {
        "form": form,
        "items": model.objects.all(),
        "editing": editing,
        "label": label,
        "role": role,
    }
    return render(request, template, context)


@login_required
def manage_grades(request: HttpRequest):
    return _structure_page(
        request, Grade, GradeForm, "students/structure.html", "students:manage_grades", "Grade"
    )


@login_required
def manage_classes(request: HttpRequest):
    return _structure_page(
        request,
        Classroom,
        ClassroomForm,
        "students/structure.html",
        "students:manage_classes",
        "Class",
    )


@login_required
def manage_phases(request: HttpRequest):
    return _structure_page(
        request, Phase, PhaseForm, "students/structure.html", "students:manage_phases", "Phase"
    )


@login_required
def learner_development(request: HttpRequest):
    role = get_user_role(request.user)

    search_query = request.GET.get("search", "").strip()
    grade_id = _grade_param(request)

    students = Student.objects.select_related("grade", "classroom")
    students = search_students(students, search_query, grade_id)

    context = {
        "students": students,
        "grades": Grade.objects.all(),
        "search_query": search_query,
        "selected_grade": grade_id,
        "role": role,
    }
    return render(request, "students/learner_development.html", context)


@login_required
def student_documents(request: HttpRequest, student_id: int):
    role = get_user_role(request.user)
    student = get_object_or_404(Student, id=student_id)

    doc_type = request.GET.get("type", "all")
    documents = student.documents.select_related("created_by").prefetch_related(
        "staff_attendees__user"
    )
    if doc_type in StudentDocument.DocumentType.values:
        documents = documents.filter(doc_type=doc_type)
    else:
        doc_type = "all"

    context = {
        "student": student,
        "documents": documents,
        "document_types": StudentDocument.DocumentType.choices,
        "current_type": doc_type,
        "role": role,
    }
    return render(request, "students/student_documents.html", context)


@login_required
def add_document(request: HttpRequest, student_id: int):
    role = get_user_role(request.user)
    student = get_object_or_404(Student, id=student_id)

    if request.method == "POST":
        form = StudentDocumentForm(request.POST)
        if form.is_valid():
            document = form.save(commit=False)
            document.student = student
            document.created_by = request.user
            document.save()
            form.save_m2m()
            logger.info(
                "%s added for student %s by %s",
                document.get_doc_type_display(),
                student.id,
                request.user.username,
            )
            messages.success(request, "Document added successfully.")
            return redirect("students:student_documents", student_id=student.id)
        messages.error(request, "Please correct the errors below.")
    else:
        form = StudentDocumentForm(
            initial={"doc_type": request.GET.get("type", StudentDocument.DocumentType.WELLBEING)}
        )

    context = {"form": form, "student": student, "role": role}
    return render(request, "students/add_document.html", context)
