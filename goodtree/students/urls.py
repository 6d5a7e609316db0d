from django.urls import path
from . import views

app_name = "students"

urlpatterns = [
    path("management/", views.student_management, name="student_management"),
    path("add/", views.student_form, name="add_student"),
    path("<int:student_id>/", views.student_detail, name="student_detail"),
    path("<int:student_id>/edit/", views.student_form, name="edit_student"),
    path("<int:student_id>/delete/", views.delete_student, name="delete_student"),
    # Import / export (Admin only)
    path("import-export/", views.import_export, name="import_export"),
    path("export/", views.export_students, name="export_students"),
    path("import-template/", views.download_template, name="download_template"),
    # School structure (Admin only)
    path("structure/grades/", views.manage_grades, name="manage_grades"),
    path("structure/classes/", views.manage_classes, name="manage_classes"),
    path("structure/phases/", views.manage_phases, name="manage_phases"),
    # Learner development
    path("learner-development/", views.learner_development, name="learner_development"),
    path(
        "learner-development/<int:student_id>/",
        views.student_documents,
        name="student_documents",
    ),
    path(
        "learner-development/<int:student_id>/add/",
        views.add_document,
        name="add_document",
    ),
]
