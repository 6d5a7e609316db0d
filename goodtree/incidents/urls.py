from django.urls import path
from . import views

app_name = "incidents"

urlpatterns = [
    path("", views.incident_list, name="incident_list"),
    path("report/", views.incident_form, name="create_incident"),
    path("types/", views.manage_types, name="manage_types"),
    path("students/search/", views.student_search, name="student_search"),
    path("<int:incident_id>/", views.incident_detail, name="incident_detail"),
    path("<int:incident_id>/edit/", views.incident_form, name="edit_incident"),
    path("<int:incident_id>/delete/", views.delete_incident, name="delete_incident"),
]
