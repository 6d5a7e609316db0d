from django.urls import path
from . import views

app_name = "events"

urlpatterns = [
    path("", views.event_list, name="event_list"),
    path("create/", views.event_form, name="create_event"),
    path("calendar/", views.event_calendar, name="event_calendar"),
    path("<int:event_id>/", views.event_detail, name="event_detail"),
    path("<int:event_id>/edit/", views.event_form, name="edit_event"),
    path("<int:event_id>/delete/", views.delete_event, name="delete_event"),
]
