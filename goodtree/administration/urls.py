from django.urls import path
from . import views

app_name = "administration"

urlpatterns = [
    path("", views.admin_hub, name="admin_hub"),
    path("campus-locations/", views.campus_locations, name="campus_locations"),
    path(
        "campus-locations/<int:location_id>/toggle/",
        views.toggle_location,
        name="toggle_location",
    ),
]
