from django.urls import path
from . import views

app_name = "leave"

urlpatterns = [
    path("", views.leave_list, name="leave_list"),
    path("apply/", views.apply_leave, name="apply_leave"),
    path("<int:leave_id>/", views.leave_detail, name="leave_detail"),
]
