from django.urls import path
from . import views

app_name = "tasks"

urlpatterns = [
    path("", views.task_list, name="task_list"),
    path("create/", views.create_task, name="create_task"),
    path("calendar/", views.task_calendar, name="task_calendar"),
    path("statuses/", views.manage_statuses, name="manage_statuses"),
    path("<int:task_id>/", views.task_detail, name="task_detail"),
    path("<int:task_id>/edit/", views.edit_task, name="edit_task"),
    path("<int:task_id>/submit/", views.submit_task, name="submit_task"),
    path("<int:task_id>/review/", views.review_task, name="review_task"),
    path("<int:task_id>/archive/", views.archive_task, name="archive_task"),
]
