from django.urls import path
from . import views

app_name = "groups"

urlpatterns = [
    path("", views.group_list, name="group_list"),
    path("create/", views.group_form, name="create_group"),
    path("<int:group_id>/edit/", views.group_form, name="edit_group"),
    path("<int:group_id>/delete/", views.delete_group, name="delete_group"),
]
