from django.contrib import admin

from .models import Teacher, TeacherRole


@admin.register(Teacher)
class TeacherAdmin(admin.ModelAdmin):
    list_display = ("user", "role", "subject", "department")
    list_filter = ("role", "department")
    search_fields = ("user__username", "user__first_name", "user__last_name", "subject")

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("user", "role")


@admin.register(TeacherRole)
class TeacherRoleAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "color", "is_default")
