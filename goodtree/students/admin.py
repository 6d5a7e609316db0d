from django.contrib import admin

from .models import Classroom, Grade, Phase, Student, StudentDocument


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ("first_name", "last_name", "email", "grade", "classroom")
    list_filter = ("grade",)
    search_fields = ("first_name", "last_name", "email", "guardian")

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("grade", "classroom")


@admin.register(StudentDocument)
class StudentDocumentAdmin(admin.ModelAdmin):
    list_display = ("title", "student", "doc_type", "created_by", "created_at")
    list_filter = ("doc_type",)


admin.site.register(Grade)
admin.site.register(Classroom)
admin.site.register(Phase)
