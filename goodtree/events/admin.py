from django.contrib import admin

from .models import SchoolEvent


@admin.register(SchoolEvent)
class SchoolEventAdmin(admin.ModelAdmin):
    list_display = ("title", "target_type", "start", "end", "location")
    list_filter = ("target_type",)
    search_fields = ("title", "description", "location")
    filter_horizontal = ("target_classes", "target_grades", "target_phases")
