from django.contrib import admin

from .models import Incident, IncidentType


@admin.register(Incident)
class IncidentAdmin(admin.ModelAdmin):
    list_display = ("title", "incident_type", "severity", "status", "date", "reported_by")
    list_filter = ("incident_type", "severity", "status", "requires_intervention")
    search_fields = ("title", "description", "location")
    filter_horizontal = ("initiators", "affected_students", "witnesses", "involved_teachers")


@admin.register(IncidentType)
class IncidentTypeAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "color", "is_default")
