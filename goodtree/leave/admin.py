from django.contrib import admin

from .models import LeaveDocument, LeaveRequest


class LeaveDocumentInline(admin.TabularInline):
    model = LeaveDocument
    extra = 0


@admin.register(LeaveRequest)
class LeaveRequestAdmin(admin.ModelAdmin):
    list_display = ("teacher", "leave_type", "start_date", "end_date", "status")
    list_filter = ("status", "leave_type")
    inlines = [LeaveDocumentInline]
