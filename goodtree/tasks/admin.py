from django.contrib import admin

from .models import DocumentLink, Task, TaskAttachment, TaskStatus


class DocumentLinkInline(admin.TabularInline):
    model = DocumentLink
    extra = 0


class TaskAttachmentInline(admin.TabularInline):
    model = TaskAttachment
    extra = 0


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ("title", "status", "priority", "due_date", "assigned_by")
    list_filter = ("status", "priority")
    search_fields = ("title", "description")
    filter_horizontal = ("assigned_to", "assigned_to_groups")
    inlines = [DocumentLinkInline, TaskAttachmentInline]


@admin.register(TaskStatus)
class TaskStatusAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "color", "is_default", "order")
