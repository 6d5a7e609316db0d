from django import forms
from django.core.validators import URLValidator

from groups.models import TeacherGroup
from teachers.models import Teacher
from .models import Task, TaskStatus, status_code_for

REQUIRED_FIELDS_MESSAGE = "Please fill in all required fields"


class TaskForm(forms.ModelForm):
    """Form for creating and editing tasks"""

    assigned_to = forms.ModelMultipleChoiceField(
        queryset=Teacher.objects.select_related("user"),
        required=False,
        widget=forms.CheckboxSelectMultiple,
    )
    assigned_to_groups = forms.ModelMultipleChoiceField(
        queryset=TeacherGroup.objects.all(),
        required=False,
        widget=forms.CheckboxSelectMultiple,
    )
    document_urls = forms.CharField(
        required=False,
        widget=forms.Textarea(attrs={"rows": 3}),
        help_text="One URL per line",
    )

    class Meta:
        model = Task
        fields = [
            "title",
            "description",
            "due_date",
            "priority",
            "assigned_to",
            "assigned_to_groups",
        ]
        widgets = {
            "due_date": forms.DateTimeInput(
                attrs={"type": "datetime-local"}, format="%Y-%m-%dT%H:%M"
            ),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["due_date"].input_formats = ["%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M"]
        for name in ("title", "description", "due_date"):
            self.fields[name].required = False

    def clean(self):
        cleaned_data = super().clean()
        missing = (
            not (cleaned_data.get("title") or "").strip()
            or not (cleaned_data.get("description") or "").strip()
            or not cleaned_data.get("due_date")
        )
        if missing and "due_date" not in self.errors:
            raise forms.ValidationError(REQUIRED_FIELDS_MESSAGE)

        if not cleaned_data.get("assigned_to") and not cleaned_data.get(
            "assigned_to_groups"
        ):
            raise forms.ValidationError("Please assign to at least one teacher or group")
        return cleaned_data

    def clean_document_urls(self):
        validate = URLValidator()
        urls = []
        for line in self.cleaned_data.get("document_urls", "").splitlines():
            url = line.strip()
            if not url:
                continue
            try:
                validate(url)
            except forms.ValidationError:
                raise forms.ValidationError(f"{url} is not a valid URL")
            urls.append(url)
        return urls


class TaskEditForm(TaskForm):
    status = forms.ChoiceField(choices=())

    class Meta(TaskForm.Meta):
        fields = TaskForm.Meta.fields + ["status"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["status"].choices = [
            (status.code, status.name) for status in TaskStatus.objects.all()
        ]


class TaskSubmitForm(forms.Form):
    resolution = forms.CharField(
        widget=forms.Textarea(attrs={"rows": 5}),
        error_messages={"required": "Please describe how the task was completed"},
    )


class TaskStatusForm(forms.ModelForm):
    """Add or edit a task status"""

    class Meta:
        model = TaskStatus
        fields = ["name", "color"]
        widgets = {"color": forms.TextInput(attrs={"type": "color"})}

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["name"].error_messages["required"] = "Status name is required"
        self.fields["color"].required = False

    def clean_name(self):
        name = self.cleaned_data["name"].strip()
        if not name:
            raise forms.ValidationError("Status name is required")
        existing = TaskStatus.objects.filter(name__iexact=name)
        if self.instance.pk:
            existing = existing.exclude(pk=self.instance.pk)
        else:
            existing = existing | TaskStatus.objects.filter(code=status_code_for(name))
        if existing.exists():
            raise forms.ValidationError("A status with this name already exists")
        return name

    def clean_color(self):
        return self.cleaned_data.get("color") or "#6366F1"

    def save(self, commit=True):
        status = super().save(commit=False)
        if not status.pk:
            status.code = status_code_for(status.name)
            status.order = TaskStatus.objects.count()
        if commit:
            status.save()
        return status
