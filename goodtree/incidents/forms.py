from django import forms
from django.utils.text import slugify

from administration.models import active_locations
from students.models import Student
from teachers.models import Teacher
from .models import Incident, IncidentType


class IncidentForm(forms.ModelForm):
    """Form for reporting and editing incidents"""

    date = forms.DateTimeField(
        required=True,
        input_formats=["%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M", "%Y-%m-%d"],
        error_messages={"required": "Date is required"},
        widget=forms.DateTimeInput(
            attrs={"type": "datetime-local"}, format="%Y-%m-%dT%H:%M"
        ),
    )
    initiators = forms.ModelMultipleChoiceField(
        queryset=Student.objects.all(), required=False
    )
    affected_students = forms.ModelMultipleChoiceField(
        queryset=Student.objects.all(), required=False
    )
    witnesses = forms.ModelMultipleChoiceField(
        queryset=Student.objects.all(), required=False
    )
    involved_teachers = forms.ModelMultipleChoiceField(
        queryset=Teacher.objects.select_related("user"), required=False
    )

    class Meta:
        model = Incident
        fields = [
            "title",
            "incident_type",
            "description",
            "date",
            "location",
            "initiators",
            "affected_students",
            "witnesses",
            "involved_teachers",
            "severity",
            "status",
            "resolution",
            "parent_notified",
            "requires_parent_notification",
            "requires_intervention",
            "intervened",
            "post_incident_intervention",
            "follow_up_actions",
        ]
        widgets = {
            "description": forms.Textarea(attrs={"rows": 4}),
            "resolution": forms.Textarea(attrs={"rows": 3}),
            "follow_up_actions": forms.Textarea(attrs={"rows": 3}),
            "location": forms.TextInput(attrs={"list": "campus-locations"}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["title"].error_messages["required"] = "Title is required"
        self.fields["description"].error_messages["required"] = "Description is required"
        self.fields["location"].error_messages["required"] = "Location is required"
        self.fields["incident_type"].error_messages["required"] = "Incident type is required"
        self.location_choices = [location.name for location in active_locations()]

    def clean(self):
        cleaned_data = super().clean()

        if not cleaned_data.get("initiators") and not cleaned_data.get(
            "affected_students"
        ):
            raise forms.ValidationError(
                "At least one initiator or affected student must be selected"
            )

        if cleaned_data.get("status") == Incident.Status.RESOLVED and not (
            cleaned_data.get("resolution") or ""
        ).strip():
            self.add_error(
                "resolution", "Resolution is required when the status is set to Resolved"
            )
        return cleaned_data


class IncidentTypeForm(forms.ModelForm):
    """Add or edit an incident type"""

    class Meta:
        model = IncidentType
        fields = ["name", "color"]
        widgets = {"color": forms.TextInput(attrs={"type": "color"})}

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["name"].error_messages["required"] = "Incident type name is required"
        self.fields["color"].required = False

    def clean_name(self):
        name = self.cleaned_data["name"].strip()
        if not name:
            raise forms.ValidationError("Incident type name is required")
        existing = IncidentType.objects.filter(name__iexact=name)
        if self.instance.pk:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise forms.ValidationError("An incident type with this name already exists")
        return name

    def clean_color(self):
        return self.cleaned_data.get("color") or "#6366F1"

    def save(self, commit=True):
        incident_type = super().save(commit=False)
        if not incident_type.code:
            base = slugify(incident_type.name).replace("-", "_") or "type"
            code = base
            counter = 2
            while IncidentType.objects.filter(code=code).exists():
                code = f"{base}_{counter}"
                counter += 1
            incident_type.code = code
        if commit:
            incident_type.save()
        return incident_type
