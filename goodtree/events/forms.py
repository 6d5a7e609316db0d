from datetime import datetime

from django import forms
from django.utils import timezone

from students.models import Classroom, Grade, Phase
from .models import SchoolEvent

TargetType = SchoolEvent.TargetType

TARGET_FIELDS = {
    TargetType.CLASS: ("target_classes", "Select at least one class"),
    TargetType.GRADE: ("target_grades", "Select at least one grade"),
    TargetType.PHASE: ("target_phases", "Select at least one phase"),
}


class SchoolEventForm(forms.ModelForm):
    """Event form with separate date and time inputs for start and end"""

    start_date = forms.DateField(
        error_messages={"required": "Start date is required"},
        widget=forms.DateInput(attrs={"type": "date"}),
    )
    start_time = forms.TimeField(
        error_messages={"required": "Start time is required"},
        widget=forms.TimeInput(attrs={"type": "time"}),
    )
    end_date = forms.DateField(
        error_messages={"required": "End date is required"},
        widget=forms.DateInput(attrs={"type": "date"}),
    )
    end_time = forms.TimeField(
        error_messages={"required": "End time is required"},
        widget=forms.TimeInput(attrs={"type": "time"}),
    )
    target_type = forms.ChoiceField(
        choices=TargetType.choices,
        error_messages={"required": "Select at least one target audience"},
        widget=forms.RadioSelect,
    )
    target_classes = forms.ModelMultipleChoiceField(
        queryset=Classroom.objects.all(),
        required=False,
        widget=forms.CheckboxSelectMultiple,
    )
    target_grades = forms.ModelMultipleChoiceField(
        queryset=Grade.objects.all(),
        required=False,
        widget=forms.CheckboxSelectMultiple,
    )
    target_phases = forms.ModelMultipleChoiceField(
        queryset=Phase.objects.all(),
        required=False,
        widget=forms.CheckboxSelectMultiple,
    )

    class Meta:
        model = SchoolEvent
        fields = [
            "title",
            "description",
            "location",
            "target_type",
            "target_classes",
            "target_grades",
            "target_phases",
        ]
        widgets = {"description": forms.Textarea(attrs={"rows": 4})}

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["title"].error_messages["required"] = "Title is required"
        self.fields["description"].error_messages["required"] = "Description is required"
        self.fields["location"].error_messages["required"] = "Location is required"

        if self.instance and self.instance.pk:
            start = timezone.localtime(self.instance.start)
            end = timezone.localtime(self.instance.end)
            self.initial.update(
                {
                    "start_date": start.date(),
                    "start_time": start.time().replace(second=0, microsecond=0),
                    "end_date": end.date(),
                    "end_time": end.time().replace(second=0, microsecond=0),
                }
            )

    def clean(self):
        cleaned_data = super().clean()

        target_type = cleaned_data.get("target_type")
        if target_type in TARGET_FIELDS:
            field, message = TARGET_FIELDS[target_type]
            if not cleaned_data.get(field):
                self.add_error(field, message)

        parts = [cleaned_data.get(name) for name in ("start_date", "start_time", "end_date", "end_time")]
        if all(part is not None for part in parts):
            start = timezone.make_aware(datetime.combine(parts[0], parts[1]))
            end = timezone.make_aware(datetime.combine(parts[2], parts[3]))
            if end <= start:
                self.add_error("end_time", "End time must be after start time")
            else:
                cleaned_data["start"] = start
                cleaned_data["end"] = end
        return cleaned_data

    def save(self, commit=True):
        event = super().save(commit=False)
        event.start = self.cleaned_data["start"]
        event.end = self.cleaned_data["end"]
        if commit:
            event.save()
            self.save_m2m()
        return event

    def _save_m2m(self):
        super()._save_m2m()
        # only the list matching the chosen target type is kept
        chosen = TARGET_FIELDS.get(self.instance.target_type, (None,))[0]
        for field, _ in TARGET_FIELDS.values():
            if field != chosen:
                getattr(self.instance, field).clear()
