from django import forms

from teachers.models import Teacher
from .models import TeacherGroup


class TeacherGroupForm(forms.ModelForm):
    """Form for creating and editing teacher groups"""

    members = forms.ModelMultipleChoiceField(
        queryset=Teacher.objects.select_related("user"),
        required=True,
        error_messages={"required": "Please select at least one member"},
        widget=forms.CheckboxSelectMultiple,
    )

    class Meta:
        model = TeacherGroup
        fields = ["name", "description", "members"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["name"].error_messages["required"] = "Group name is required"

    def clean_name(self):
        name = self.cleaned_data["name"].strip()
        if not name:
            raise forms.ValidationError("Group name is required")
        return name
