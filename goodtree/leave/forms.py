from django import forms

from .models import LeaveRequest


class MultipleFileInput(forms.ClearableFileInput):
    allow_multiple_selected = True


class MultipleFileField(forms.FileField):
    def __init__(self, *args, **kwargs):
        kwargs.setdefault("widget", MultipleFileInput())
        super().__init__(*args, **kwargs)

    def clean(self, data, initial=None):
        single_file_clean = super().clean
        if isinstance(data, (list, tuple)):
            return [single_file_clean(d, initial) for d in data]
        if not data:
            return []
        return [single_file_clean(data, initial)]


class LeaveRequestForm(forms.ModelForm):
    """Form for teachers applying for leave"""

    documents = MultipleFileField(required=False)

    class Meta:
        model = LeaveRequest
        fields = ["leave_type", "start_date", "end_date", "reason"]
        widgets = {
            "start_date": forms.DateInput(attrs={"type": "date"}),
            "end_date": forms.DateInput(attrs={"type": "date"}),
            "reason": forms.Textarea(attrs={"rows": 4}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["start_date"].error_messages["required"] = "Start date is required"
        self.fields["end_date"].error_messages["required"] = "End date is required"
        self.fields["reason"].error_messages["required"] = "Reason is required"

    def clean(self):
        cleaned_data = super().clean()
        start = cleaned_data.get("start_date")
        end = cleaned_data.get("end_date")
        if start and end and start > end:
            self.add_error("end_date", "End date must be after start date")
        return cleaned_data


class LeaveReviewForm(forms.Form):
    decision = forms.ChoiceField(
        choices=[
            (LeaveRequest.Status.APPROVED, "Approve"),
            (LeaveRequest.Status.REJECTED, "Reject"),
        ]
    )
    review_notes = forms.CharField(
        required=False, widget=forms.Textarea(attrs={"rows": 3})
    )
