from django import forms
from .models import CampusLocation


class CampusLocationForm(forms.ModelForm):
    class Meta:
        model = CampusLocation
        fields = ["name", "address"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["name"].error_messages["required"] = "Campus location name is required"

    def clean_name(self):
        name = self.cleaned_data["name"].strip()
        existing = CampusLocation.objects.filter(name__iexact=name)
        if self.instance.pk:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise forms.ValidationError("A campus location with this name already exists")
        return name
