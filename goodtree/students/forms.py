from django import forms

from teachers.models import Teacher
from .models import Classroom, Grade, Phase, Student, StudentDocument

DocumentType = StudentDocument.DocumentType


class StudentForm(forms.ModelForm):
    """Form for adding and editing students"""

    class Meta:
        model = Student
        fields = [
            "first_name",
            "last_name",
            "email",
            "grade",
            "classroom",
            "guardian",
            "guardian_email",
            "guardian_phone",
            "enrollment_date",
            "gpa",
            "attendance",
        ]
        labels = {"classroom": "Homeroom"}
        widgets = {
            "enrollment_date": forms.DateInput(attrs={"type": "date"}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        required_messages = {
            "first_name": "First name is required",
            "last_name": "Last name is required",
            "email": "Email address is required",
            "grade": "Grade level is required",
            "classroom": "Homeroom is required",
            "guardian": "Guardian name is required",
            "guardian_email": "Guardian email is required",
            "guardian_phone": "Guardian phone is required",
        }
        for name, message in required_messages.items():
            self.fields[name].required = True
            self.fields[name].error_messages["required"] = message
        self.fields["email"].error_messages["invalid"] = "Please enter a valid email address"
        self.fields["guardian_email"].error_messages["invalid"] = (
            "Please enter a valid email address"
        )
        range_messages = {
            "gpa": "GPA must be between 0 and 4",
            "attendance": "Attendance must be between 0 and 100",
        }
        for name, message in range_messages.items():
            self.fields[name].required = False
            for code in ("invalid", "min_value", "max_value", "max_digits", "max_whole_digits"):
                self.fields[name].error_messages[code] = message

    def clean_email(self):
        email = self.cleaned_data["email"].lower()
        existing = Student.objects.filter(email__iexact=email)
        if self.instance.pk:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise forms.ValidationError("A student with this email already exists")
        return email

    def clean_gpa(self):
        gpa = self.cleaned_data.get("gpa")
        return 0 if gpa is None else gpa

    def clean_attendance(self):
        attendance = self.cleaned_data.get("attendance")
        return 0 if attendance is None else attendance


class StudentBulkImportForm(forms.Form):
    """Form for bulk importing students from CSV/Excel files"""

    file = forms.FileField(
        required=True,
        widget=forms.FileInput(attrs={"class": "form-control", "accept": ".csv,.xlsx"}),
        help_text="Upload CSV or Excel file with student data",
    )


class GradeForm(forms.ModelForm):
    class Meta:
        model = Grade
        fields = ["name", "order"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["name"].error_messages["required"] = "Grade designation is required"
        self.fields["order"].required = False

    def clean_name(self):
        name = self.cleaned_data["name"].strip()
        existing = Grade.objects.filter(name__iexact=name)
        if self.instance.pk:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise forms.ValidationError("This grade already exists")
        return name

    def clean_order(self):
        order = self.cleaned_data.get("order")
        if order is None:
            return self.instance.order if self.instance.pk else Grade.objects.count()
        return order


class ClassroomForm(forms.ModelForm):
    class Meta:
        model = Classroom
        fields = ["name", "grade"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["name"].error_messages["required"] = "Class name is required"

    def clean_name(self):
        name = self.cleaned_data["name"].strip()
        existing = Classroom.objects.filter(name__iexact=name)
        if self.instance.pk:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise forms.ValidationError("This class name already exists")
        return name


class PhaseForm(forms.ModelForm):
    grades = forms.ModelMultipleChoiceField(
        queryset=Grade.objects.all(),
        required=True,
        error_messages={"required": "Please select at least one grade level"},
        widget=forms.CheckboxSelectMultiple,
    )

    class Meta:
        model = Phase
        fields = ["name", "grades"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["name"].error_messages["required"] = "Phase name is required"

    def clean_name(self):
        name = self.cleaned_data["name"].strip()
        existing = Phase.objects.filter(name__iexact=name)
        if self.instance.pk:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise forms.ValidationError("A phase with this name already exists")
        return name


DOCUMENT_REQUIREMENTS = {
    DocumentType.WELLBEING: [
        ("observation", "Observation is required for wellbeing entries"),
        ("reflections", "Reflections are required for wellbeing entries"),
    ],
    DocumentType.ACADEMIC_INTERVENTION: [
        ("subjects", "Subject(s) is required for academic interventions"),
        ("academic_concerns", "Academic concerns are required for academic interventions"),
        (
            "proposed_interventions",
            "Proposed interventions are required for academic interventions",
        ),
    ],
    DocumentType.PARENT_MEETING: [
        ("staff_attendees", "At least one staff attendee is required"),
        ("parent_guardians", "Parent/guardians is required"),
        ("concerns", "Concerns is required"),
        ("proposed_interventions", "Proposed interventions is required"),
        ("agreed_next_steps", "Agreed next steps is required"),
    ],
}


class StudentDocumentForm(forms.ModelForm):
    """Learner development entry; required fields depend on the document type"""

    staff_attendees = forms.ModelMultipleChoiceField(
        queryset=Teacher.objects.select_related("user"),
        required=False,
        widget=forms.CheckboxSelectMultiple,
    )

    class Meta:
        model = StudentDocument
        fields = [
            "doc_type",
            "title",
            "content",
            "observation",
            "reflections",
            "subjects",
            "academic_concerns",
            "proposed_interventions",
            "staff_attendees",
            "parent_guardians",
            "concerns",
            "agreed_next_steps",
        ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["title"].error_messages["required"] = "Title is required"

    def clean(self):
        cleaned_data = super().clean()
        doc_type = cleaned_data.get("doc_type")
        requirements = DOCUMENT_REQUIREMENTS.get(doc_type)

        if requirements is None:
            if not (cleaned_data.get("content") or "").strip():
                self.add_error("content", "Content is required")
            return cleaned_data

        for field, message in requirements:
            value = cleaned_data.get(field)
            if field == "staff_attendees":
                missing = not value
            else:
                missing = not (value or "").strip()
            if missing:
                self.add_error(field, message)
        return cleaned_data
