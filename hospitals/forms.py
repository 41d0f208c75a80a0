import re
from django import forms

from accounts.models import BLOOD_GROUPS, BLOOD_GROUP_CODES
from .models import Hospital, HospitalMembership, BloodCampaign

PHONE_RE = re.compile(r"^[0-9+\-\s]{7,20}$")


class HospitalRegisterForm(forms.ModelForm):
    class Meta:
        model = Hospital
        fields = ["name", "email", "phone", "address", "city", "latitude", "longitude"]
        widgets = {
            "name": forms.TextInput(attrs={"class": "form-control"}),
            "email": forms.EmailInput(attrs={"class": "form-control"}),
            "phone": forms.TextInput(attrs={"class": "form-control"}),
            "address": forms.TextInput(attrs={"class": "form-control"}),
            "city": forms.TextInput(attrs={"class": "form-control"}),
            "latitude": forms.NumberInput(attrs={"class": "form-control", "step": "any"}),
            "longitude": forms.NumberInput(attrs={"class": "form-control", "step": "any"}),
        }

    def clean_name(self):
        n = (self.cleaned_data["name"] or "").strip()
        if Hospital.objects.filter(name__iexact=n).exists():
            raise forms.ValidationError("A hospital with this name already exists.")
        return n

    def clean_phone(self):
        p = (self.cleaned_data.get("phone") or "").strip()
        if p and not PHONE_RE.match(p):
            raise forms.ValidationError("Enter a valid phone number.")
        return p


class AddMemberForm(forms.Form):
    identifier = forms.CharField(
        help_text="Enter username or email of an existing user",
        widget=forms.TextInput(attrs={"class": "form-control"})
    )
    role = forms.ChoiceField(
        choices=HospitalMembership.ROLE,
        widget=forms.Select(attrs={"class": "form-control"})
    )


class BloodCampaignForm(forms.ModelForm):
    """
    Boundary validation for the campaign window. The status resolver itself
    trusts end_date >= start_date, so the check lives here.
    """
    target_blood_types = forms.MultipleChoiceField(
        choices=BLOOD_GROUPS,
        widget=forms.CheckboxSelectMultiple,
    )

    class Meta:
        model = BloodCampaign
        fields = [
            "title", "description",
            "address", "latitude", "longitude",
            "target_blood_types",
            "start_date", "end_date",
            "max_donors",
            "contact_name", "contact_phone",
        ]
        widgets = {
            "title": forms.TextInput(attrs={"class": "form-control"}),
            "description": forms.Textarea(attrs={"class": "form-control", "rows": 3}),
            "address": forms.TextInput(attrs={"class": "form-control"}),
            "latitude": forms.NumberInput(attrs={"class": "form-control", "step": "any"}),
            "longitude": forms.NumberInput(attrs={"class": "form-control", "step": "any"}),
            "start_date": forms.DateTimeInput(attrs={"class": "form-control", "type": "datetime-local"}),
            "end_date": forms.DateTimeInput(attrs={"class": "form-control", "type": "datetime-local"}),
            "max_donors": forms.NumberInput(attrs={"class": "form-control", "min": 1}),
            "contact_name": forms.TextInput(attrs={"class": "form-control"}),
            "contact_phone": forms.TextInput(attrs={"class": "form-control"}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if self.instance and self.instance.pk and not self.is_bound:
            self.initial["target_blood_types"] = self.instance.target_blood_types_list

    def clean_target_blood_types(self):
        picked = [t for t in self.cleaned_data.get("target_blood_types") or [] if t in BLOOD_GROUP_CODES]
        if not picked:
            raise forms.ValidationError("Select at least one blood type.")
        return ", ".join(picked)

    def clean_max_donors(self):
        n = self.cleaned_data.get("max_donors")
        if n is None or int(n) <= 0:
            raise forms.ValidationError("Max donors must be greater than 0.")
        if self.instance and self.instance.pk and int(n) < self.instance.current_donors:
            raise forms.ValidationError("Max donors cannot be lower than the donors already registered.")
        return n

    def clean_contact_phone(self):
        p = (self.cleaned_data.get("contact_phone") or "").strip()
        if p and not PHONE_RE.match(p):
            raise forms.ValidationError("Enter a valid phone number.")
        return p

    def clean(self):
        cleaned = super().clean()
        start = cleaned.get("start_date")
        end = cleaned.get("end_date")
        if start and end and end < start:
            self.add_error("end_date", "End date must be on or after the start date.")
        return cleaned
