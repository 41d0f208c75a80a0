from datetime import timedelta

from django import forms
from django.conf import settings
from django.utils import timezone

from accounts.models import BLOOD_GROUPS, BLOOD_GROUP_CODES
from hospitals.models import Hospital
from .models import BloodBag, Appointment


class EligibilityForm(forms.Form):
    """
    The donor questionnaire. Range checks happen here so the scoring
    function only ever sees sane values.
    """
    age = forms.IntegerField(min_value=16, max_value=100,
                             widget=forms.NumberInput(attrs={"class": "form-control"}))
    weight = forms.FloatField(min_value=30, max_value=250, label="Weight (kg)",
                              widget=forms.NumberInput(attrs={"class": "form-control", "step": "0.1"}))
    last_donation_date = forms.DateField(
        required=False,
        help_text="Leave empty if you have never donated.",
        widget=forms.DateInput(attrs={"class": "form-control", "type": "date"}),
    )
    has_illness = forms.BooleanField(required=False, label="Chronic or current illness")
    takes_medication = forms.BooleanField(required=False, label="Currently taking medication")
    has_traveled = forms.BooleanField(required=False, label="Travelled to a risk zone in the last 6 months")

    blood_type = forms.ChoiceField(
        choices=[("", "Use my profile")] + list(BLOOD_GROUPS),
        required=False,
        widget=forms.Select(attrs={"class": "form-control"}),
    )
    notes = forms.CharField(required=False, widget=forms.Textarea(attrs={"class": "form-control", "rows": 2}))

    def __init__(self, *args, donor=None, **kwargs):
        self.donor = donor
        super().__init__(*args, **kwargs)

    def clean_last_donation_date(self):
        d = self.cleaned_data.get("last_donation_date")
        if d and d > timezone.localdate():
            raise forms.ValidationError("The last donation date cannot be in the future.")
        return d

    def clean(self):
        cleaned = super().clean()
        bt = cleaned.get("blood_type") or getattr(self.donor, "blood_group", "") or ""
        if bt not in BLOOD_GROUP_CODES:
            self.add_error("blood_type", "Select your blood type (or set it on your profile).")
        else:
            cleaned["blood_type"] = bt
        return cleaned


class DirectDonationForm(EligibilityForm):
    hospital = forms.ModelChoiceField(
        queryset=Hospital.objects.filter(status="APPROVED").order_by("name"),
        widget=forms.Select(attrs={"class": "form-control"}),
    )


class BloodBagForm(forms.ModelForm):
    class Meta:
        model = BloodBag
        fields = ["blood_type", "volume_ml", "collection_date", "expiry_date"]
        widgets = {
            "blood_type": forms.Select(attrs={"class": "form-control"}),
            "volume_ml": forms.NumberInput(attrs={"class": "form-control", "min": 1}),
            "collection_date": forms.DateInput(attrs={"class": "form-control", "type": "date"}),
            "expiry_date": forms.DateInput(attrs={"class": "form-control", "type": "date"}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["expiry_date"].required = False
        self.fields["collection_date"].required = False

    def clean(self):
        cleaned = super().clean()
        collected = cleaned.get("collection_date") or timezone.localdate()
        cleaned["collection_date"] = collected
        if not cleaned.get("expiry_date"):
            shelf_days = int(getattr(settings, "LD_BLOOD_BAG_SHELF_DAYS", 42))
            cleaned["expiry_date"] = collected + timedelta(days=shelf_days)
        if cleaned["expiry_date"] < collected:
            self.add_error("expiry_date", "Expiry date must be after the collection date.")
        return cleaned


class BulkRemoveForm(forms.Form):
    def __init__(self, *args, available=None, **kwargs):
        super().__init__(*args, **kwargs)
        available = available or {}
        for code in BLOOD_GROUP_CODES:
            self.fields[self.field_name(code)] = forms.IntegerField(
                label=code,
                min_value=0,
                max_value=available.get(code, 0),
                required=False,
                initial=0,
                widget=forms.NumberInput(attrs={"class": "form-control", "min": 0}),
            )

    @staticmethod
    def field_name(code):
        return "count_" + code.replace("+", "pos").replace("-", "neg")

    def counts(self):
        return {code: self.cleaned_data.get(self.field_name(code)) or 0 for code in BLOOD_GROUP_CODES}

    def clean(self):
        cleaned = super().clean()
        if not self.errors and not any(self.counts().values()):
            raise forms.ValidationError("Select at least one bag to remove.")
        return cleaned


class AppointmentForm(forms.ModelForm):
    class Meta:
        model = Appointment
        fields = [
            "appointment_date", "appointment_time", "duration_minutes",
            "location_address", "location_room", "location_floor", "notes",
        ]
        widgets = {
            "appointment_date": forms.DateInput(attrs={"class": "form-control", "type": "date"}),
            "appointment_time": forms.TimeInput(attrs={"class": "form-control", "type": "time"}),
            "duration_minutes": forms.NumberInput(attrs={"class": "form-control", "min": 5}),
            "location_address": forms.TextInput(attrs={"class": "form-control"}),
            "location_room": forms.TextInput(attrs={"class": "form-control"}),
            "location_floor": forms.TextInput(attrs={"class": "form-control"}),
            "notes": forms.Textarea(attrs={"class": "form-control", "rows": 2}),
        }

    def clean_appointment_date(self):
        d = self.cleaned_data.get("appointment_date")
        if d and d < timezone.localdate():
            raise forms.ValidationError("Appointments cannot be scheduled in the past.")
        return d

    def clean(self):
        cleaned = super().clean()
        d = cleaned.get("appointment_date")
        t = cleaned.get("appointment_time")
        now = timezone.localtime()
        if d == now.date() and t and t < now.time().replace(second=0, microsecond=0):
            self.add_error("appointment_time", "This time has already passed today.")
        return cleaned


class RejectRequestForm(forms.Form):
    reason = forms.CharField(required=False, widget=forms.Textarea(attrs={"class": "form-control", "rows": 2}))
