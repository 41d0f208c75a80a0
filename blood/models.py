from datetime import datetime, timedelta

from django.conf import settings
from django.db import models
from django.utils import timezone

from accounts.models import BLOOD_GROUPS
from hospitals.models import Hospital, BloodCampaign
from .eligibility import EligibilityResult


def default_collection_date():
    return timezone.localdate()


def default_expiry_date():
    shelf_days = int(getattr(settings, "LD_BLOOD_BAG_SHELF_DAYS", 42))
    return timezone.localdate() + timedelta(days=shelf_days)


class BloodBag(models.Model):
    STATUS = [
        ("available", "Available"),
        ("reserved", "Reserved"),
        ("used", "Used"),
        ("expired", "Expired"),
    ]

    blood_type = models.CharField(max_length=3, choices=BLOOD_GROUPS)
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name="blood_bags")
    donor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name="blood_bags",
    )

    serial_number = models.CharField(max_length=40, unique=True)
    volume_ml = models.PositiveIntegerField(default=450)

    collection_date = models.DateField(default=default_collection_date)
    expiry_date = models.DateField(default=default_expiry_date)

    status = models.CharField(max_length=10, choices=STATUS, default="available", db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["expiry_date"]
        indexes = [
            models.Index(fields=["hospital", "blood_type", "status"], name="bag_stock_idx"),
        ]

    def __str__(self):
        return f"{self.serial_number} ({self.blood_type}, {self.status})"

    @property
    def is_expired(self):
        return self.expiry_date < timezone.localdate()

    def save(self, *args, **kwargs):
        if not self.serial_number:
            stamp = int(timezone.now().timestamp() * 1000)
            self.serial_number = f"{self.blood_type}-{stamp}"
            n = 1
            while BloodBag.objects.filter(serial_number=self.serial_number).exists():
                self.serial_number = f"{self.blood_type}-{stamp}-{n}"
                n += 1
        super().save(*args, **kwargs)


class DonationRequest(models.Model):
    """
    A donor's application to give blood, either to a campaign or directly
    to a hospital. The eligibility answers and score are a snapshot taken
    at submission time and are never recomputed.
    """
    STATUS = [
        ("pending", "Pending"),
        ("approved", "Approved"),
        ("rejected", "Rejected"),
        ("completed", "Completed"),
    ]
    TYPE = [
        ("campaign", "Campaign"),
        ("direct", "Direct"),
    ]

    donor = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="donation_requests")
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name="donation_requests")
    campaign = models.ForeignKey(
        BloodCampaign,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name="donation_requests",
    )

    blood_type = models.CharField(max_length=3, choices=BLOOD_GROUPS)
    donation_type = models.CharField(max_length=10, choices=TYPE, default="direct")

    # eligibility snapshot
    age = models.IntegerField()
    weight = models.FloatField()
    last_donation_date = models.DateField(null=True, blank=True)
    has_illness = models.BooleanField(default=False)
    takes_medication = models.BooleanField(default=False)
    has_traveled = models.BooleanField(default=False)
    eligibility_score = models.IntegerField()
    is_eligible = models.BooleanField()
    eligibility_reasons = models.JSONField(default=list, blank=True)

    status = models.CharField(max_length=10, choices=STATUS, default="pending", db_index=True)
    scheduled_date = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)
    rejection_reason = models.TextField(blank=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.donor} -> {self.hospital} ({self.status})"

    @classmethod
    def from_result(cls, result: EligibilityResult, **kwargs):
        return cls(
            age=result.age,
            weight=result.weight,
            last_donation_date=result.last_donation_date,
            has_illness=result.has_illness,
            takes_medication=result.takes_medication,
            has_traveled=result.has_traveled,
            eligibility_score=result.score,
            is_eligible=result.eligible,
            eligibility_reasons=list(result.reasons),
            **kwargs,
        )

    @property
    def eligibility_result(self) -> EligibilityResult:
        return EligibilityResult(
            score=self.eligibility_score,
            eligible=self.is_eligible,
            age=self.age,
            weight=self.weight,
            last_donation_date=self.last_donation_date,
            has_illness=self.has_illness,
            takes_medication=self.takes_medication,
            has_traveled=self.has_traveled,
            reasons=tuple(self.eligibility_reasons or ()),
        )


class Appointment(models.Model):
    STATUS = [
        ("scheduled", "Scheduled"),
        ("confirmed", "Confirmed"),
        ("completed", "Completed"),
        ("cancelled", "Cancelled"),
        ("no_show", "No show"),
    ]
    OPEN_STATUSES = ("scheduled", "confirmed")

    # one request can be rescheduled after a cancellation or a no-show
    donation_request = models.ForeignKey(DonationRequest, on_delete=models.CASCADE, related_name="appointments")
    donor = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="appointments")
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name="appointments")

    appointment_date = models.DateField()
    appointment_time = models.TimeField()
    duration_minutes = models.PositiveIntegerField(default=30)

    status = models.CharField(max_length=10, choices=STATUS, default="scheduled", db_index=True)
    notes = models.TextField(blank=True)
    reminder_sent = models.BooleanField(default=False)

    location_address = models.CharField(max_length=255, blank=True)
    location_room = models.CharField(max_length=50, blank=True)
    location_floor = models.CharField(max_length=50, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["appointment_date", "appointment_time"]

    def __str__(self):
        return f"{self.donor} @ {self.hospital} on {self.appointment_date} {self.appointment_time}"

    @property
    def starts_at(self):
        naive = datetime.combine(self.appointment_date, self.appointment_time)
        return timezone.make_aware(naive, timezone.get_current_timezone())

    @property
    def is_open(self):
        return self.status in self.OPEN_STATUSES
