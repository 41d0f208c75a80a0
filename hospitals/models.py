from django.conf import settings
from django.db import models
from django.utils import timezone

from accounts.models import BLOOD_GROUP_CODES
from .status import CampaignStatus, resolve_campaign_status


def _default_max_donors():
    return int(getattr(settings, "LD_DEFAULT_CAMPAIGN_MAX_DONORS", 50))


class Hospital(models.Model):
    STATUS = [
        ("PENDING", "Pending"),
        ("APPROVED", "Approved"),
        ("REJECTED", "Rejected"),
        ("SUSPENDED", "Suspended"),
    ]

    name = models.CharField(max_length=200, unique=True)

    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=30, blank=True)

    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)

    status = models.CharField(max_length=12, choices=STATUS, default="PENDING")
    rejection_reason = models.TextField(blank=True)

    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name="hospitals_approved",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name

    def admin_users(self):
        return [
            m.user for m in self.memberships.select_related("user").filter(role="ADMIN", is_active=True)
        ]


class HospitalMembership(models.Model):
    ROLE = [
        ("ADMIN", "Admin"),
        ("STAFF", "Staff"),
    ]

    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name="memberships")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="hospital_memberships")

    role = models.CharField(max_length=10, choices=ROLE, default="STAFF")
    is_active = models.BooleanField(default=False)  # becomes true when the hospital is approved

    added_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("hospital", "user")

    def __str__(self):
        return f"{self.user.username} -> {self.hospital.name} ({self.role})"


class BloodCampaign(models.Model):
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name="campaigns")

    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)

    address = models.CharField(max_length=255)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)

    target_blood_types = models.CharField(
        max_length=100,
        help_text="e.g. O+, O-, A+ (comma separated)",
    )

    start_date = models.DateTimeField()
    end_date = models.DateTimeField()

    # last persisted snapshot; readers go through hospitals.status instead
    status = models.CharField(max_length=10, choices=CampaignStatus.choices, default=CampaignStatus.UPCOMING)

    max_donors = models.PositiveIntegerField(default=_default_max_donors)
    current_donors = models.PositiveIntegerField(default=0)

    contact_name = models.CharField(max_length=120, blank=True)
    contact_phone = models.CharField(max_length=30, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name="campaigns_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["start_date"]

    def __str__(self):
        return f"{self.title} ({self.hospital.name})"

    @property
    def target_blood_types_list(self):
        return [
            t.strip().upper() for t in (self.target_blood_types or "").split(",")
            if t.strip().upper() in BLOOD_GROUP_CODES
        ]

    @property
    def spots_left(self):
        return max(self.max_donors - self.current_donors, 0)

    @property
    def is_full(self):
        return self.current_donors >= self.max_donors

    def resolved_status(self, at=None):
        return resolve_campaign_status(self.start_date, self.end_date, at or timezone.now())
