from django.conf import settings
from django.db import models
from django.utils import timezone


class Notification(models.Model):
    LEVELS = [("INFO", "Info"), ("SUCCESS", "Success"), ("WARNING", "Warning"), ("DANGER", "Danger")]

    CATEGORIES = [
        ("SYSTEM", "System"),
        ("DONATION", "Donation"),
        ("APPOINTMENT", "Appointment"),
        ("CAMPAIGN", "Campaign"),
        ("STOCK", "Stock"),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications")
    category = models.CharField(max_length=20, choices=CATEGORIES, default="SYSTEM", db_index=True)

    title = models.CharField(max_length=120)
    body = models.TextField(blank=True)
    url = models.CharField(max_length=255, blank=True)
    level = models.CharField(max_length=10, choices=LEVELS, default="INFO")

    created_at = models.DateTimeField(auto_now_add=True)
    read_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "created_at"], name="notif_user_created_idx"),
            models.Index(fields=["user", "read_at"], name="notif_user_read_idx"),
        ]

    def __str__(self):
        return f"{self.user} - {self.title}"

    @property
    def is_read(self):
        return self.read_at is not None

    def mark_read(self):
        if not self.read_at:
            self.read_at = timezone.now()
            self.save(update_fields=["read_at"])

    def as_payload(self):
        return {
            "type": "NOTIFICATION",
            "id": self.id,
            "category": self.category,
            "title": self.title,
            "body": self.body,
            "url": self.url,
            "level": self.level,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
