from django.contrib.auth.models import AbstractUser
from django.db import models

BLOOD_GROUPS = [
    ("A+", "A+"), ("A-", "A-"),
    ("B+", "B+"), ("B-", "B-"),
    ("AB+", "AB+"), ("AB-", "AB-"),
    ("O+", "O+"), ("O-", "O-"),
]

BLOOD_GROUP_CODES = [code for code, _ in BLOOD_GROUPS]


class CustomUser(AbstractUser):
    """
    Core User model.
    Donors are plain USERs; ADMINs run a hospital; SUPER_ADMINs approve hospitals.
    """
    ROLE = [
        ("USER", "Donor"),
        ("ADMIN", "Hospital admin"),
        ("SUPER_ADMIN", "Super admin"),
    ]

    role = models.CharField(max_length=12, choices=ROLE, default="USER")
    phone_number = models.CharField(max_length=20, blank=True)
    blood_group = models.CharField(max_length=3, choices=BLOOD_GROUPS, blank=True)
    city = models.CharField(max_length=100, blank=True)

    @property
    def is_donor(self):
        return self.role == "USER"

    @property
    def is_hospital_admin(self):
        return self.role == "ADMIN"

    def __str__(self):
        return self.username
