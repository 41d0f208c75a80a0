from datetime import timedelta

from django.utils import timezone

from accounts.models import CustomUser
from hospitals.models import Hospital, HospitalMembership, BloodCampaign


def make_user(username="donor", role="USER", blood_group="O+", **extra):
    return CustomUser.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password="pass12345!",
        role=role,
        blood_group=blood_group,
        **extra,
    )


def make_hospital(name="Central Hospital", status="APPROVED", admin=None, **extra):
    hospital = Hospital.objects.create(
        name=name,
        status=status,
        address=extra.pop("address", "1 Main Street"),
        city=extra.pop("city", "Yaounde"),
        phone=extra.pop("phone", "+237 600000000"),
        **extra,
    )
    if admin is not None:
        HospitalMembership.objects.create(hospital=hospital, user=admin, role="ADMIN", is_active=True)
    return hospital


def make_campaign(hospital, start=None, end=None, **extra):
    now = timezone.now()
    start = start or now - timedelta(days=1)
    end = end or now + timedelta(days=1)
    return BloodCampaign.objects.create(
        hospital=hospital,
        title=extra.pop("title", "Spring drive"),
        address=extra.pop("address", "Town hall"),
        target_blood_types=extra.pop("target_blood_types", "O+, A+"),
        start_date=start,
        end_date=end,
        **extra,
    )
