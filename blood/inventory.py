from datetime import date

from django.conf import settings
from django.db.models import Count
from django.utils import timezone

from accounts.models import BLOOD_GROUP_CODES
from hospitals.status import CampaignStatus, apply_resolved_status
from .models import BloodBag, DonationRequest


def stock_level(count: int) -> str:
    if count <= 0:
        return "critical"
    if count <= 2:
        return "low"
    if count <= 5:
        return "medium"
    return "high"


def available_counts(hospital) -> dict:
    rows = (
        BloodBag.objects
        .filter(hospital=hospital, status="available")
        .values("blood_type")
        .annotate(n=Count("id"))
    )
    counts = {t: 0 for t in BLOOD_GROUP_CODES}
    for row in rows:
        counts[row["blood_type"]] = row["n"]
    return counts


def stock_summary(hospital) -> list:
    """
    One row per blood group, in display order, with the available count,
    its share of the total and the stock level.
    """
    counts = available_counts(hospital)
    total = sum(counts.values())
    return [
        {
            "blood_type": t,
            "count": counts[t],
            "percentage": (counts[t] / total * 100) if total else 0,
            "level": stock_level(counts[t]),
        }
        for t in BLOOD_GROUP_CODES
    ]


def remove_available_bags(hospital, blood_type: str, count: int) -> int:
    """
    Remove up to ``count`` available bags of a type, soonest expiry first.
    Returns how many were removed.
    """
    if count <= 0:
        return 0
    ids = list(
        BloodBag.objects
        .filter(hospital=hospital, blood_type=blood_type, status="available")
        .order_by("expiry_date", "id")
        .values_list("id", flat=True)[:count]
    )
    if not ids:
        return 0
    deleted, _ = BloodBag.objects.filter(id__in=ids).delete()
    return deleted


def expire_bags(today=None, hospital=None) -> int:
    today = today or timezone.localdate()
    qs = BloodBag.objects.filter(status="available", expiry_date__lt=today)
    if hospital is not None:
        qs = qs.filter(hospital=hospital)
    return qs.update(status="expired", updated_at=timezone.now())


def _month_start(d: date, back: int) -> date:
    y, m = divmod(d.year * 12 + d.month - 1 - back, 12)
    return date(y, m + 1, 1)


def hospital_stats(hospital, now=None) -> dict:
    now = now or timezone.now()
    today = timezone.localdate(now) if timezone.is_aware(now) else now.date()
    threshold = int(getattr(settings, "LD_CRITICAL_STOCK_THRESHOLD", 5))

    bags = BloodBag.objects.filter(hospital=hospital)
    counts = available_counts(hospital)

    campaigns = apply_resolved_status(hospital.campaigns.all(), now)
    requests = DonationRequest.objects.filter(hospital=hospital)

    monthly = []
    for back in range(5, -1, -1):
        start = _month_start(today, back)
        end = _month_start(today, back - 1)
        monthly.append({
            "month": start.strftime("%b %Y"),
            "count": requests.filter(
                status="completed",
                created_at__date__gte=start,
                created_at__date__lt=end,
            ).count(),
        })

    return {
        "total_bags": bags.count(),
        "available_bags": sum(counts.values()),
        "expired_bags": bags.filter(expiry_date__lt=today).count(),
        "stock_by_type": counts,
        "critical_types": [t for t in BLOOD_GROUP_CODES if counts[t] < threshold],
        "active_campaigns": sum(1 for c in campaigns if c.status == CampaignStatus.ACTIVE),
        "pending_donations": requests.filter(status="pending").count(),
        "completed_donations": requests.filter(status="completed").count(),
        "monthly_donations": monthly,
    }
