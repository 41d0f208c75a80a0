from django.db import models
from django.utils import timezone


class CampaignStatus(models.TextChoices):
    UPCOMING = "upcoming", "Upcoming"
    ACTIVE = "active", "Active"
    COMPLETED = "completed", "Completed"


def resolve_campaign_status(start_date, end_date, evaluation_time=None):
    """
    Classify ``evaluation_time`` against the campaign window.
    Both bounds are inclusive. ``end_date >= start_date`` is not checked.
    """
    t = evaluation_time or timezone.now()
    if start_date <= t <= end_date:
        return CampaignStatus.ACTIVE
    if t > end_date:
        return CampaignStatus.COMPLETED
    return CampaignStatus.UPCOMING


def apply_resolved_status(campaigns, evaluation_time=None):
    """
    Overwrite the in-memory status of each campaign with the derived one.
    The stored value is never trusted for display; nothing is saved here.
    """
    t = evaluation_time or timezone.now()
    out = []
    for camp in campaigns:
        camp.status = resolve_campaign_status(camp.start_date, camp.end_date, t)
        out.append(camp)
    return out
