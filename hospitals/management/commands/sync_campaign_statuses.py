import logging

from django.conf import settings
from django.core.cache import cache
from django.core.management.base import BaseCommand
from django.utils import timezone

from communication.services import notify_after_commit
from hospitals.models import BloodCampaign
from hospitals.status import CampaignStatus, resolve_campaign_status

logger = logging.getLogger(__name__)

LOCK_KEY = "ld:sync_campaign_statuses:lock"


def sync_statuses(now=None):
    """
    Persist the derived status of every campaign whose stored value is stale.
    Returns ``(started, completed)`` counts.
    """
    now = now or timezone.now()
    started = 0
    completed = 0

    qs = BloodCampaign.objects.select_related("hospital").filter(hospital__status="APPROVED")
    for camp in qs:
        derived = resolve_campaign_status(camp.start_date, camp.end_date, now)
        if camp.status == derived:
            continue

        camp.status = derived
        camp.save(update_fields=["status", "updated_at"])

        if derived == CampaignStatus.ACTIVE:
            started += 1
            title = "Campaign started"
            body = f"'{camp.title}' is now active at {camp.address}."
            level = "SUCCESS"
        elif derived == CampaignStatus.COMPLETED:
            completed += 1
            title = "Campaign completed"
            body = f"'{camp.title}' has ended with {camp.current_donors}/{camp.max_donors} donors."
            level = "INFO"
        else:
            continue

        notify_after_commit(
            camp.hospital.admin_users(),
            title=title,
            body=body,
            url="/institutions/portal/campaigns/",
            level=level,
            category="CAMPAIGN",
        )

    return started, completed


class Command(BaseCommand):
    help = "Persist date-derived campaign statuses and notify hospital admins of starts/completions."

    def handle(self, *args, **options):
        # Prevent overlapping executions when run from a scheduler
        timeout = int(getattr(settings, "LD_CAMPAIGN_SYNC_LOCK_SECONDS", 55))
        if not cache.add(LOCK_KEY, 1, timeout=timeout):
            self.stdout.write("Another sync_campaign_statuses run is active. Exiting.")
            return

        try:
            started, completed = sync_statuses()
            logger.info("Campaign status sync: %s started, %s completed", started, completed)
            self.stdout.write(self.style.SUCCESS(f"Campaigns started: {started}, completed: {completed}"))
        finally:
            cache.delete(LOCK_KEY)
