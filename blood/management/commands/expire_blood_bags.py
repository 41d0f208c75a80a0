import logging

from django.core.management.base import BaseCommand

from blood.inventory import expire_bags

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Mark available blood bags past their expiry date as expired."

    def handle(self, *args, **options):
        n = expire_bags()
        logger.info("Expired %s blood bag(s)", n)
        self.stdout.write(self.style.SUCCESS(f"Blood bags expired: {n}"))
