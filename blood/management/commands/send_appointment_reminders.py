import logging
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from blood.models import Appointment
from communication.services import notify_user

logger = logging.getLogger(__name__)


def send_reminders(today=None):
    """
    Remind donors of appointments today or tomorrow. Each appointment is
    reminded at most once (``reminder_sent``).
    """
    today = today or timezone.localdate()
    tomorrow = today + timedelta(days=1)

    qs = (
        Appointment.objects
        .select_related("hospital", "donor")
        .filter(
            status__in=Appointment.OPEN_STATUSES,
            reminder_sent=False,
            appointment_date__in=[today, tomorrow],
        )
    )

    sent = 0
    for appt in qs:
        when = "today" if appt.appointment_date == today else "tomorrow"
        title = "Appointment today" if when == "today" else "Reminder: appointment tomorrow"
        body = (
            f"Your blood donation at {appt.hospital.name} is {when} at {appt.appointment_time:%H:%M}. "
            f"Remember to bring an ID."
        )
        notify_user(
            appt.donor,
            title=title,
            body=body,
            url="/blood/my/appointments/",
            level="WARNING" if when == "today" else "INFO",
            category="APPOINTMENT",
        )
        Appointment.objects.filter(pk=appt.pk).update(reminder_sent=True)
        sent += 1

    return sent


class Command(BaseCommand):
    help = "Send in-app reminders for appointments scheduled today and tomorrow."

    def handle(self, *args, **options):
        sent = send_reminders()
        logger.info("Appointment reminders sent: %s", sent)
        self.stdout.write(self.style.SUCCESS(f"Appointment reminders sent: {sent}"))
