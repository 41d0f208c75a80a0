import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from communication.services import notify_after_commit
from hospitals.models import BloodCampaign
from hospitals.status import CampaignStatus
from .eligibility import EligibilityAnswers, EligibilityResult, evaluate_eligibility
from .models import DonationRequest, Appointment

logger = logging.getLogger(__name__)


class DonationFlowError(Exception):
    """A donation request or appointment action that the current state does not allow."""


def answers_from_form(cleaned: dict) -> EligibilityAnswers:
    return EligibilityAnswers(
        age=cleaned["age"],
        weight=cleaned["weight"],
        last_donation_date=cleaned.get("last_donation_date"),
        has_illness=bool(cleaned.get("has_illness")),
        takes_medication=bool(cleaned.get("takes_medication")),
        has_traveled=bool(cleaned.get("has_traveled")),
    )


def check_campaign_open(campaign: BloodCampaign, now=None):
    if campaign.resolved_status(now) == CampaignStatus.COMPLETED:
        raise DonationFlowError("This campaign has already ended.")
    if campaign.is_full:
        raise DonationFlowError("This campaign has no spots left.")


@transaction.atomic
def submit_donation_request(donor, hospital, answers, blood_type, campaign=None, notes="", now=None):
    """
    Score the questionnaire and, when eligible, store a pending request with
    the result snapshot. Returns ``(result, request_or_None)``.
    """
    now = now or timezone.now()
    result: EligibilityResult = evaluate_eligibility(answers, now=now)
    if not result.eligible:
        logger.info("Donor %s not eligible (score %s)", donor.pk, result.score)
        return result, None

    if campaign is not None:
        check_campaign_open(campaign, now)
        hospital = campaign.hospital

    req = DonationRequest.from_result(
        result,
        donor=donor,
        hospital=hospital,
        campaign=campaign,
        blood_type=blood_type,
        donation_type="campaign" if campaign else "direct",
        notes=notes,
        created_at=now,
    )
    req.save()
    logger.info("Donation request %s created for hospital %s", req.pk, hospital.pk)

    where = f"campaign '{campaign.title}'" if campaign else "a direct donation"
    notify_after_commit(
        hospital.admin_users(),
        title="New donation request",
        body=f"{donor.get_full_name() or donor.username} applied for {where} ({blood_type}).",
        url="/institutions/portal/requests/",
        category="DONATION",
    )
    return result, req


@transaction.atomic
def schedule_appointment(donation_request, appointment_date, appointment_time, duration_minutes=30,
                         location_address="", location_room="", location_floor="", notes=""):
    req = DonationRequest.objects.select_for_update().get(pk=donation_request.pk)
    if req.status != "pending":
        raise DonationFlowError("Only pending requests can be scheduled.")

    if req.campaign_id:
        # capacity check and increment in one statement
        updated = (
            BloodCampaign.objects
            .filter(pk=req.campaign_id, current_donors__lt=F("max_donors"))
            .update(current_donors=F("current_donors") + 1)
        )
        if not updated:
            raise DonationFlowError("The campaign is already full.")

    appt = Appointment.objects.create(
        donation_request=req,
        donor=req.donor,
        hospital=req.hospital,
        appointment_date=appointment_date,
        appointment_time=appointment_time,
        duration_minutes=duration_minutes,
        location_address=location_address or req.hospital.address,
        location_room=location_room,
        location_floor=location_floor,
        notes=notes,
    )

    req.status = "approved"
    req.scheduled_date = appt.starts_at
    req.save(update_fields=["status", "scheduled_date", "updated_at"])
    logger.info("Appointment %s scheduled for request %s", appt.pk, req.pk)

    notify_after_commit(
        [req.donor],
        title="Appointment scheduled",
        body=(
            f"Your donation at {req.hospital.name} is scheduled for "
            f"{appointment_date:%d/%m/%Y} at {appointment_time:%H:%M}."
        ),
        url="/blood/my/appointments/",
        level="SUCCESS",
        category="APPOINTMENT",
    )
    return appt


@transaction.atomic
def reject_request(donation_request, reason=""):
    req = DonationRequest.objects.select_for_update().get(pk=donation_request.pk)
    if req.status != "pending":
        raise DonationFlowError("Only pending requests can be rejected.")

    req.status = "rejected"
    req.rejection_reason = (reason or "").strip() or "Rejected by hospital."
    req.save(update_fields=["status", "rejection_reason", "updated_at"])
    logger.info("Donation request %s rejected", req.pk)

    notify_after_commit(
        [req.donor],
        title="Donation request rejected",
        body=req.rejection_reason,
        url="/blood/my/donations/",
        level="DANGER",
        category="DONATION",
    )
    return req


APPOINTMENT_TRANSITIONS = {
    "confirm": ("confirmed", ("scheduled",)),
    "complete": ("completed", ("scheduled", "confirmed")),
    "no_show": ("no_show", ("scheduled", "confirmed")),
    "cancel": ("cancelled", ("scheduled", "confirmed")),
}


@transaction.atomic
def update_appointment_status(appointment, action):
    if action not in APPOINTMENT_TRANSITIONS:
        raise DonationFlowError("Invalid action.")

    target, allowed_from = APPOINTMENT_TRANSITIONS[action]
    appt = Appointment.objects.select_for_update().select_related("donation_request").get(pk=appointment.pk)
    if appt.status not in allowed_from:
        raise DonationFlowError(f"Cannot {action.replace('_', ' ')} an appointment that is {appt.get_status_display().lower()}.")

    appt.status = target
    appt.save(update_fields=["status", "updated_at"])

    req = appt.donation_request
    if target == "completed":
        req.status = "completed"
        req.save(update_fields=["status", "updated_at"])
    elif target in ("cancelled", "no_show"):
        # the request goes back to the queue and can be scheduled again
        req.status = "pending"
        req.scheduled_date = None
        req.save(update_fields=["status", "scheduled_date", "updated_at"])
        if req.campaign_id:
            BloodCampaign.objects.filter(pk=req.campaign_id, current_donors__gt=0).update(
                current_donors=F("current_donors") - 1
            )

    logger.info("Appointment %s -> %s", appt.pk, target)

    titles = {
        "confirmed": ("Appointment confirmed", "SUCCESS"),
        "completed": ("Donation completed, thank you!", "SUCCESS"),
        "no_show": ("Missed appointment", "WARNING"),
        "cancelled": ("Appointment cancelled", "WARNING"),
    }
    title, level = titles[target]
    notify_after_commit(
        [appt.donor],
        title=title,
        body=f"{appt.hospital.name}, {appt.appointment_date:%d/%m/%Y} at {appt.appointment_time:%H:%M}.",
        url="/blood/my/appointments/",
        level=level,
        category="APPOINTMENT",
    )
    return appt


@transaction.atomic
def cancel_appointment_by_donor(appointment, donor, now=None):
    now = now or timezone.now()
    if appointment.donor_id != donor.pk:
        raise DonationFlowError("This appointment does not belong to you.")
    if appointment.starts_at <= now:
        raise DonationFlowError("Past appointments cannot be cancelled.")

    appt = update_appointment_status(appointment, "cancel")
    notify_after_commit(
        appt.hospital.admin_users(),
        title="Appointment cancelled by donor",
        body=f"{donor.username} cancelled the appointment on {appt.appointment_date:%d/%m/%Y}.",
        url="/institutions/portal/appointments/",
        level="WARNING",
        category="APPOINTMENT",
    )
    return appt
