import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.shortcuts import render, redirect, get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_POST

from accounts.models import BLOOD_GROUP_CODES
from accounts.permissions import donor_required
from hospitals.models import BloodCampaign
from hospitals.status import CampaignStatus, apply_resolved_status
from .eligibility import next_eligible_date
from .forms import EligibilityForm, DirectDonationForm
from .models import DonationRequest, Appointment
from .services import (
    DonationFlowError,
    answers_from_form,
    cancel_appointment_by_donor,
    check_campaign_open,
    submit_donation_request,
)

logger = logging.getLogger(__name__)


def _campaign_queryset():
    return BloodCampaign.objects.select_related("hospital").filter(hospital__status="APPROVED")


def home(request):
    now = timezone.now()
    campaigns = apply_resolved_status(_campaign_queryset(), now)
    context = {
        "active_campaigns": [c for c in campaigns if c.status == CampaignStatus.ACTIVE][:4],
        "upcoming_campaigns": [c for c in campaigns if c.status == CampaignStatus.UPCOMING][:4],
    }
    return render(request, "blood/home.html", context)


def campaign_list(request):
    """
    Public campaign directory. Status is always derived from the dates, so
    filtering happens after resolution rather than on the stored column.
    """
    status = (request.GET.get("status") or "").strip().lower()
    blood_type = (request.GET.get("blood_type") or "").strip().upper()

    campaigns = apply_resolved_status(_campaign_queryset())

    if status in CampaignStatus.values:
        campaigns = [c for c in campaigns if c.status == status]
    if blood_type in BLOOD_GROUP_CODES:
        campaigns = [c for c in campaigns if blood_type in c.target_blood_types_list]

    return render(request, "blood/campaign_list.html", {
        "campaigns": campaigns,
        "status": status,
        "blood_type": blood_type,
        "statuses": CampaignStatus.choices,
        "blood_types": BLOOD_GROUP_CODES,
    })


def campaign_detail(request, campaign_id):
    camp = get_object_or_404(_campaign_queryset(), id=campaign_id)
    apply_resolved_status([camp])
    return render(request, "blood/campaign_detail.html", {"camp": camp})


def _last_donation_for(user):
    last = (
        DonationRequest.objects
        .filter(donor=user, status="completed")
        .order_by("-scheduled_date", "-created_at")
        .first()
    )
    if not last:
        return None
    when = last.scheduled_date or last.created_at
    return timezone.localtime(when).date()


def _initial_answers(user):
    return {"last_donation_date": _last_donation_for(user), "blood_type": user.blood_group or ""}


def _render_verdict(request, result, req, camp=None):
    return render(request, "blood/eligibility_result.html", {
        "result": result,
        "donation_request": req,
        "camp": camp,
        "next_date": next_eligible_date(result.last_donation_date),
    })


@donor_required
def campaign_apply(request, campaign_id):
    camp = get_object_or_404(_campaign_queryset(), id=campaign_id)

    try:
        check_campaign_open(camp)
    except DonationFlowError as e:
        messages.error(request, str(e))
        return redirect("campaign_detail", campaign_id=camp.id)

    if request.method == "POST":
        form = EligibilityForm(request.POST, donor=request.user)
        if form.is_valid():
            try:
                result, req = submit_donation_request(
                    donor=request.user,
                    hospital=camp.hospital,
                    answers=answers_from_form(form.cleaned_data),
                    blood_type=form.cleaned_data["blood_type"],
                    campaign=camp,
                    notes=form.cleaned_data.get("notes", ""),
                )
            except DonationFlowError as e:
                messages.error(request, str(e))
                return redirect("campaign_detail", campaign_id=camp.id)

            if req:
                messages.success(request, f"Application sent for '{camp.title}'. {camp.hospital.name} will contact you soon.")
            else:
                messages.warning(request, "You are not eligible to donate at the moment.")
            return _render_verdict(request, result, req, camp)
        messages.error(request, "Please fix the errors and try again.")
    else:
        form = EligibilityForm(donor=request.user, initial=_initial_answers(request.user))

    return render(request, "blood/eligibility_form.html", {"form": form, "camp": camp})


@donor_required
def direct_donation(request):
    if request.method == "POST":
        form = DirectDonationForm(request.POST, donor=request.user)
        if form.is_valid():
            hospital = form.cleaned_data["hospital"]
            result, req = submit_donation_request(
                donor=request.user,
                hospital=hospital,
                answers=answers_from_form(form.cleaned_data),
                blood_type=form.cleaned_data["blood_type"],
                notes=form.cleaned_data.get("notes", ""),
            )
            if req:
                messages.success(request, f"Direct donation request sent. {hospital.name} will contact you soon.")
            else:
                messages.warning(request, "You are not eligible to donate at the moment.")
            return _render_verdict(request, result, req)
        messages.error(request, "Please fix the errors and try again.")
    else:
        form = DirectDonationForm(donor=request.user, initial=_initial_answers(request.user))

    return render(request, "blood/eligibility_form.html", {"form": form, "camp": None})


@login_required
def my_donations(request):
    items = (
        DonationRequest.objects
        .filter(donor=request.user)
        .select_related("hospital", "campaign")
        .order_by("-created_at")
    )
    last = _last_donation_for(request.user)
    return render(request, "blood/my_donations.html", {
        "items": items,
        "last_donation": last,
        "next_date": next_eligible_date(last),
    })


@login_required
def my_appointments(request):
    items = (
        Appointment.objects
        .filter(donor=request.user)
        .select_related("hospital", "donation_request")
        .order_by("-appointment_date", "-appointment_time")
    )
    return render(request, "blood/my_appointments.html", {"items": items, "now": timezone.now()})


@require_POST
@login_required
def cancel_my_appointment(request, appointment_id):
    appt = get_object_or_404(Appointment, id=appointment_id, donor=request.user)
    try:
        cancel_appointment_by_donor(appt, request.user)
    except DonationFlowError as e:
        messages.error(request, str(e))
    else:
        messages.info(request, "Appointment cancelled.")
    return redirect("my_appointments")
