import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.db import transaction
from django.shortcuts import render, redirect, get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_POST

from accounts.models import CustomUser
from blood.forms import BloodBagForm, BulkRemoveForm, AppointmentForm, RejectRequestForm
from blood.inventory import available_counts, hospital_stats, remove_available_bags, stock_summary
from blood.models import BloodBag, DonationRequest, Appointment
from blood.services import DonationFlowError, reject_request, schedule_appointment, update_appointment_status
from communication.services import notify_after_commit
from .forms import HospitalRegisterForm, AddMemberForm, BloodCampaignForm
from .models import HospitalMembership, BloodCampaign
from .permissions import active_membership, hospital_member_required
from .status import apply_resolved_status

logger = logging.getLogger(__name__)


def institutions_home(request):
    # If logged in, send them to the correct place automatically
    if request.user.is_authenticated:
        if active_membership(request.user):
            return redirect("hospital_portal")
        if HospitalMembership.objects.filter(user=request.user).exists():
            return redirect("hospital_pending")
        return redirect("hospital_register")

    return render(request, "hospitals/institutions_home.html")


@login_required
@transaction.atomic
def hospital_register(request):
    """
    Logged-in user registers a hospital and becomes its ADMIN,
    pending until a super admin approves it.
    """
    if request.method == "POST":
        form = HospitalRegisterForm(request.POST)
        if form.is_valid():
            hospital = form.save(commit=False)
            if not hospital.email:
                hospital.email = request.user.email
            if not hospital.phone:
                hospital.phone = request.user.phone_number or ""
            if not hospital.city:
                hospital.city = request.user.city or ""
            hospital.status = "PENDING"
            hospital.save()

            HospitalMembership.objects.create(
                hospital=hospital,
                user=request.user,
                role="ADMIN",
                is_active=False,
            )
            logger.info("Hospital %s registered by %s", hospital.pk, request.user.username)

            admins = CustomUser.objects.filter(role="SUPER_ADMIN", is_active=True)
            notify_after_commit(
                admins,
                title="New hospital registration",
                body=f"'{hospital.name}' is waiting for approval.",
                url="/admin/hospitals/hospital/",
            )

            messages.success(request, "Hospital registered. Awaiting approval.")
            return redirect("hospital_pending")
        messages.error(request, "Please fix the errors and try again.")
    else:
        form = HospitalRegisterForm(initial={
            "email": request.user.email,
            "phone": request.user.phone_number,
            "city": request.user.city,
        })

    return render(request, "hospitals/hospital_register.html", {"form": form})


@login_required
def hospital_pending(request):
    memberships = HospitalMembership.objects.filter(user=request.user).select_related("hospital")
    return render(request, "hospitals/hospital_pending.html", {"memberships": memberships})


@hospital_member_required(roles=["ADMIN", "STAFF"])
def portal(request):
    hospital = request.hospital
    now = timezone.now()

    campaigns = apply_resolved_status(hospital.campaigns.all().order_by("-start_date"), now)
    pending_requests = (
        hospital.donation_requests
        .filter(status="pending")
        .select_related("donor", "campaign")
        .order_by("created_at")
    )
    upcoming = (
        hospital.appointments
        .filter(status__in=Appointment.OPEN_STATUSES, appointment_date__gte=timezone.localdate(now))
        .select_related("donor")
        .order_by("appointment_date", "appointment_time")
    )

    return render(request, "hospitals/portal.html", {
        "hospital": hospital,
        "stats": hospital_stats(hospital, now),
        "stock": stock_summary(hospital),
        "campaigns": campaigns[:5],
        "pending_requests": pending_requests[:10],
        "upcoming_appointments": upcoming[:10],
    })


@hospital_member_required(roles=["ADMIN"])
def members(request):
    hospital = request.hospital

    if request.method == "POST":
        form = AddMemberForm(request.POST)
        if form.is_valid():
            ident = form.cleaned_data["identifier"].strip()
            role = form.cleaned_data["role"]

            user = (
                CustomUser.objects.filter(username__iexact=ident).first()
                or CustomUser.objects.filter(email__iexact=ident).first()
            )
            if not user:
                messages.error(request, "User not found.")
                return redirect("hospital_members")

            m, created = HospitalMembership.objects.get_or_create(
                hospital=hospital,
                user=user,
                defaults={"role": role, "is_active": True},
            )
            if not created:
                m.role = role
                m.is_active = True
                m.save(update_fields=["role", "is_active"])

            if role == "ADMIN" and user.role == "USER":
                user.role = "ADMIN"
                user.save(update_fields=["role"])

            messages.success(request, "Member updated.")
            return redirect("hospital_members")
        messages.error(request, "Please fix the errors and try again.")
    else:
        form = AddMemberForm()

    items = hospital.memberships.select_related("user").order_by("-added_at")
    return render(request, "hospitals/members.html", {"hospital": hospital, "form": form, "members": items})


# ---------------- Campaigns ----------------
@hospital_member_required(roles=["ADMIN", "STAFF"])
def campaign_list(request):
    hospital = request.hospital
    campaigns = apply_resolved_status(hospital.campaigns.all().order_by("-start_date"))
    return render(request, "hospitals/campaign_list.html", {"hospital": hospital, "campaigns": campaigns})


@hospital_member_required(roles=["ADMIN"])
def campaign_create(request):
    hospital = request.hospital

    if request.method == "POST":
        form = BloodCampaignForm(request.POST)
        if form.is_valid():
            camp = form.save(commit=False)
            camp.hospital = hospital
            camp.created_by = request.user
            camp.status = camp.resolved_status()
            if not camp.contact_name:
                camp.contact_name = hospital.name
            if not camp.contact_phone:
                camp.contact_phone = hospital.phone
            camp.save()
            logger.info("Campaign %s created by hospital %s", camp.pk, hospital.pk)

            messages.success(request, "Campaign created.")
            return redirect("hospital_campaign_list")
        messages.error(request, "Please fix the errors.")
    else:
        form = BloodCampaignForm(initial={"address": hospital.address})

    return render(request, "hospitals/campaign_form.html", {"hospital": hospital, "form": form})


@hospital_member_required(roles=["ADMIN"])
def campaign_edit(request, campaign_id):
    hospital = request.hospital
    camp = get_object_or_404(BloodCampaign, id=campaign_id, hospital=hospital)

    if request.method == "POST":
        form = BloodCampaignForm(request.POST, instance=camp)
        if form.is_valid():
            camp = form.save(commit=False)
            camp.status = camp.resolved_status()
            camp.save()
            messages.success(request, "Campaign updated.")
            return redirect("hospital_campaign_list")
        messages.error(request, "Please fix the errors.")
    else:
        form = BloodCampaignForm(instance=camp)

    return render(request, "hospitals/campaign_form.html", {
        "hospital": hospital,
        "form": form,
        "is_edit": True,
        "camp": camp,
    })


@require_POST
@hospital_member_required(roles=["ADMIN"])
def campaign_delete(request, campaign_id):
    camp = get_object_or_404(BloodCampaign, id=campaign_id, hospital=request.hospital)
    camp.delete()
    logger.info("Campaign %s deleted", campaign_id)
    messages.success(request, "Campaign deleted.")
    return redirect("hospital_campaign_list")


# ---------------- Inventory ----------------
@hospital_member_required(roles=["ADMIN", "STAFF"])
def stock(request):
    hospital = request.hospital
    bags = hospital.blood_bags.filter(status="available").order_by("expiry_date")
    return render(request, "hospitals/stock.html", {
        "hospital": hospital,
        "bags": bags,
        "stock": stock_summary(hospital),
        "form": BloodBagForm(),
        "bulk_form": BulkRemoveForm(available=available_counts(hospital)),
    })


@require_POST
@hospital_member_required(roles=["ADMIN", "STAFF"])
def bag_add(request):
    form = BloodBagForm(request.POST)
    if form.is_valid():
        bag = form.save(commit=False)
        bag.hospital = request.hospital
        bag.save()
        logger.info("Bag %s added to hospital %s", bag.serial_number, request.hospital.pk)
        messages.success(request, f"{bag.blood_type} bag added ({bag.serial_number}).")
    else:
        for field, errors in form.errors.items():
            for error in errors:
                messages.error(request, f"{field}: {error}")
    return redirect("hospital_stock")


@require_POST
@hospital_member_required(roles=["ADMIN", "STAFF"])
def bag_remove(request, bag_id):
    bag = get_object_or_404(BloodBag, id=bag_id, hospital=request.hospital)
    bag.delete()
    messages.success(request, f"{bag.blood_type} bag removed.")
    return redirect("hospital_stock")


@require_POST
@hospital_member_required(roles=["ADMIN", "STAFF"])
@transaction.atomic
def bag_bulk_remove(request):
    hospital = request.hospital
    form = BulkRemoveForm(request.POST, available=available_counts(hospital))
    if not form.is_valid():
        messages.error(request, "Invalid quantities. You cannot remove more bags than available.")
        return redirect("hospital_stock")

    removed = 0
    for blood_type, count in form.counts().items():
        removed += remove_available_bags(hospital, blood_type, count)

    logger.info("Bulk removed %s bag(s) from hospital %s", removed, hospital.pk)
    messages.success(request, f"{removed} bag(s) removed.")
    return redirect("hospital_stock")


# ---------------- Donation requests & appointments ----------------
@hospital_member_required(roles=["ADMIN", "STAFF"])
def request_list(request):
    hospital = request.hospital
    status = (request.GET.get("status") or "pending").strip().lower()
    qs = hospital.donation_requests.select_related("donor", "campaign").order_by("-created_at")
    if status in dict(DonationRequest.STATUS):
        qs = qs.filter(status=status)
    return render(request, "hospitals/request_list.html", {
        "hospital": hospital,
        "items": qs,
        "status": status,
        "statuses": DonationRequest.STATUS,
    })


@hospital_member_required(roles=["ADMIN", "STAFF"])
def request_schedule(request, request_id):
    hospital = request.hospital
    req = get_object_or_404(DonationRequest.objects.select_related("donor", "campaign"), id=request_id, hospital=hospital)

    if request.method == "POST":
        form = AppointmentForm(request.POST)
        if form.is_valid():
            data = form.cleaned_data
            try:
                schedule_appointment(
                    req,
                    appointment_date=data["appointment_date"],
                    appointment_time=data["appointment_time"],
                    duration_minutes=data.get("duration_minutes") or 30,
                    location_address=data.get("location_address", ""),
                    location_room=data.get("location_room", ""),
                    location_floor=data.get("location_floor", ""),
                    notes=data.get("notes", ""),
                )
            except DonationFlowError as e:
                messages.error(request, str(e))
                return redirect("hospital_request_list")

            messages.success(request, "Appointment scheduled.")
            return redirect("hospital_appointment_list")
        messages.error(request, "Please fix the errors.")
    else:
        form = AppointmentForm(initial={"location_address": hospital.address, "duration_minutes": 30})

    return render(request, "hospitals/request_schedule.html", {"hospital": hospital, "req": req, "form": form})


@require_POST
@hospital_member_required(roles=["ADMIN", "STAFF"])
def request_reject(request, request_id):
    req = get_object_or_404(DonationRequest, id=request_id, hospital=request.hospital)
    form = RejectRequestForm(request.POST)
    reason = form.cleaned_data.get("reason", "") if form.is_valid() else ""
    try:
        reject_request(req, reason)
    except DonationFlowError as e:
        messages.error(request, str(e))
    else:
        messages.warning(request, "Request rejected.")
    return redirect("hospital_request_list")


@hospital_member_required(roles=["ADMIN", "STAFF"])
def appointment_list(request):
    hospital = request.hospital
    items = hospital.appointments.select_related("donor", "donation_request").order_by("-appointment_date", "-appointment_time")
    return render(request, "hospitals/appointment_list.html", {"hospital": hospital, "items": items})


@require_POST
@hospital_member_required(roles=["ADMIN", "STAFF"])
def appointment_update(request, appointment_id):
    appt = get_object_or_404(Appointment, id=appointment_id, hospital=request.hospital)
    action = (request.POST.get("action") or "").strip()
    try:
        update_appointment_status(appt, action)
    except DonationFlowError as e:
        messages.error(request, str(e))
    else:
        messages.success(request, "Appointment updated.")
    return redirect("hospital_appointment_list")
