from django.contrib import admin, messages
from django.db import transaction
from django.utils import timezone

from communication.services import notify_users
from .models import Hospital, HospitalMembership, BloodCampaign
from .status import resolve_campaign_status


@admin.register(Hospital)
class HospitalAdmin(admin.ModelAdmin):
    list_display = ("name", "status", "city", "phone", "created_at")
    list_filter = ("status", "city")
    search_fields = ("name", "email", "phone")
    actions = ["approve_hospital", "reject_hospital"]

    def _set_memberships_active(self, hospital, active):
        for m in hospital.memberships.select_related("user").all():
            if m.is_active != active:
                m.is_active = active
                m.save(update_fields=["is_active"])
            if active and m.role == "ADMIN" and m.user.role == "USER":
                m.user.role = "ADMIN"
                m.user.save(update_fields=["role"])

    def _notify_admins(self, hospital, title, body, level):
        users = [m.user for m in hospital.memberships.select_related("user").filter(role="ADMIN")]
        transaction.on_commit(lambda: notify_users(users, title=title, body=body, url="/institutions/", level=level))

    @transaction.atomic
    def _apply_approved(self, request, hospital: Hospital):
        hospital.status = "APPROVED"
        hospital.approved_at = timezone.now()
        hospital.approved_by = request.user
        hospital.rejection_reason = ""
        hospital.save(update_fields=["status", "approved_at", "approved_by", "rejection_reason"])

        self._set_memberships_active(hospital, True)
        self._notify_admins(
            hospital,
            "Hospital approved",
            f"'{hospital.name}' has been approved. You can now access the hospital portal.",
            "SUCCESS",
        )

    @transaction.atomic
    def _apply_rejected(self, request, hospital: Hospital):
        hospital.status = "REJECTED"
        hospital.approved_at = timezone.now()
        hospital.approved_by = request.user
        if not hospital.rejection_reason:
            hospital.rejection_reason = "Rejected by admin."
        hospital.save(update_fields=["status", "approved_at", "approved_by", "rejection_reason"])

        self._set_memberships_active(hospital, False)
        self._notify_admins(
            hospital,
            "Hospital rejected",
            f"'{hospital.name}' was rejected: {hospital.rejection_reason}",
            "DANGER",
        )

    def approve_hospital(self, request, queryset):
        for hospital in queryset:
            self._apply_approved(request, hospital)
    approve_hospital.short_description = "Approve selected hospitals"

    def reject_hospital(self, request, queryset):
        for hospital in queryset:
            self._apply_rejected(request, hospital)
    reject_hospital.short_description = "Reject selected hospitals"

    def save_model(self, request, obj, form, change):
        old_status = None
        if change and obj.pk:
            old_status = Hospital.objects.filter(pk=obj.pk).values_list("status", flat=True).first()

        super().save_model(request, obj, form, change)

        # status changed from the edit page: run the same workflow as the actions
        if old_status != obj.status:
            if obj.status == "APPROVED":
                self._apply_approved(request, obj)
                self.message_user(request, "Approved: hospital portal unlocked.", level=messages.SUCCESS)
            elif obj.status == "REJECTED":
                self._apply_rejected(request, obj)
                self.message_user(request, "Rejected: admins notified.", level=messages.WARNING)


@admin.register(HospitalMembership)
class HospitalMembershipAdmin(admin.ModelAdmin):
    list_display = ("hospital", "user", "role", "is_active", "added_at")
    list_filter = ("role", "is_active")
    search_fields = ("hospital__name", "user__username", "user__email")


@admin.register(BloodCampaign)
class BloodCampaignAdmin(admin.ModelAdmin):
    list_display = ("title", "hospital", "start_date", "end_date", "derived_status", "current_donors", "max_donors")
    list_filter = ("hospital", "start_date")
    search_fields = ("title", "hospital__name", "address")
    ordering = ("-start_date",)

    @admin.display(description="Status")
    def derived_status(self, obj):
        return resolve_campaign_status(obj.start_date, obj.end_date).label
