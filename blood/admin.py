from django.contrib import admin

from .models import BloodBag, DonationRequest, Appointment


@admin.register(BloodBag)
class BloodBagAdmin(admin.ModelAdmin):
    list_display = ("serial_number", "blood_type", "hospital", "volume_ml", "collection_date", "expiry_date", "status")
    list_filter = ("status", "blood_type", "hospital")
    search_fields = ("serial_number", "hospital__name", "donor__username")
    ordering = ("expiry_date",)
    actions = ["mark_expired"]

    def mark_expired(self, request, queryset):
        n = queryset.filter(status="available").update(status="expired")
        self.message_user(request, f"{n} bag(s) marked as expired.")
    mark_expired.short_description = "Mark selected available bags as expired"


class AppointmentInline(admin.StackedInline):
    model = Appointment
    extra = 0
    fk_name = "donation_request"


@admin.register(DonationRequest)
class DonationRequestAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "donor",
        "hospital",
        "campaign",
        "blood_type",
        "donation_type",
        "eligibility_score",
        "is_eligible",
        "status",
        "created_at",
    )
    list_filter = ("status", "donation_type", "is_eligible", "blood_type", "created_at")
    search_fields = ("donor__username", "donor__email", "hospital__name", "campaign__title")
    ordering = ("-created_at",)
    inlines = [AppointmentInline]

    # the eligibility snapshot is an audit record
    readonly_fields = (
        "age", "weight", "last_donation_date",
        "has_illness", "takes_medication", "has_traveled",
        "eligibility_score", "is_eligible", "eligibility_reasons", "created_at",
    )

    fieldsets = (
        ("Request", {
            "fields": ("donor", "hospital", "campaign", "blood_type", "donation_type", "status", "scheduled_date", "notes", "rejection_reason")
        }),
        ("Eligibility snapshot", {
            "fields": (
                "age", "weight", "last_donation_date",
                "has_illness", "takes_medication", "has_traveled",
                "eligibility_score", "is_eligible", "eligibility_reasons",
            )
        }),
        ("Meta", {
            "fields": ("created_at",)
        }),
    )


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ("id", "donor", "hospital", "appointment_date", "appointment_time", "status", "reminder_sent")
    list_filter = ("status", "reminder_sent", "appointment_date", "hospital")
    search_fields = ("donor__username", "donor__email", "hospital__name")
    ordering = ("-appointment_date", "-appointment_time")
