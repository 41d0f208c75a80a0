import blood.models
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

BLOOD_GROUPS = [("A+", "A+"), ("A-", "A-"), ("B+", "B+"), ("B-", "B-"), ("AB+", "AB+"), ("AB-", "AB-"), ("O+", "O+"), ("O-", "O-")]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("hospitals", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="BloodBag",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("blood_type", models.CharField(choices=BLOOD_GROUPS, max_length=3)),
                ("serial_number", models.CharField(max_length=40, unique=True)),
                ("volume_ml", models.PositiveIntegerField(default=450)),
                ("collection_date", models.DateField(default=blood.models.default_collection_date)),
                ("expiry_date", models.DateField(default=blood.models.default_expiry_date)),
                ("status", models.CharField(choices=[("available", "Available"), ("reserved", "Reserved"), ("used", "Used"), ("expired", "Expired")], db_index=True, default="available", max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("donor", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="blood_bags", to=settings.AUTH_USER_MODEL)),
                ("hospital", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="blood_bags", to="hospitals.hospital")),
            ],
            options={
                "ordering": ["expiry_date"],
                "indexes": [models.Index(fields=["hospital", "blood_type", "status"], name="bag_stock_idx")],
            },
        ),
        migrations.CreateModel(
            name="DonationRequest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("blood_type", models.CharField(choices=BLOOD_GROUPS, max_length=3)),
                ("donation_type", models.CharField(choices=[("campaign", "Campaign"), ("direct", "Direct")], default="direct", max_length=10)),
                ("age", models.IntegerField()),
                ("weight", models.FloatField()),
                ("last_donation_date", models.DateField(blank=True, null=True)),
                ("has_illness", models.BooleanField(default=False)),
                ("takes_medication", models.BooleanField(default=False)),
                ("has_traveled", models.BooleanField(default=False)),
                ("eligibility_score", models.IntegerField()),
                ("is_eligible", models.BooleanField()),
                ("status", models.CharField(choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected"), ("completed", "Completed")], db_index=True, default="pending", max_length=10)),
                ("scheduled_date", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True)),
                ("rejection_reason", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("campaign", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="donation_requests", to="hospitals.bloodcampaign")),
                ("donor", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="donation_requests", to=settings.AUTH_USER_MODEL)),
                ("hospital", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="donation_requests", to="hospitals.hospital")),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Appointment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("appointment_date", models.DateField()),
                ("appointment_time", models.TimeField()),
                ("duration_minutes", models.PositiveIntegerField(default=30)),
                ("status", models.CharField(choices=[("scheduled", "Scheduled"), ("confirmed", "Confirmed"), ("completed", "Completed"), ("cancelled", "Cancelled"), ("no_show", "No show")], db_index=True, default="scheduled", max_length=10)),
                ("notes", models.TextField(blank=True)),
                ("reminder_sent", models.BooleanField(default=False)),
                ("location_address", models.CharField(blank=True, max_length=255)),
                ("location_room", models.CharField(blank=True, max_length=50)),
                ("location_floor", models.CharField(blank=True, max_length=50)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("donation_request", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="appointment", to="blood.donationrequest")),
                ("donor", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="appointments", to=settings.AUTH_USER_MODEL)),
                ("hospital", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="appointments", to="hospitals.hospital")),
            ],
            options={
                "ordering": ["appointment_date", "appointment_time"],
            },
        ),
    ]
