import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("blood", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="donationrequest",
            name="eligibility_reasons",
            field=models.JSONField(blank=True, default=list),
        ),
        migrations.AlterField(
            model_name="appointment",
            name="donation_request",
            field=models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="appointments", to="blood.donationrequest"),
        ),
    ]
