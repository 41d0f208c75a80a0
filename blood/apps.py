from django.apps import AppConfig


class BloodConfig(AppConfig):
    name = "blood"
    verbose_name = "Blood inventory and donations"
