from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import CustomUser


@admin.register(CustomUser)
class CustomUserAdmin(UserAdmin):
    list_display = ("username", "email", "role", "blood_group", "city", "is_staff")
    list_filter = ("role", "blood_group", "is_staff")

    fieldsets = UserAdmin.fieldsets + (
        ("LifeDrop", {"fields": ("role", "phone_number", "blood_group", "city")}),
    )
