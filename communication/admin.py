from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("user", "category", "title", "level", "created_at", "read_at")
    list_filter = ("category", "level", "created_at")
    search_fields = ("title", "body", "user__username", "user__email")
    ordering = ("-created_at",)
