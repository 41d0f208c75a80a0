def notifications_context(request):
    if not request.user.is_authenticated:
        return {"unread_notifications_count": 0}
    return {
        "unread_notifications_count": request.user.notifications.filter(read_at__isnull=True).count(),
    }
