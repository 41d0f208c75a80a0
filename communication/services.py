import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction

from .models import Notification

logger = logging.getLogger(__name__)


def user_group(user_id) -> str:
    return f"user_{user_id}"


def push_to_user(user_id, data: dict) -> bool:
    """
    Fire-and-forget websocket push. If the user is offline the message is
    dropped; the Notification row is what they see after login.
    """
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return False
    try:
        async_to_sync(channel_layer.group_send)(
            user_group(user_id),
            {"type": "notify", "data": data},
        )
    except Exception:
        logger.warning("Realtime push to user %s failed", user_id, exc_info=True)
        return False
    return True


def notify_user(user, title, body="", url="", level="INFO", category="SYSTEM"):
    if not user:
        return None
    n = Notification.objects.create(
        user=user,
        title=title,
        body=body,
        url=url,
        level=level,
        category=(category or "SYSTEM").upper(),
    )
    push_to_user(n.user_id, n.as_payload())
    return n


def notify_users(users, title, body="", url="", level="INFO", category="SYSTEM"):
    rows = [
        Notification(user=u, title=title, body=body, url=url, level=level, category=(category or "SYSTEM").upper())
        for u in users if u
    ]
    if not rows:
        return 0
    created = Notification.objects.bulk_create(rows)
    for n in created:
        push_to_user(n.user_id, n.as_payload())
    return len(created)


def notify_after_commit(users, title, body="", url="", level="INFO", category="SYSTEM"):
    """
    Deliver once the surrounding transaction commits, so a rolled back
    action never notifies anyone.
    """
    users = list(users)

    def _run():
        notify_users(users, title=title, body=body, url=url, level=level, category=category)

    transaction.on_commit(_run)
