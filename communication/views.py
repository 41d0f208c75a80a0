from django.contrib.auth.decorators import login_required
from django.db.models import Count, Q
from django.shortcuts import render, redirect, get_object_or_404
from django.utils import timezone
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_POST

from .models import Notification

INBOX_LIMIT = 200


def _safe_target(request, url):
    url = (url or "").strip()
    if url and url_has_allowed_host_and_scheme(url, allowed_hosts={request.get_host()}):
        return url
    return None


@login_required
def inbox(request):
    category = (request.GET.get("category") or "").strip().upper()
    qs = request.user.notifications.all()
    if category in dict(Notification.CATEGORIES):
        qs = qs.filter(category=category)
    else:
        category = ""

    unread_by_category = dict(
        request.user.notifications
        .order_by()
        .values_list("category")
        .annotate(n=Count("id", filter=Q(read_at__isnull=True)))
    )

    return render(request, "communication/inbox.html", {
        "items": qs.order_by("-created_at")[:INBOX_LIMIT],
        "category": category,
        "categories": [(code, label, unread_by_category.get(code, 0)) for code, label in Notification.CATEGORIES],
    })


@login_required
def open_notification(request, pk):
    n = get_object_or_404(Notification, pk=pk, user=request.user)
    n.mark_read()
    return redirect(_safe_target(request, n.url) or "inbox")


@require_POST
@login_required
def mark_read(request, pk):
    n = get_object_or_404(Notification, pk=pk, user=request.user)
    n.mark_read()
    return redirect(_safe_target(request, request.POST.get("next")) or "inbox")


@require_POST
@login_required
def mark_all_read(request):
    qs = request.user.notifications.filter(read_at__isnull=True)
    category = (request.POST.get("category") or "").strip().upper()
    if category in dict(Notification.CATEGORIES):
        qs = qs.filter(category=category)
    qs.update(read_at=timezone.now())
    return redirect(_safe_target(request, request.POST.get("next")) or "inbox")
