from functools import wraps
from django.contrib import messages
from django.shortcuts import redirect
from .models import HospitalMembership


def active_membership(user, roles=None):
    qs = HospitalMembership.objects.filter(
        user=user,
        is_active=True,
        hospital__status="APPROVED",
    )
    if roles:
        qs = qs.filter(role__in=list(roles))
    return qs.select_related("hospital").order_by("-added_at").first()


def hospital_member_required(roles=None):
    roles = set(roles or [])

    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            if not request.user.is_authenticated:
                return redirect("login")

            membership = active_membership(request.user, roles)
            if not membership:
                messages.error(request, "You do not have access to the hospital portal.")
                return redirect("home")

            request.hospital_membership = membership
            request.hospital = membership.hospital
            return view_func(request, *args, **kwargs)
        return _wrapped
    return decorator
