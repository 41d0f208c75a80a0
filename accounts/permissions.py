from functools import wraps
from django.contrib import messages
from django.shortcuts import redirect


def donor_required(view_func):
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return redirect("login")
        if not request.user.is_donor:
            messages.warning(request, "Only donor accounts can submit donation requests.")
            return redirect("home")
        return view_func(request, *args, **kwargs)
    return _wrapped
