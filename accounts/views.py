import logging

from django.contrib import messages
from django.contrib.auth import authenticate, login, logout
from django.shortcuts import render, redirect
from django.views.decorators.http import require_POST

from .forms import RegistrationForm

logger = logging.getLogger(__name__)


def register(request):
    if request.user.is_authenticated:
        return redirect("home")

    if request.method == "POST":
        form = RegistrationForm(request.POST)
        if form.is_valid():
            user = form.save()
            logger.info("Registered donor account %s", user.username)
            messages.success(request, "Account created successfully! Please login.")
            return redirect("login")
        messages.error(request, "Please fix the errors and try again.")
    else:
        form = RegistrationForm()

    return render(request, "accounts/register.html", {"form": form})


def login_view(request):
    if request.user.is_authenticated:
        return redirect("home")

    if request.method == "POST":
        username = request.POST.get("username")
        password = request.POST.get("password")

        user = authenticate(request, username=username, password=password)
        if user is not None:
            login(request, user)
            messages.success(request, f"Welcome back, {user.first_name or user.username}!")
            if user.is_hospital_admin:
                return redirect("hospital_portal")
            return redirect("home")

        logger.warning("Failed login attempt for %r", username)
        messages.error(request, "Invalid username or password")

    return render(request, "accounts/login.html")


@require_POST
def logout_view(request):
    logout(request)
    messages.info(request, "You have been logged out.")
    return redirect("login")
