import logging

from django.http import HttpRequest
from django.shortcuts import redirect, render
from django.contrib.auth.models import User
from django.contrib.auth import login, authenticate, logout
from django.contrib.auth.decorators import login_required

logger = logging.getLogger(__name__)

ROLES = ["Admin", "Manager", "Teacher"]


def get_user_role(user):
    if user.groups.filter(name="Admin").exists():
        return "Admin"
    elif user.groups.filter(name="Manager").exists():
        return "Manager"
    else:
        return "Teacher"


def is_manager_role(role):
    return role in ("Admin", "Manager")


def display_name(user):
    """Full name, else the local part of the email, else the username."""
    if user is None:
        return ""
    full_name = user.get_full_name()
    if full_name:
        return full_name
    if user.email:
        return user.email.split("@")[0]
    return user.username


@login_required
def logout_view(request: HttpRequest):
    logout(request)
    return redirect("login")


def homepage(request: HttpRequest):
    if request.user.is_authenticated:
        return redirect("dashboard:dashboard")
    return redirect("login")


def login_page(request: HttpRequest):
    if request.user.is_authenticated:
        return redirect("dashboard:dashboard")

    error_message = None
    role = request.POST.get("role") or request.GET.get("role", "")
    if request.method == "POST":
        identifier = request.POST.get("username", "").strip()
        password = request.POST.get("password", "")

        if not identifier or not password:
            error_message = "Please enter both email and password"
        else:
            username = identifier
            if "@" in identifier:
                match = User.objects.filter(email__iexact=identifier).first()
                if match:
                    username = match.username
            user = authenticate(request, username=username, password=password)
            if user is not None and (not role or get_user_role(user) == role):
                login(request, user)
                logger.info("User %s logged in as %s", user.username, get_user_role(user))
                return redirect("dashboard:dashboard")
            logger.warning("Failed login attempt for %s", identifier)
            error_message = "Invalid Credentials!"

    context = {
        "role": role,
        "valid_roles": ROLES,
        "error_message": error_message,
    }
    return render(request, "base/login.html", context)
