from django.conf import settings

from .views import get_user_role, is_manager_role


def user_role(request):
    """Context processor to add user role to all templates"""
    ctx = {}
    if request.user.is_authenticated:
        role = get_user_role(request.user)
        ctx["role"] = role
        ctx["is_manager"] = is_manager_role(role)
    return ctx


def school_name(request):
    """Context processor to add school name to all templates"""
    return {"school_name": getattr(settings, "SCHOOL_NAME", "SCHOOL")}
