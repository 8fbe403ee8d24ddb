from django.conf import settings
from rest_framework.permissions import BasePermission


def user_is_hackathon_admin(user) -> bool:
    """
    Organizers are listed in ADMIN_EMAILS; Django staff always qualify.
    """
    if not user or not user.is_authenticated:
        return False

    if user.is_staff:
        return True

    email = (getattr(user, "email", "") or "").strip().lower()
    return bool(email) and email in settings.ADMIN_EMAILS


class IsHackathonAdmin(BasePermission):
    message = "Only hackathon organizers can access this resource."

    def has_permission(self, request, view):
        return user_is_hackathon_admin(request.user)


class HasParticipantIdentity(BasePermission):
    """
    Participant actions are keyed by the signed-in email, so the user must have one.
    """
    message = "Sign in with an account that has an email address."

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and getattr(user, "email", None))
