from rest_framework.permissions import BasePermission

from conference_survey.users.models import User


def is_admin(user) -> bool:
    return isinstance(user, User) and user.is_authenticated and user.is_active


def conference_of(obj):
    """Return the conference a question, survey or attendee belongs to."""
    if hasattr(obj, "survey"):
        return obj.survey.conference
    if hasattr(obj, "conference"):
        return obj.conference
    return obj


class IsConferenceAdmin(BasePermission):
    """Allow access only to authenticated admin (organiser) accounts."""

    message = "Admin access required."

    def has_permission(self, request, view):
        return is_admin(getattr(request, "user", None))


class IsConferenceOwner(IsConferenceAdmin):
    """Admin who owns the conference the object belongs to."""

    message = "You do not have access to this conference."

    def has_object_permission(self, request, view, obj):
        return conference_of(obj).admin_id == request.user.id
