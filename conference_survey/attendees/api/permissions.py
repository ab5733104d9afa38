from rest_framework.permissions import BasePermission

from conference_survey.attendees.models import Attendee


def is_attendee(user) -> bool:
    return isinstance(user, Attendee)


class IsConferenceAttendee(BasePermission):
    """Allow access only to requests carrying an attendee token."""

    message = "Attendee access required."

    def has_permission(self, request, view):
        return is_attendee(getattr(request, "user", None))
