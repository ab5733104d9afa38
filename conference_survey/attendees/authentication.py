"""JWT issuing and verification for both admins and attendees.

One token format serves both principals. The ``type`` claim selects how the
token resolves: ``admin`` tokens carry simplejwt's ``user_id`` claim,
``attendee`` tokens carry ``attendee_id`` and ``conference_id``.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.tokens import AccessToken

from conference_survey.attendees.models import Attendee
from conference_survey.utils.exceptions import AccountLocked

if TYPE_CHECKING:
    from conference_survey.users.models import User

TOKEN_TYPE_CLAIM = "type"
TOKEN_TYPE_ADMIN = "admin"
TOKEN_TYPE_ATTENDEE = "attendee"


def issue_admin_token(user: User) -> str:
    token = AccessToken.for_user(user)
    token[TOKEN_TYPE_CLAIM] = TOKEN_TYPE_ADMIN
    token["email"] = user.email
    return str(token)


def issue_attendee_token(attendee: Attendee) -> str:
    token = AccessToken()
    token[TOKEN_TYPE_CLAIM] = TOKEN_TYPE_ATTENDEE
    token["attendee_id"] = str(attendee.id)
    token["conference_id"] = str(attendee.conference_id)
    token["email"] = attendee.email
    return str(token)


def minutes_until(moment) -> int:
    seconds = (moment - timezone.now()).total_seconds()
    return max(1, math.ceil(seconds / 60))


def raise_if_locked(attendee: Attendee) -> None:
    if attendee.lock_active():
        minutes = minutes_until(attendee.locked_until)
        msg = _("Account is locked. Try again in %(minutes)s minutes.") % {
            "minutes": minutes,
        }
        raise AccountLocked(
            msg,
            status="locked",
            locked_until=attendee.locked_until.isoformat(),
            minutes_remaining=minutes,
        )


class ConferenceJWTAuthentication(JWTAuthentication):
    """Resolve ``request.user`` to an admin ``User`` or an ``Attendee``."""

    def get_user(self, validated_token):
        if validated_token.get(TOKEN_TYPE_CLAIM) == TOKEN_TYPE_ATTENDEE:
            return self.get_attendee(validated_token)
        return super().get_user(validated_token)

    def get_attendee(self, validated_token) -> Attendee:
        attendee_id = validated_token.get("attendee_id")
        try:
            attendee = Attendee.objects.select_related("conference").get(
                pk=attendee_id,
            )
        except (Attendee.DoesNotExist, DjangoValidationError, ValueError) as exc:
            msg = _("Attendee not found")
            raise AuthenticationFailed(msg, code="user_not_found") from exc

        raise_if_locked(attendee)
        return attendee
