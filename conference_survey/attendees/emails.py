from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings

from conference_survey.utils.mail import send_templated_email

if TYPE_CHECKING:
    from conference_survey.attendees.models import Attendee


def login_url(attendee: Attendee) -> str:
    return f"{attendee.conference.conference_url}/login"


def send_password_email(attendee: Attendee, password: str) -> None:
    conference = attendee.conference
    send_templated_email(
        to=attendee.email,
        subject=f"Your password for {conference.name}",
        template="password",
        context={
            "attendee": attendee,
            "conference": conference,
            "password": password,
            "login_url": login_url(attendee),
        },
    )


def send_password_reset_email(attendee: Attendee, reset_url: str) -> None:
    conference = attendee.conference
    send_templated_email(
        to=attendee.email,
        subject=f"Reset your password for {conference.name}",
        template="password_reset",
        context={
            "attendee": attendee,
            "conference": conference,
            "reset_url": reset_url,
            "ttl_minutes": settings.PASSWORD_RESET_TTL_MINUTES,
        },
    )
