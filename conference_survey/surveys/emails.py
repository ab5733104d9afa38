from __future__ import annotations

from typing import TYPE_CHECKING

from conference_survey.utils.mail import send_templated_email

if TYPE_CHECKING:
    from conference_survey.attendees.models import Attendee
    from conference_survey.surveys.models import Survey


def send_survey_notification_email(attendee: Attendee, survey: Survey) -> None:
    conference = survey.conference
    send_templated_email(
        to=attendee.email,
        subject=f"New survey available: {survey.title}",
        template="survey_notification",
        context={
            "attendee": attendee,
            "conference": conference,
            "survey": survey,
            "survey_url": f"{conference.conference_url}/survey/{survey.pk}",
        },
    )
