from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any

from django.utils import timezone

from conference_survey.realtime.socketio import emit_event_to_conference

if TYPE_CHECKING:  # import for type checking only
    from conference_survey.attendees.models import Attendee
    from conference_survey.surveys.models import Survey


def build_attendee_payload(attendee: Attendee) -> dict[str, Any]:
    return {
        "attendee_id": str(attendee.id),
        "email": attendee.email,
        "first_name": attendee.first_name,
        "last_name": attendee.last_name,
    }


def publish_attendee_joined(attendee: Attendee) -> None:
    emit_event_to_conference(
        attendee.conference_id,
        "attendee_joined",
        build_attendee_payload(attendee),
    )


def publish_survey_activated(survey: Survey) -> None:
    emit_event_to_conference(
        survey.conference_id,
        "survey_activated",
        {"survey_id": str(survey.id), "title": survey.title},
    )


def publish_survey_deactivated(survey: Survey) -> None:
    emit_event_to_conference(
        survey.conference_id,
        "survey_deactivated",
        {"survey_id": str(survey.id)},
    )


def publish_new_response(survey: Survey) -> None:
    """Tell dashboards a submission landed and their stats are stale."""

    survey_id = str(survey.id)
    emit_event_to_conference(
        survey.conference_id,
        "new_response",
        {"survey_id": survey_id},
    )
    emit_event_to_conference(
        survey.conference_id,
        "stats_update",
        {"survey_id": survey_id, "timestamp": timezone.now().isoformat()},
    )
