from celery import shared_task

from conference_survey.surveys.services import send_survey_notifications


@shared_task(name="surveys.notify_survey_activated")
def notify_survey_activated(survey_id: str) -> dict:
    """Email attendees that a survey has opened.

    Returns:
        ``{"sent": int, "failed": int}``.
    """
    return send_survey_notifications(survey_id)
