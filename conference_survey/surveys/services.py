from __future__ import annotations

import logging
from smtplib import SMTPException

from django.db import transaction
from django.db.models import Max
from django.db.transaction import on_commit
from rest_framework.exceptions import NotFound
from rest_framework.exceptions import PermissionDenied
from rest_framework.exceptions import ValidationError

from conference_survey.attendees.models import Attendee
from conference_survey.realtime.events.conferences import publish_survey_activated
from conference_survey.realtime.events.conferences import publish_survey_deactivated
from conference_survey.surveys.emails import send_survey_notification_email
from conference_survey.surveys.models import Question
from conference_survey.surveys.models import Survey
from conference_survey.utils.ids import parse_uuid

logger = logging.getLogger(__name__)


def get_owned_survey(admin, survey_id) -> Survey:
    """404 when the survey does not exist, 403 when another admin owns it."""
    survey = (
        Survey.objects.select_related("conference")
        .filter(pk=parse_uuid(survey_id))
        .first()
    )
    if survey is None:
        msg = "Survey not found"
        raise NotFound(msg)
    if survey.conference.admin_id != admin.pk:
        msg = "You do not have access to this survey."
        raise PermissionDenied(msg)
    return survey


def next_sort_order(queryset) -> int:
    current = queryset.aggregate(top=Max("sort_order"))["top"]
    return 0 if current is None else current + 1


def activate_survey(survey: Survey, *, send_notification: bool = True) -> Survey:
    """Make ``survey`` the only active survey of its conference."""
    from conference_survey.surveys.tasks import notify_survey_activated  # noqa: PLC0415

    with transaction.atomic():
        Survey.objects.filter(
            conference_id=survey.conference_id,
            status=Survey.Status.ACTIVE,
        ).exclude(pk=survey.pk).update(status=Survey.Status.INACTIVE)
        survey.status = Survey.Status.ACTIVE
        survey.save(update_fields=["status", "updated_at"])

        on_commit(lambda: publish_survey_activated(survey))
        if send_notification:
            on_commit(lambda: notify_survey_activated.delay(str(survey.pk)))

    logger.info(
        "Survey %s activated for conference %s (notify=%s)",
        survey.pk,
        survey.conference_id,
        send_notification,
    )
    return survey


def deactivate_survey(survey: Survey) -> Survey:
    survey.status = Survey.Status.INACTIVE
    survey.save(update_fields=["status", "updated_at"])
    on_commit(lambda: publish_survey_deactivated(survey))
    return survey


def reorder_questions(survey: Survey, question_ids: list) -> list[Question]:
    questions = {q.pk: q for q in survey.questions.all()}
    unknown = [str(pk) for pk in question_ids if pk not in questions]
    if unknown:
        raise ValidationError(
            {"question_ids": f"Questions not in this survey: {', '.join(unknown)}"},
        )
    if len(set(question_ids)) != len(question_ids):
        raise ValidationError({"question_ids": "Duplicate question ids."})
    with transaction.atomic():
        for index, pk in enumerate(question_ids):
            question = questions[pk]
            question.sort_order = index
            question.save(update_fields=["sort_order", "updated_at"])
    return sorted(questions.values(), key=lambda q: q.sort_order)


def send_survey_notifications(survey_id: str) -> dict:
    """Email every reachable attendee that ``survey_id`` is now open.

    Failures are counted per recipient; one bad address never stops the batch.
    """
    survey = Survey.objects.select_related("conference").filter(pk=survey_id).first()
    if survey is None or not survey.is_active:
        return {"sent": 0, "failed": 0}

    recipients = survey.conference.attendees.filter(
        status__in=[Attendee.Status.ACTIVE, Attendee.Status.FIRST_LOGIN],
    ).order_by("created_at")

    sent = failed = 0
    for attendee in recipients.iterator():
        try:
            send_survey_notification_email(attendee, survey)
        except (SMTPException, OSError) as exc:
            failed += 1
            logger.warning(
                "Survey notification to %s failed: %s",
                attendee.email,
                exc,
            )
        else:
            sent += 1

    logger.info(
        "Survey %s notifications: %s sent, %s failed",
        survey.pk,
        sent,
        failed,
    )
    return {"sent": sent, "failed": failed}
