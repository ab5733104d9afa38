from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.db import IntegrityError
from django.db import transaction
from django.db.transaction import on_commit
from rest_framework.exceptions import NotFound
from rest_framework.exceptions import PermissionDenied
from rest_framework.exceptions import ValidationError

from conference_survey.realtime.events.conferences import publish_new_response
from conference_survey.responses.answers import InvalidAnswer
from conference_survey.responses.answers import is_blank
from conference_survey.responses.answers import validate_answer
from conference_survey.responses.models import SurveyResponse
from conference_survey.surveys.models import Survey
from conference_survey.utils.exceptions import Conflict
from conference_survey.utils.ids import parse_uuid

if TYPE_CHECKING:
    from conference_survey.attendees.models import Attendee

logger = logging.getLogger(__name__)

ALREADY_SUBMITTED = "You have already submitted this survey"


def has_submitted(attendee: Attendee, survey: Survey) -> bool:
    return SurveyResponse.objects.filter(
        attendee=attendee,
        question__survey=survey,
    ).exists()


def _build_rows(attendee: Attendee, survey: Survey, items: list[dict]):
    questions = {q.pk: q for q in survey.questions.all()}
    errors: dict[str, str] = {}
    answers = {}

    for item in items:
        question_id = parse_uuid(item.get("question_id"))
        question = questions.get(question_id)
        if question is None:
            errors[str(item.get("question_id"))] = "Question is not part of this survey."
            continue
        if question_id in answers:
            errors[str(question_id)] = "Question answered more than once."
            continue
        try:
            value = validate_answer(question, item.get("answer"))
        except InvalidAnswer as exc:
            errors[str(question_id)] = str(exc)
            continue
        if not is_blank(value):
            answers[question_id] = item.get("answer")

    for pk, question in questions.items():
        if not question.is_required or str(pk) in errors:
            continue
        if pk not in answers:
            errors[str(pk)] = "This question requires an answer."

    if errors:
        raise ValidationError({"responses": errors})
    if not answers:
        raise ValidationError({"responses": "Answer at least one question."})

    return [
        SurveyResponse(question=questions[pk], attendee=attendee, answer=answer)
        for pk, answer in answers.items()
    ]


def submit_responses(attendee: Attendee, survey_id, items: list[dict]) -> int:
    """Store one attendee's answers to a whole survey at once.

    Returns the number of response rows written.
    """
    survey = (
        Survey.objects.select_related("conference")
        .filter(pk=parse_uuid(survey_id))
        .first()
    )
    if survey is None:
        msg = "Survey not found"
        raise NotFound(msg)
    if not survey.is_active:
        raise ValidationError({"detail": "Survey is not active"})
    if survey.conference_id != attendee.conference_id:
        msg = "This survey belongs to another conference."
        raise PermissionDenied(msg)
    if has_submitted(attendee, survey):
        raise Conflict(ALREADY_SUBMITTED)

    rows = _build_rows(attendee, survey, items)
    try:
        with transaction.atomic():
            SurveyResponse.objects.bulk_create(rows)
    except IntegrityError as exc:
        raise Conflict(ALREADY_SUBMITTED) from exc

    on_commit(lambda: publish_new_response(survey))
    logger.info(
        "Attendee %s submitted %s answers to survey %s",
        attendee.pk,
        len(rows),
        survey.pk,
    )
    return len(rows)
