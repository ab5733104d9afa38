"""Survey statistics, recomputed on demand from response rows."""

from __future__ import annotations

from collections import Counter
from collections import defaultdict
from decimal import ROUND_HALF_UP
from decimal import Decimal
from typing import Any

from django.db.models import Count
from django.db.models import Q

from conference_survey.conferences.models import Conference
from conference_survey.responses.answers import as_rating
from conference_survey.responses.answers import normalize_answer
from conference_survey.responses.models import SurveyResponse
from conference_survey.surveys.models import Question
from conference_survey.surveys.models import Survey

WORD_CLOUD_SIZE = 30
MIN_WORD_LENGTH = 4


def round_half_up(value, places: int = 0):
    """Round like a person would: ``2.5 -> 3``, ``0.125 -> 0.13`` at 2 places."""
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return int(rounded) if places == 0 else float(rounded)


def percentage(count: int, total: int) -> int:
    if not total:
        return 0
    return round_half_up(Decimal(count) * 100 / Decimal(total))


def _label(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _counted(counter: Counter, total: int) -> list[dict]:
    return [
        {"name": name, "value": count, "percentage": percentage(count, total)}
        for name, count in counter.most_common()
    ]


def _choice_data(answers: list, total: int) -> list[dict]:
    return _counted(Counter(_label(normalize_answer(a)) for a in answers), total)


def _multi_choice_data(answers: list, total: int) -> list[dict]:
    counter: Counter = Counter()
    for answer in answers:
        selected = normalize_answer(answer)
        if selected is None:
            continue
        items = selected if isinstance(selected, list) else [selected]
        counter.update(_label(item) for item in items)
    return _counted(counter, total)


def _rating_data(question: Question, answers: list, total: int) -> dict:
    low, high = question.rating_bounds
    buckets = dict.fromkeys(range(low, high + 1), 0)
    score = 0
    for answer in answers:
        rating = as_rating(normalize_answer(answer))
        # out of range still counts towards the total
        if rating in buckets:
            buckets[rating] += 1
            score += rating
    data = [
        {
            "name": f"{rating} Star" if rating == 1 else f"{rating} Stars",
            "value": count,
            "rating": rating,
            "percentage": percentage(count, total),
        }
        for rating, count in sorted(buckets.items(), reverse=True)
    ]
    return {"average": round_half_up(Decimal(score) / Decimal(total), 1), "data": data}


def word_cloud(texts: list[str], size: int = WORD_CLOUD_SIZE) -> list[dict]:
    counter: Counter = Counter()
    for text in texts:
        counter.update(
            word for word in text.lower().split() if len(word) >= MIN_WORD_LENGTH
        )
    return [{"word": word, "count": count} for word, count in counter.most_common(size)]


def _text_data(answers: list) -> dict:
    texts = [_label(normalize_answer(a)) for a in answers]
    return {
        "data": [],
        "responses": [{"text": text} for text in texts],
        "word_cloud": word_cloud(texts),
    }


def question_stats(question: Question, answers: list | None = None) -> dict:
    """Aggregate the answers to one question.

    ``answers`` may be passed in when the caller already loaded them for the
    whole survey; otherwise they are read from the database.
    """
    if answers is None:
        answers = list(question.responses.values_list("answer", flat=True))
    total = len(answers)
    stats: dict[str, Any] = {
        "question_id": str(question.pk),
        "question_text": question.text,
        "question_type": question.type,
        "total_responses": total,
        "data": [],
    }
    if question.type in Question.TEXT_TYPES:
        stats.update(_text_data(answers))
        return stats
    if total == 0:
        if question.type == Question.Type.RATING:
            stats["average"] = 0
        return stats

    if question.type in (Question.Type.SINGLE_CHOICE, Question.Type.NUMERIC_RANGE):
        stats["data"] = _choice_data(answers, total)
    elif question.type == Question.Type.MULTI_CHOICE:
        stats["data"] = _multi_choice_data(answers, total)
    elif question.type == Question.Type.RATING:
        stats.update(_rating_data(question, answers, total))
    return stats


def _answers_by_question(survey: Survey) -> dict:
    grouped = defaultdict(list)
    rows = SurveyResponse.objects.filter(question__survey=survey).values_list(
        "question_id",
        "answer",
    )
    for question_id, answer in rows:
        grouped[question_id].append(answer)
    return grouped


def respondent_count(survey: Survey) -> int:
    return (
        SurveyResponse.objects.filter(question__survey=survey)
        .values("attendee_id")
        .distinct()
        .count()
    )


def survey_statistics(survey: Survey) -> dict:
    answers = _answers_by_question(survey)
    questions = survey.questions.order_by("sort_order")
    respondents = respondent_count(survey)
    total_attendees = survey.conference.attendees.count()
    return {
        "survey_id": str(survey.pk),
        "survey_title": survey.title,
        "conference_name": survey.conference.name,
        "total_respondents": respondents,
        "total_attendees": total_attendees,
        "response_rate": percentage(respondents, total_attendees),
        "questions": [question_stats(q, answers.get(q.pk, [])) for q in questions],
    }


def conference_summary(conference: Conference) -> dict:
    surveys = conference.surveys.aggregate(
        total=Count("id"),
        active=Count("id", filter=Q(status=Survey.Status.ACTIVE)),
    )
    responses = SurveyResponse.objects.filter(question__survey__conference=conference)
    unique_respondents = responses.values("attendee_id").distinct().count()
    total_attendees = conference.attendees.count()
    return {
        "conference_id": str(conference.pk),
        "conference_name": conference.name,
        "total_attendees": total_attendees,
        "total_surveys": surveys["total"],
        "active_surveys": surveys["active"],
        "total_responses": responses.count(),
        "unique_respondents": unique_respondents,
        "overall_participation_rate": percentage(unique_respondents, total_attendees),
    }


def question_response_counts(survey: Survey) -> list[dict]:
    """Per-question response counts pushed to live dashboards."""
    questions = (
        survey.questions.annotate(response_count=Count("responses"))
        .order_by("sort_order")
        .values("id", "text", "type", "response_count")
    )
    return [
        {
            "question_id": str(row["id"]),
            "question_text": row["text"],
            "question_type": row["type"],
            "response_count": row["response_count"],
        }
        for row in questions
    ]
