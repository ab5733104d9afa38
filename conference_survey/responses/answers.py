"""Answer payload normalisation and validation against question options."""

from __future__ import annotations

from typing import Any

from conference_survey.surveys.models import Question


class InvalidAnswer(ValueError):
    pass


def normalize_answer(answer: Any) -> Any:
    """``{"selected": x}`` and ``{"value": x}`` both become ``x``."""
    if isinstance(answer, dict):
        for key in ("selected", "value"):
            if answer.get(key) is not None:
                return answer[key]
        if answer.keys() & {"selected", "value"}:
            return None
    return answer


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict)):
        return not value
    return False


def as_rating(value: Any) -> int | None:
    """Ratings arrive as ints, integral floats or numeric strings."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _check_choice(value: Any, choices: list) -> None:
    if not isinstance(value, str) or value not in choices:
        msg = f"{value!r} is not one of the available choices."
        raise InvalidAnswer(msg)


def validate_answer(question: Question, answer: Any) -> Any:
    """Return the normalised answer or raise ``InvalidAnswer``.

    Blank answers are accepted here; whether they are allowed depends on
    ``question.is_required`` and is decided by the caller.
    """
    value = normalize_answer(answer)
    if is_blank(value):
        return value

    options = question.options or {}
    if question.type == Question.Type.SINGLE_CHOICE:
        _check_choice(value, options.get("choices") or [])
    elif question.type == Question.Type.MULTI_CHOICE:
        items = value if isinstance(value, list) else [value]
        for item in items:
            _check_choice(item, options.get("choices") or [])
        if len(set(items)) != len(items):
            msg = "The same choice was selected twice."
            raise InvalidAnswer(msg)
    elif question.type == Question.Type.NUMERIC_RANGE:
        ranges = options.get("ranges") or []
        if ranges:
            _check_choice(value, ranges)
    elif question.type == Question.Type.RATING:
        rating = as_rating(value)
        low, high = question.rating_bounds
        if rating is None or not low <= rating <= high:
            msg = f"Rating must be a whole number between {low} and {high}."
            raise InvalidAnswer(msg)
    elif question.type in Question.TEXT_TYPES:
        if not isinstance(value, str):
            msg = "Text answers must be strings."
            raise InvalidAnswer(msg)
        max_length = options.get("maxLength")
        if max_length and len(value) > max_length:
            msg = f"Answer is longer than {max_length} characters."
            raise InvalidAnswer(msg)
    return value
