import pytest

from conference_survey.responses.answers import InvalidAnswer
from conference_survey.responses.answers import as_rating
from conference_survey.responses.answers import is_blank
from conference_survey.responses.answers import normalize_answer
from conference_survey.responses.answers import validate_answer
from conference_survey.surveys.models import Question


def _question(qtype, **options):
    return Question(text="?", type=qtype, options=options)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ({"selected": ["A", "B"]}, ["A", "B"]),
        ({"value": 4}, 4),
        ({"selected": None, "value": "x"}, "x"),
        ("plain", "plain"),
        ({"other": 1}, {"other": 1}),
    ],
)
def test_normalize_answer(raw, expected):
    assert normalize_answer(raw) == expected


@pytest.mark.parametrize("value", [None, "", "   ", [], {}])
def test_is_blank(value):
    assert is_blank(value)


def test_zero_is_not_blank():
    assert not is_blank(0)


@pytest.mark.parametrize(
    ("value", "expected"),
    [(4, 4), (4.0, 4), (" 3 ", 3), (4.5, None), ("four", None), (True, None), ([4], None)],
)
def test_as_rating(value, expected):
    assert as_rating(value) == expected


class TestValidateAnswer:
    def test_single_choice(self):
        question = _question(Question.Type.SINGLE_CHOICE, choices=["Web", "Data"])
        assert validate_answer(question, {"selected": "Web"}) == "Web"
        with pytest.raises(InvalidAnswer):
            validate_answer(question, {"selected": "Mobile"})

    def test_multi_choice(self):
        question = _question(Question.Type.MULTI_CHOICE, choices=["A", "B", "C"])
        assert validate_answer(question, {"selected": ["A", "C"]}) == ["A", "C"]
        assert validate_answer(question, "B") == "B"
        with pytest.raises(InvalidAnswer, match="twice"):
            validate_answer(question, {"selected": ["A", "A"]})
        with pytest.raises(InvalidAnswer):
            validate_answer(question, {"selected": ["A", "Z"]})

    def test_numeric_range(self):
        question = _question(Question.Type.NUMERIC_RANGE, ranges=["0-5", "6+"])
        assert validate_answer(question, "6+") == "6+"
        with pytest.raises(InvalidAnswer):
            validate_answer(question, "7-9")

    def test_rating_uses_bounds(self):
        question = _question(Question.Type.RATING, min=0, max=10)
        assert validate_answer(question, {"value": 0}) == 0
        assert validate_answer(question, "10") == "10"
        with pytest.raises(InvalidAnswer, match="between 0 and 10"):
            validate_answer(question, 11)

    def test_rating_defaults_to_one_to_five(self):
        question = _question(Question.Type.RATING)
        with pytest.raises(InvalidAnswer):
            validate_answer(question, 0)

    def test_text(self):
        question = _question(Question.Type.TEXT_SHORT, maxLength=5)
        assert validate_answer(question, "short") == "short"
        with pytest.raises(InvalidAnswer):
            validate_answer(question, "too long")
        with pytest.raises(InvalidAnswer):
            validate_answer(question, 42)

    def test_blank_passes_through(self):
        question = _question(Question.Type.SINGLE_CHOICE, choices=["A"])
        assert validate_answer(question, {"selected": None}) is None
        assert validate_answer(question, "") == ""
