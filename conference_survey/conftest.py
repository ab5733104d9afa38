import pytest
from rest_framework.test import APIClient

from conference_survey.attendees.authentication import issue_admin_token
from conference_survey.attendees.authentication import issue_attendee_token
from conference_survey.attendees.models import Attendee
from conference_survey.conferences.models import Conference
from conference_survey.surveys.models import Question
from conference_survey.surveys.models import Survey
from conference_survey.users.models import User
from tests.permissions.factories import authed_client
from tests.permissions.factories import make_admin
from tests.permissions.factories import make_attendee


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def organiser(db) -> User:
    return make_admin("organiser@example.com", "Olive Organiser")


@pytest.fixture
def other_organiser(db) -> User:
    return make_admin("rival@example.com", "Rita Rival")


@pytest.fixture
def conference(organiser) -> Conference:
    return Conference.objects.create(
        admin=organiser,
        name="Tech Summit 2026",
        url_code="TECH-SUMMIT-2026-AB12",
        status=Conference.Status.ACTIVE,
    )


@pytest.fixture
def other_conference(other_organiser) -> Conference:
    return Conference.objects.create(
        admin=other_organiser,
        name="Data Days",
        url_code="DATA-DAYS-ZZ99",
        status=Conference.Status.ACTIVE,
    )


@pytest.fixture
def survey(conference) -> Survey:
    return Survey.objects.create(
        conference=conference,
        title="Day 1 Feedback",
        status=Survey.Status.ACTIVE,
    )


@pytest.fixture
def questions(survey) -> dict[str, Question]:
    specs = [
        ("rating", "Rate the keynote", Question.Type.RATING, {"min": 1, "max": 5}, True),
        (
            "single",
            "Favourite track?",
            Question.Type.SINGLE_CHOICE,
            {"choices": ["Web", "Data", "Ops"]},
            True,
        ),
        (
            "multi",
            "Which sessions did you attend?",
            Question.Type.MULTI_CHOICE,
            {"choices": ["Keynote", "Workshop", "Panel"]},
            False,
        ),
        ("text", "Any comments?", Question.Type.TEXT_SHORT, {"maxLength": 50}, False),
    ]
    return {
        key: Question.objects.create(
            survey=survey,
            text=text,
            type=qtype,
            options=options,
            is_required=required,
            sort_order=index,
        )
        for index, (key, text, qtype, options, required) in enumerate(specs)
    }


@pytest.fixture
def attendee(conference) -> Attendee:
    return make_attendee(conference, "ada@example.com")


@pytest.fixture
def organiser_client(organiser) -> APIClient:
    return authed_client(issue_admin_token(organiser))


@pytest.fixture
def other_organiser_client(other_organiser) -> APIClient:
    return authed_client(issue_admin_token(other_organiser))


@pytest.fixture
def attendee_client(attendee) -> APIClient:
    return authed_client(issue_attendee_token(attendee))
