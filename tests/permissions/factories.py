from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field

from rest_framework.test import APIClient

from conference_survey.attendees.models import Attendee
from conference_survey.conferences.models import Conference
from conference_survey.surveys.models import Question
from conference_survey.surveys.models import Survey
from conference_survey.users.models import User

TEST_PASSWORD = "TestPass123!"  # noqa: S105 - test credentials only


@dataclass
class ConferenceContext:
    admin: User
    conference: Conference
    survey: Survey
    question: Question
    attendees: list[Attendee] = field(default_factory=list)


def make_admin(email: str, name: str = "") -> User:
    return User.objects.create_user(
        username=email,
        email=email,
        password=TEST_PASSWORD,
        name=name,
    )


def make_attendee(conference: Conference, email: str, **kwargs) -> Attendee:
    password = kwargs.pop("password", TEST_PASSWORD)
    attendee = Attendee(
        conference=conference,
        email=email,
        first_name=kwargs.pop("first_name", "Ada"),
        last_name=kwargs.pop("last_name", "Lovelace"),
        status=kwargs.pop("status", Attendee.Status.ACTIVE),
        **kwargs,
    )
    if password:
        attendee.set_password(password)
    attendee.save()
    return attendee


def authed_client(token: str) -> APIClient:
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    return client


def create_conference_with_admin(
    email: str,
    url_code: str,
    *,
    survey_status: str = Survey.Status.ACTIVE,
) -> ConferenceContext:
    admin = make_admin(email)
    conference = Conference.objects.create(
        admin=admin,
        name=f"{url_code.title()} Conference",
        url_code=url_code,
        status=Conference.Status.ACTIVE,
    )
    survey = Survey.objects.create(
        conference=conference,
        title="Feedback",
        status=survey_status,
    )
    question = Question.objects.create(
        survey=survey,
        text="How was it?",
        type=Question.Type.RATING,
        options={"min": 1, "max": 5},
    )
    attendee = make_attendee(conference, f"attendee@{url_code.lower()}.example.com")
    return ConferenceContext(
        admin=admin,
        conference=conference,
        survey=survey,
        question=question,
        attendees=[attendee],
    )
