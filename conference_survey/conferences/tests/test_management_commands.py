from django.core.management import call_command

from conference_survey.conferences.models import Conference
from conference_survey.surveys.models import Question
from conference_survey.surveys.models import Survey
from conference_survey.users.models import User


def test_seed_demo_is_idempotent(db):
    call_command("seed_demo", "--email", "Demo@Example.com", "--code", "DEMO-2026")
    call_command("seed_demo", "--email", "Demo@Example.com", "--code", "DEMO-2026")

    admin = User.objects.get(email="demo@example.com")
    assert admin.check_password("admin12345")
    conference = Conference.objects.get(url_code="DEMO-2026")
    assert conference.admin == admin
    assert conference.is_active
    assert conference.qr_code_url.startswith("data:image/png;base64,")

    assert conference.surveys.count() == 2
    assert Question.objects.filter(survey__conference=conference).count() == 6
    active = conference.surveys.get(status=Survey.Status.ACTIVE)
    assert active.title == "Day 1 Experience Survey"
