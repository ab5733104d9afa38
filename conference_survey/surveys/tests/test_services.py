from smtplib import SMTPRecipientsRefused
from unittest import mock

import pytest
from django.core import mail
from django.db import IntegrityError

from conference_survey.attendees.models import Attendee
from conference_survey.surveys.models import Survey
from conference_survey.surveys.services import next_sort_order
from conference_survey.surveys.services import send_survey_notifications
from conference_survey.surveys.tasks import notify_survey_activated
from tests.permissions.factories import make_attendee

pytestmark = pytest.mark.django_db


def test_next_sort_order(conference, survey):
    assert next_sort_order(Survey.objects.none()) == 0
    assert next_sort_order(conference.surveys.all()) == survey.sort_order + 1


def test_database_refuses_second_active_survey(conference, survey):
    with pytest.raises(IntegrityError):
        Survey.objects.create(conference=conference, title="Rival", status=Survey.Status.ACTIVE)


class TestNotifications:
    def test_skips_locked_attendees(self, survey, attendee, conference):
        make_attendee(conference, "locked@example.com", status=Attendee.Status.LOCKED)

        assert notify_survey_activated(str(survey.pk)) == {"sent": 1, "failed": 0}
        assert [m.to for m in mail.outbox] == [[attendee.email]]

    def test_one_failure_does_not_stop_batch(self, survey, conference):
        make_attendee(conference, "a@example.com")
        make_attendee(conference, "b@example.com")
        refused = SMTPRecipientsRefused({"a@example.com": (550, b"no")})
        with mock.patch(
            "conference_survey.surveys.services.send_survey_notification_email",
            side_effect=[refused, None],
        ):
            assert send_survey_notifications(str(survey.pk)) == {"sent": 1, "failed": 1}

    def test_inactive_survey_sends_nothing(self, survey, attendee):
        survey.status = Survey.Status.INACTIVE
        survey.save()
        assert send_survey_notifications(str(survey.pk)) == {"sent": 0, "failed": 0}
        assert not mail.outbox
