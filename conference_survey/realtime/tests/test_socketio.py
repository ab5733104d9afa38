import uuid
from unittest import mock

import pytest
from asgiref.sync import async_to_sync
from rest_framework.exceptions import AuthenticationFailed

from conference_survey.attendees.authentication import issue_admin_token
from conference_survey.attendees.authentication import issue_attendee_token
from conference_survey.realtime import socketio as rt
from conference_survey.realtime.events.conferences import publish_new_response
from conference_survey.realtime.events.conferences import publish_survey_activated
from conference_survey.responses.models import SurveyResponse
from tests.permissions.factories import make_attendee


class TestExtractToken:
    def test_from_asgi_query_string(self):
        environ = {"asgi.scope": {"query_string": b"EIO=4&token=abc"}}
        assert rt._extract_token(environ, None) == "abc"

    def test_from_wsgi_query_string(self):
        assert rt._extract_token({"QUERY_STRING": "token=xyz"}, None) == "xyz"

    def test_falls_back_to_auth_payload(self):
        assert rt._extract_token({"QUERY_STRING": ""}, {"token": "from-auth"}) == "from-auth"

    def test_missing(self):
        assert rt._extract_token({}, {"token": ""}) is None


def test_room_name():
    assert rt.room_for_conference("abc") == "conference_abc"


def test_identity_session_round_trip():
    identity = rt.RealtimeIdentity(kind="attendee", attendee_id="a", conference_id="c")
    assert rt.RealtimeIdentity.from_session(identity.as_session()) == identity
    assert rt.RealtimeIdentity.from_session({}) is None


@pytest.mark.django_db
class TestIdentity:
    def test_admin_token(self, organiser, conference, other_conference):
        identity = rt._identity_for_token(issue_admin_token(organiser))

        assert identity == rt.RealtimeIdentity(kind="admin", admin_id=organiser.pk)
        assert rt._allowed_conference(identity, conference.pk) == conference
        assert rt._allowed_conference(identity, other_conference.pk) is None
        assert rt._allowed_conference(identity, "garbage") is None

    def test_attendee_token(self, attendee, conference, other_conference):
        identity = rt._identity_for_token(issue_attendee_token(attendee))

        assert identity.kind == "attendee"
        assert identity.conference_id == str(conference.pk)
        assert rt._allowed_conference(identity, conference.pk) == conference
        assert rt._allowed_conference(identity, other_conference.pk) is None

    def test_deleted_attendee(self, attendee):
        token = issue_attendee_token(attendee)
        attendee.delete()
        with pytest.raises(AuthenticationFailed):
            rt._identity_for_token(token)


class TestHandlers:
    def test_join_enters_room(self):
        identity = rt.RealtimeIdentity(kind="admin", admin_id=1)
        target = {"conference_id": "c1", "conference_name": "Summit"}
        with (
            mock.patch.object(rt, "_identity_for", mock.AsyncMock(return_value=identity)),
            mock.patch.object(rt, "_join_target", mock.AsyncMock(return_value=target)),
            mock.patch.object(rt.sio, "enter_room", mock.AsyncMock()) as enter_room,
            mock.patch.object(rt.sio, "emit", mock.AsyncMock()) as emit,
        ):
            async_to_sync(rt.join_conference)("sid-1", {"conference_id": "c1"})

        enter_room.assert_awaited_once_with("sid-1", "conference_c1")
        emit.assert_awaited_once_with("joined_conference", target, to="sid-1")

    def test_join_without_identity_is_refused(self):
        with (
            mock.patch.object(rt, "_identity_for", mock.AsyncMock(return_value=None)),
            mock.patch.object(rt.sio, "enter_room", mock.AsyncMock()) as enter_room,
            mock.patch.object(rt.sio, "emit", mock.AsyncMock()) as emit,
        ):
            async_to_sync(rt.join_conference)("sid-1", {"conference_id": "c1"})

        enter_room.assert_not_awaited()
        emit.assert_awaited_once_with(
            "error",
            {"message": "Authentication required"},
            to="sid-1",
        )

    def test_join_foreign_conference_is_refused(self):
        identity = rt.RealtimeIdentity(kind="admin", admin_id=1)
        with (
            mock.patch.object(rt, "_identity_for", mock.AsyncMock(return_value=identity)),
            mock.patch.object(rt, "_join_target", mock.AsyncMock(return_value=None)),
            mock.patch.object(rt.sio, "enter_room", mock.AsyncMock()) as enter_room,
            mock.patch.object(rt.sio, "emit", mock.AsyncMock()) as emit,
        ):
            async_to_sync(rt.join_conference)("sid-1", "c2")

        enter_room.assert_not_awaited()
        assert emit.await_args.args[0] == "error"

    def test_connect_rejects_bad_token(self):
        with (
            mock.patch.object(
                rt,
                "_authenticate",
                mock.AsyncMock(side_effect=ConnectionRefusedError("unauthorized")),
            ),
            pytest.raises(ConnectionRefusedError),
        ):
            async_to_sync(rt.connect)("sid-1", {"QUERY_STRING": "token=bad"}, None)

    def test_anonymous_connect_gets_empty_session(self):
        with mock.patch.object(rt.sio, "save_session", mock.AsyncMock()) as save:
            async_to_sync(rt.connect)("sid-1", {}, None)
        save.assert_awaited_once_with("sid-1", {})


class TestPublishers:
    def test_emit_failure_is_logged_not_raised(self):
        failing = mock.AsyncMock(side_effect=RuntimeError("down"))
        with (
            mock.patch.object(rt.sio, "emit", failing),
            mock.patch.object(rt.logger, "exception") as log_exception,
        ):
            rt.emit_event_to_room("conference_x", "ping", {})
        log_exception.assert_called_once_with("Failed to emit %s to %s", "ping", "conference_x")

    def test_survey_activated_payload(self):
        survey = mock.Mock(id="s1", conference_id="c1", title="Day 1")
        with mock.patch(
            "conference_survey.realtime.events.conferences.emit_event_to_conference",
        ) as emit:
            publish_survey_activated(survey)
        emit.assert_called_once_with(
            "c1",
            "survey_activated",
            {"survey_id": "s1", "title": "Day 1"},
        )

    def test_new_response_also_announces_stats_update(self):
        survey = mock.Mock(id="s1", conference_id="c1")
        with mock.patch(
            "conference_survey.realtime.events.conferences.emit_event_to_conference",
        ) as emit:
            publish_new_response(survey)
        assert [c.args[1] for c in emit.call_args_list] == ["new_response", "stats_update"]


class TestRoomAndStatsHandlers:
    def test_leave_conference(self):
        conference_id = str(uuid.uuid4())
        with mock.patch.object(rt.sio, "leave_room", mock.AsyncMock()) as leave_room:
            async_to_sync(rt.leave_conference)("sid-1", {"conference_id": conference_id})
        leave_room.assert_awaited_once_with("sid-1", f"conference_{conference_id}")

    def test_leave_ignores_malformed_id(self):
        with mock.patch.object(rt.sio, "leave_room", mock.AsyncMock()) as leave_room:
            async_to_sync(rt.leave_conference)("sid-1", {"conference_id": "../x"})
        leave_room.assert_not_awaited()

    def test_ping(self):
        with mock.patch.object(rt.sio, "emit", mock.AsyncMock()) as emit:
            async_to_sync(rt.ping)("sid-1")
        emit.assert_awaited_once_with("pong", to="sid-1")

    def test_request_stats_replies_with_counts(self):
        identity = rt.RealtimeIdentity(kind="attendee", attendee_id="a", conference_id="c")
        rows = [{"question_id": "q1", "response_count": 1}]
        with (
            mock.patch.object(rt, "_identity_for", mock.AsyncMock(return_value=identity)),
            mock.patch.object(rt, "_live_counts", mock.AsyncMock(return_value=rows)),
            mock.patch.object(rt.sio, "emit", mock.AsyncMock()) as emit,
        ):
            async_to_sync(rt.request_stats)("sid-1", {"survey_id": "s1"})

        emit.assert_awaited_once_with(
            "stats_data",
            {"survey_id": "s1", "stats": rows},
            to="sid-1",
        )

    def test_request_stats_for_unreachable_survey(self):
        identity = rt.RealtimeIdentity(kind="admin", admin_id=1)
        with (
            mock.patch.object(rt, "_identity_for", mock.AsyncMock(return_value=identity)),
            mock.patch.object(rt, "_live_counts", mock.AsyncMock(return_value=None)),
            mock.patch.object(rt.sio, "emit", mock.AsyncMock()) as emit,
        ):
            async_to_sync(rt.request_stats)("sid-1", {"survey_id": "s1"})

        emit.assert_awaited_once_with("error", {"message": "Survey not found"}, to="sid-1")

    def test_request_stats_requires_identity(self):
        with (
            mock.patch.object(rt, "_identity_for", mock.AsyncMock(return_value=None)),
            mock.patch.object(rt.sio, "emit", mock.AsyncMock()) as emit,
        ):
            async_to_sync(rt.request_stats)("sid-1", {"survey_id": "s1"})

        assert emit.await_args.args[:2] == ("error", {"message": "Authentication required"})


@pytest.mark.django_db
class TestLiveCounts:
    # Unwrapped so it runs inside the test transaction.
    live_counts = staticmethod(rt._live_counts.func)

    def test_counts_per_question(self, attendee, survey, questions):
        SurveyResponse.objects.create(question=questions["rating"], attendee=attendee, answer=5)
        identity = rt._identity_for_token(issue_attendee_token(attendee))

        rows = self.live_counts(identity, str(survey.pk))

        counts = {row["question_id"]: row["response_count"] for row in rows}
        assert counts[str(questions["rating"].pk)] == 1
        assert counts[str(questions["text"].pk)] == 0

    def test_other_conference_survey(self, survey, other_conference):
        outsider = make_attendee(other_conference, "outsider@example.com")
        identity = rt._identity_for_token(issue_attendee_token(outsider))
        assert self.live_counts(identity, str(survey.pk)) is None

    def test_unknown_survey(self, organiser):
        identity = rt._identity_for_token(issue_admin_token(organiser))
        assert self.live_counts(identity, str(uuid.uuid4())) is None
        assert self.live_counts(identity, "garbage") is None
