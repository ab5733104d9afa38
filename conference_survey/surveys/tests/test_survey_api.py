from http import HTTPStatus
from unittest import mock

import pytest
from django.core import mail
from django.urls import reverse

from conference_survey.responses.models import SurveyResponse
from conference_survey.surveys.models import Question
from conference_survey.surveys.models import Survey

pytestmark = pytest.mark.django_db

PUBLISH_ACTIVATED = "conference_survey.surveys.services.publish_survey_activated"
PUBLISH_DEACTIVATED = "conference_survey.surveys.services.publish_survey_deactivated"


@pytest.fixture
def draft(conference) -> Survey:
    return Survey.objects.create(conference=conference, title="Day 2", sort_order=1)


class TestSurveyCrud:
    def test_create_appends_as_draft(self, organiser_client, conference, survey):
        response = organiser_client.post(
            reverse("api:surveys-list"),
            {"conference_id": str(conference.pk), "title": "Wrap-up", "status": "active"},
            format="json",
        )

        assert response.status_code == HTTPStatus.CREATED, response.data
        assert response.data["status"] == Survey.Status.DRAFT
        assert response.data["sort_order"] == survey.sort_order + 1
        assert response.data["conference"] == str(conference.pk)

    def test_create_in_foreign_conference_is_404(self, organiser_client, other_conference):
        response = organiser_client.post(
            reverse("api:surveys-list"),
            {"conference_id": str(other_conference.pk), "title": "Sneaky"},
            format="json",
        )
        assert response.status_code == HTTPStatus.NOT_FOUND

    def test_create_requires_conference(self, organiser_client):
        response = organiser_client.post(
            reverse("api:surveys-list"),
            {"title": "Orphan"},
            format="json",
        )
        assert response.status_code == HTTPStatus.BAD_REQUEST
        assert "conference_id" in response.data

    def test_by_conference_counts(self, organiser_client, conference, questions, attendee):
        SurveyResponse.objects.create(question=questions["rating"], attendee=attendee, answer=3)
        SurveyResponse.objects.create(
            question=questions["single"],
            attendee=attendee,
            answer={"selected": "Ops"},
        )

        response = organiser_client.get(
            reverse("api:surveys-by-conference", kwargs={"conference_id": conference.pk}),
        )

        [row] = response.data
        assert row["question_count"] == len(questions)
        assert row["response_count"] == 1

    def test_detail_orders_questions(self, organiser_client, survey, questions):
        questions["rating"].sort_order = 10
        questions["rating"].save()
        response = organiser_client.get(reverse("api:surveys-detail", kwargs={"pk": survey.pk}))
        ids = [row["id"] for row in response.data["questions"]]
        assert ids[0] == str(questions["single"].pk)
        assert ids[-1] == str(questions["rating"].pk)

    def test_delete_cascades_questions(self, organiser_client, survey, questions):
        response = organiser_client.delete(
            reverse("api:surveys-detail", kwargs={"pk": survey.pk}),
        )
        assert response.status_code == HTTPStatus.NO_CONTENT
        assert not Question.objects.exists()


class TestActivation:
    def test_only_one_active_survey(
        self,
        organiser_client,
        survey,
        draft,
        django_capture_on_commit_callbacks,
    ):
        with (
            mock.patch(PUBLISH_ACTIVATED) as publish,
            django_capture_on_commit_callbacks(execute=True),
        ):
            response = organiser_client.put(
                reverse("api:surveys-activate", kwargs={"pk": draft.pk}),
                {"send_notification": False},
                format="json",
            )

        assert response.status_code == HTTPStatus.OK
        assert response.data["status"] == Survey.Status.ACTIVE
        survey.refresh_from_db()
        assert survey.status == Survey.Status.INACTIVE
        publish.assert_called_once_with(draft)
        assert not mail.outbox

    def test_activation_notifies_attendees(
        self,
        organiser_client,
        draft,
        attendee,
        django_capture_on_commit_callbacks,
    ):
        with (
            mock.patch(PUBLISH_ACTIVATED),
            django_capture_on_commit_callbacks(execute=True),
        ):
            organiser_client.put(
                reverse("api:surveys-activate", kwargs={"pk": draft.pk}),
                {},
                format="json",
            )

        assert [m.to for m in mail.outbox] == [[attendee.email]]
        assert f"/survey/{draft.pk}" in mail.outbox[0].body

    def test_nothing_published_before_commit(self, organiser_client, draft):
        with mock.patch(PUBLISH_ACTIVATED) as publish:
            organiser_client.put(
                reverse("api:surveys-activate", kwargs={"pk": draft.pk}),
                {"send_notification": False},
                format="json",
            )
        publish.assert_not_called()

    def test_deactivate(
        self,
        organiser_client,
        survey,
        django_capture_on_commit_callbacks,
    ):
        with (
            mock.patch(PUBLISH_DEACTIVATED) as publish,
            django_capture_on_commit_callbacks(execute=True),
        ):
            response = organiser_client.put(
                reverse("api:surveys-deactivate", kwargs={"pk": survey.pk}),
            )
        assert response.data["status"] == Survey.Status.INACTIVE
        publish.assert_called_once_with(survey)


class TestAttendeeSurveys:
    def test_active_hub(self, attendee_client, survey, questions, draft, attendee):
        response = attendee_client.get(reverse("api:surveys-active"))
        assert response.data == [
            {
                "id": str(survey.pk),
                "title": survey.title,
                "description": "",
                "question_count": len(questions),
                "is_completed": False,
            },
        ]

        SurveyResponse.objects.create(question=questions["rating"], attendee=attendee, answer=4)
        response = attendee_client.get(reverse("api:surveys-active"))
        assert response.data[0]["is_completed"] is True

    def test_for_attendee_hides_draft(self, attendee_client, draft):
        response = attendee_client.get(
            reverse("api:surveys-for-attendee", kwargs={"survey_id": draft.pk}),
        )
        assert response.status_code == HTTPStatus.NOT_FOUND

    def test_for_attendee_returns_questions_in_order(self, attendee_client, survey, questions):
        response = attendee_client.get(
            reverse("api:surveys-for-attendee", kwargs={"survey_id": survey.pk}),
        )
        assert response.status_code == HTTPStatus.OK
        assert [q["id"] for q in response.data["questions"]] == [
            str(q.pk) for q in questions.values()
        ]

    def test_for_attendee_after_completion(self, attendee_client, survey, questions, attendee):
        SurveyResponse.objects.create(question=questions["rating"], attendee=attendee, answer=4)
        response = attendee_client.get(
            reverse("api:surveys-for-attendee", kwargs={"survey_id": survey.pk}),
        )
        assert response.status_code == HTTPStatus.BAD_REQUEST
        assert response.data["already_completed"] is True


class TestQuestions:
    def test_create_appends(self, organiser_client, survey, questions):
        response = organiser_client.post(
            reverse("api:questions-list"),
            {
                "survey_id": str(survey.pk),
                "text": "Team size?",
                "type": Question.Type.NUMERIC_RANGE,
                "options": {"ranges": ["1-10", "11-50", "51+"]},
            },
            format="json",
        )
        assert response.status_code == HTTPStatus.CREATED, response.data
        assert response.data["sort_order"] == len(questions)
        assert response.data["survey"] == str(survey.pk)

    @pytest.mark.parametrize(
        ("qtype", "options"),
        [
            (Question.Type.SINGLE_CHOICE, {}),
            (Question.Type.MULTI_CHOICE, {"choices": ["A", "A"]}),
            (Question.Type.NUMERIC_RANGE, {"ranges": []}),
            (Question.Type.RATING, {"min": 5, "max": 1}),
            (Question.Type.RATING, {"min": 0, "max": 20}),
            (Question.Type.TEXT_SHORT, {"maxLength": 0}),
        ],
    )
    def test_invalid_options(self, organiser_client, survey, qtype, options):
        response = organiser_client.post(
            reverse("api:questions-list"),
            {"survey_id": str(survey.pk), "text": "?", "type": qtype, "options": options},
            format="json",
        )
        assert response.status_code == HTTPStatus.BAD_REQUEST
        assert "options" in response.data

    def test_create_in_foreign_survey_forbidden(self, other_organiser_client, survey):
        response = other_organiser_client.post(
            reverse("api:questions-list"),
            {
                "survey_id": str(survey.pk),
                "text": "Hijack",
                "type": Question.Type.TEXT_LONG,
            },
            format="json",
        )
        assert response.status_code == HTTPStatus.FORBIDDEN

    def test_by_survey(self, organiser_client, survey, questions):
        response = organiser_client.get(
            reverse("api:questions-by-survey", kwargs={"survey_id": survey.pk}),
        )
        assert [row["text"] for row in response.data] == [q.text for q in questions.values()]

    def test_reorder(self, organiser_client, survey, questions):
        new_order = [questions[key].pk for key in ("text", "multi", "single", "rating")]
        response = organiser_client.put(
            reverse("api:questions-reorder"),
            {"survey_id": str(survey.pk), "question_ids": [str(pk) for pk in new_order]},
            format="json",
        )

        assert response.status_code == HTTPStatus.OK, response.data
        assert [row["id"] for row in response.data] == [str(pk) for pk in new_order]
        questions["text"].refresh_from_db()
        assert questions["text"].sort_order == 0

    def test_reorder_rejects_foreign_question(self, organiser_client, survey, questions, draft):
        stray = Question.objects.create(survey=draft, text="Elsewhere", type="text_long")
        response = organiser_client.put(
            reverse("api:questions-reorder"),
            {"survey_id": str(survey.pk), "question_ids": [str(stray.pk)]},
            format="json",
        )
        assert response.status_code == HTTPStatus.BAD_REQUEST
