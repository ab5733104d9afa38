"""Survey and question management for admins, survey taking for attendees."""

import logging

from django.db.models import Count
from django.db.models import Exists
from django.db.models import OuterRef
from django.db.models import Prefetch
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from conference_survey.attendees.api.permissions import IsConferenceAttendee
from conference_survey.conferences.services import get_owned_conference
from conference_survey.responses.models import SurveyResponse
from conference_survey.surveys import services
from conference_survey.surveys.api.serializers import ActiveSurveySerializer
from conference_survey.surveys.api.serializers import AttendeeSurveySerializer
from conference_survey.surveys.api.serializers import QuestionReorderSerializer
from conference_survey.surveys.api.serializers import QuestionSerializer
from conference_survey.surveys.api.serializers import SurveyActivateSerializer
from conference_survey.surveys.api.serializers import SurveyDetailSerializer
from conference_survey.surveys.api.serializers import SurveySerializer
from conference_survey.surveys.models import Question
from conference_survey.surveys.models import Survey
from conference_survey.users.api.permissions import IsConferenceOwner
from conference_survey.utils.ids import parse_uuid

logger = logging.getLogger(__name__)

ATTENDEE_ACTIONS = {"active", "for_attendee"}


def _with_counts(qs):
    return qs.annotate(
        question_count=Count("questions", distinct=True),
        response_count=Count("questions__responses__attendee", distinct=True),
    )


class SurveyViewSet(viewsets.ModelViewSet):
    serializer_class = SurveySerializer
    permission_classes = [IsConferenceOwner]
    filterset_fields = ["status"]

    def get_permissions(self):
        if self.action in ATTENDEE_ACTIONS:
            return [IsConferenceAttendee()]
        return super().get_permissions()

    def get_queryset(self):
        qs = _with_counts(Survey.objects.select_related("conference"))
        if self.action == "list":
            return qs.filter(conference__admin=self.request.user)
        if self.action == "retrieve":
            return qs.prefetch_related(
                Prefetch("questions", queryset=Question.objects.order_by("sort_order")),
            )
        return qs

    def get_serializer_class(self):
        if self.action == "retrieve":
            return SurveyDetailSerializer
        if self.action in {"activate", "deactivate"}:
            return SurveyActivateSerializer
        return SurveySerializer

    def perform_create(self, serializer):
        conference = get_owned_conference(
            self.request.user,
            serializer.validated_data.pop("conference_id"),
        )
        survey = serializer.save(
            conference=conference,
            status=Survey.Status.DRAFT,
            sort_order=services.next_sort_order(conference.surveys.all()),
        )
        logger.info("Survey %s created in %s", survey.pk, conference.url_code)

    @extend_schema(responses=SurveySerializer(many=True))
    @action(
        detail=False,
        methods=["get"],
        url_path=r"conference/(?P<conference_id>[^/.]+)",
    )
    def by_conference(self, request, conference_id=None):
        conference = get_owned_conference(request.user, conference_id)
        surveys = _with_counts(conference.surveys.all()).order_by("sort_order")
        return Response(SurveySerializer(surveys, many=True).data)

    @extend_schema(responses=ActiveSurveySerializer(many=True))
    @action(detail=False, methods=["get"])
    def active(self, request):
        attendee = request.user
        answered = SurveyResponse.objects.filter(
            attendee=attendee,
            question__survey=OuterRef("pk"),
        )
        surveys = (
            Survey.objects.filter(
                conference_id=attendee.conference_id,
                status=Survey.Status.ACTIVE,
            )
            .annotate(
                question_count=Count("questions", distinct=True),
                is_completed=Exists(answered),
            )
            .order_by("sort_order")
        )
        return Response(ActiveSurveySerializer(surveys, many=True).data)

    @extend_schema(responses=AttendeeSurveySerializer)
    @action(
        detail=False,
        methods=["get"],
        url_path=r"attendee/(?P<survey_id>[^/.]+)",
    )
    def for_attendee(self, request, survey_id=None):
        attendee = request.user
        survey = (
            Survey.objects.filter(
                conference_id=attendee.conference_id,
                status=Survey.Status.ACTIVE,
            )
            .prefetch_related(
                Prefetch("questions", queryset=Question.objects.order_by("sort_order")),
            )
            .filter(pk=parse_uuid(survey_id))
            .first()
        )
        if survey is None:
            msg = "Survey not found or not active"
            raise NotFound(msg)
        if SurveyResponse.objects.filter(
            attendee=attendee,
            question__survey=survey,
        ).exists():
            return Response(
                {
                    "detail": "You have already completed this survey",
                    "already_completed": True,
                },
                status=status.HTTP_400_BAD_REQUEST,
            )
        return Response(AttendeeSurveySerializer(survey).data)

    @action(detail=True, methods=["put"])
    def activate(self, request, pk=None):
        survey = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.activate_survey(
            survey,
            send_notification=serializer.validated_data["send_notification"],
        )
        return Response(SurveySerializer(survey).data)

    @extend_schema(request=None)
    @action(detail=True, methods=["put"])
    def deactivate(self, request, pk=None):
        survey = services.deactivate_survey(self.get_object())
        return Response(SurveySerializer(survey).data)


class QuestionViewSet(viewsets.ModelViewSet):
    serializer_class = QuestionSerializer
    permission_classes = [IsConferenceOwner]
    http_method_names = ["get", "post", "put", "patch", "delete", "head", "options"]

    def get_queryset(self):
        qs = Question.objects.select_related("survey__conference")
        if self.action == "list":
            return qs.filter(survey__conference__admin=self.request.user)
        return qs

    def get_serializer_class(self):
        if self.action == "reorder":
            return QuestionReorderSerializer
        return QuestionSerializer

    def perform_create(self, serializer):
        survey = services.get_owned_survey(
            self.request.user,
            serializer.validated_data.pop("survey_id"),
        )
        serializer.save(
            survey=survey,
            sort_order=services.next_sort_order(survey.questions.all()),
        )

    @extend_schema(responses=QuestionSerializer(many=True))
    @action(
        detail=False,
        methods=["get"],
        url_path=r"survey/(?P<survey_id>[^/.]+)",
    )
    def by_survey(self, request, survey_id=None):
        survey = services.get_owned_survey(request.user, survey_id)
        questions = survey.questions.order_by("sort_order")
        return Response(QuestionSerializer(questions, many=True).data)

    @extend_schema(responses=QuestionSerializer(many=True))
    @action(detail=False, methods=["put"])
    def reorder(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        survey = services.get_owned_survey(
            request.user,
            serializer.validated_data["survey_id"],
        )
        questions = services.reorder_questions(
            survey,
            serializer.validated_data["question_ids"],
        )
        return Response(QuestionSerializer(questions, many=True).data)
