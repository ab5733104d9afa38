from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from conference_survey.attendees.api.permissions import IsConferenceAttendee
from conference_survey.attendees.api.serializers import AttendeeResponseSerializer
from conference_survey.responses import services
from conference_survey.responses.api.serializers import SubmitResponsesSerializer
from conference_survey.responses.api.serializers import SubmitResultSerializer
from conference_survey.responses.api.serializers import SurveyResponseSerializer
from conference_survey.responses.models import SurveyResponse
from conference_survey.surveys.services import get_owned_survey
from conference_survey.users.api.permissions import IsConferenceAdmin


class ResponseViewSet(viewsets.GenericViewSet):
    """Survey submission for attendees and response listings."""

    serializer_class = SurveyResponseSerializer
    queryset = SurveyResponse.objects.none()

    def get_permissions(self):
        if self.action == "survey" and self.request.method == "POST":
            return [IsConferenceAttendee()]
        if self.action == "mine":
            return [IsConferenceAttendee()]
        return [IsConferenceAdmin()]

    def _submit(self, request, survey_id):
        serializer = SubmitResponsesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        count = services.submit_responses(
            request.user,
            survey_id,
            serializer.validated_data["responses"],
        )
        return Response(
            {"detail": "Survey submitted successfully", "count": count},
            status=status.HTTP_201_CREATED,
        )

    def _list_for_admin(self, request, survey_id):
        survey = get_owned_survey(request.user, survey_id)
        rows = (
            SurveyResponse.objects.filter(question__survey=survey)
            .select_related("question", "attendee")
            .order_by("-submitted_at")
        )
        return Response(SurveyResponseSerializer(rows, many=True).data)

    @extend_schema(
        methods=["POST"],
        request=SubmitResponsesSerializer,
        responses={201: SubmitResultSerializer},
    )
    @extend_schema(methods=["GET"], responses=SurveyResponseSerializer(many=True))
    @action(
        detail=False,
        methods=["get", "post"],
        url_path=r"survey/(?P<survey_id>[^/.]+)",
    )
    def survey(self, request, survey_id=None):
        if request.method == "POST":
            return self._submit(request, survey_id)
        return self._list_for_admin(request, survey_id)

    @extend_schema(responses=AttendeeResponseSerializer(many=True))
    @action(detail=False, methods=["get"], url_path="attendee")
    def mine(self, request):
        rows = (
            SurveyResponse.objects.filter(attendee=request.user)
            .select_related("question__survey")
            .order_by("-submitted_at")
        )
        return Response(AttendeeResponseSerializer(rows, many=True).data)
