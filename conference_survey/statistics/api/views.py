from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from conference_survey.conferences.services import get_owned_conference
from conference_survey.statistics import services
from conference_survey.surveys.services import get_owned_survey
from conference_survey.users.api.permissions import IsConferenceAdmin


class StatisticsViewSet(viewsets.ViewSet):
    """Aggregated survey results for the owning admin."""

    permission_classes = [IsConferenceAdmin]

    @extend_schema(responses=OpenApiTypes.OBJECT)
    @action(
        detail=False,
        methods=["get"],
        url_path=r"survey/(?P<survey_id>[^/.]+)",
    )
    def survey(self, request, survey_id=None):
        survey = get_owned_survey(request.user, survey_id)
        return Response(services.survey_statistics(survey))

    @extend_schema(responses=OpenApiTypes.OBJECT)
    @action(
        detail=False,
        methods=["get"],
        url_path=r"conference/(?P<conference_id>[^/.]+)/summary",
    )
    def conference_summary(self, request, conference_id=None):
        conference = get_owned_conference(request.user, conference_id)
        return Response(services.conference_summary(conference))
