import logging

from django.http import HttpResponse
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action

from conference_survey.conferences.services import get_owned_conference
from conference_survey.exports import reports
from conference_survey.surveys.services import get_owned_survey
from conference_survey.users.api.permissions import IsConferenceAdmin

logger = logging.getLogger(__name__)

CSV_CONTENT_TYPE = "text/csv; charset=utf-8"


def _attachment(content, content_type: str, filename: str) -> HttpResponse:
    response = HttpResponse(content, content_type=content_type)
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response


class ExportViewSet(viewsets.ViewSet):
    """File downloads of survey results for the owning admin."""

    permission_classes = [IsConferenceAdmin]

    @extend_schema(responses={(200, "text/csv"): OpenApiTypes.STR})
    @action(
        detail=False,
        methods=["get"],
        url_path=r"survey/(?P<survey_id>[^/.]+)/csv",
    )
    def survey_csv(self, request, survey_id=None):
        survey = get_owned_survey(request.user, survey_id)
        logger.info("Exporting responses of survey %s as CSV", survey.pk)
        return _attachment(
            reports.responses_csv(survey),
            CSV_CONTENT_TYPE,
            f"{survey.conference.url_code}_responses.csv",
        )

    @extend_schema(responses={(200, "application/pdf"): OpenApiTypes.BINARY})
    @action(
        detail=False,
        methods=["get"],
        url_path=r"survey/(?P<survey_id>[^/.]+)/pdf",
    )
    def survey_pdf(self, request, survey_id=None):
        survey = get_owned_survey(request.user, survey_id)
        logger.info("Exporting report of survey %s as PDF", survey.pk)
        return _attachment(
            reports.survey_report_pdf(survey),
            "application/pdf",
            f"{survey.conference.url_code}_report.pdf",
        )

    @extend_schema(responses={(200, "text/csv"): OpenApiTypes.STR})
    @action(
        detail=False,
        methods=["get"],
        url_path=r"conference/(?P<conference_id>[^/.]+)/attendees",
    )
    def conference_attendees(self, request, conference_id=None):
        conference = get_owned_conference(request.user, conference_id)
        return _attachment(
            reports.attendees_csv(conference),
            CSV_CONTENT_TYPE,
            f"{conference.url_code}_attendees.csv",
        )
