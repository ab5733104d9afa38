"""Conference management for admins plus the public lookup by URL code."""

import logging

from django.db import IntegrityError
from django.db import transaction
from django.db.models import Count
from django.http import HttpResponse
from drf_spectacular.utils import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework import permissions
from rest_framework import status
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from conference_survey.conferences.api.serializers import ConferenceDetailSerializer
from conference_survey.conferences.api.serializers import ConferenceSerializer
from conference_survey.conferences.api.serializers import PublicConferenceSerializer
from conference_survey.conferences.models import Conference
from conference_survey.conferences.qr import qr_png_bytes
from conference_survey.conferences.qr import qr_svg_bytes
from conference_survey.conferences.services import generate_url_code
from conference_survey.conferences.services import get_conference_by_code
from conference_survey.conferences.services import refresh_qr_code
from conference_survey.users.api.permissions import IsConferenceAdmin
from conference_survey.utils.exceptions import Conflict

logger = logging.getLogger(__name__)

URL_CODE_ATTEMPTS = 5
DUPLICATE_CODE = "A conference with this URL code already exists"


class ConferenceViewSet(viewsets.ModelViewSet):
    serializer_class = ConferenceSerializer
    permission_classes = [IsConferenceAdmin]
    filterset_fields = ["status"]

    def get_queryset(self):
        return (
            Conference.objects.filter(admin=self.request.user)
            .annotate(
                attendee_count=Count("attendees", distinct=True),
                survey_count=Count("surveys", distinct=True),
            )
            .order_by("-created_at")
        )

    def get_serializer_class(self):
        if self.action == "retrieve":
            return ConferenceDetailSerializer
        if self.action == "by_code":
            return PublicConferenceSerializer
        return ConferenceSerializer

    def _unique_code(self, name: str, requested: str) -> str:
        if requested:
            if Conference.objects.filter(url_code__iexact=requested).exists():
                raise Conflict(DUPLICATE_CODE)
            return requested
        for _ in range(URL_CODE_ATTEMPTS):
            code = generate_url_code(name)
            if not Conference.objects.filter(url_code=code).exists():
                return code
        msg = "Could not generate a unique URL code; please provide one"
        raise Conflict(msg)

    def perform_create(self, serializer):
        data = serializer.validated_data
        url_code = self._unique_code(data["name"], data.pop("url_code", ""))
        conference = Conference(
            admin=self.request.user,
            url_code=url_code,
            **{k: v for k, v in data.items() if k != "status"},
        )
        refresh_qr_code(conference, save=False)
        try:
            with transaction.atomic():
                conference.save()
        except IntegrityError as exc:
            raise Conflict(DUPLICATE_CODE) from exc
        serializer.instance = conference
        logger.info("Conference %s created by %s", url_code, self.request.user.email)

    def perform_update(self, serializer):
        serializer.validated_data.pop("url_code", None)
        serializer.save()

    def destroy(self, request, *args, **kwargs):
        conference = self.get_object()
        conference.status = Conference.Status.ARCHIVED
        conference.save(update_fields=["status", "updated_at"])
        logger.info("Conference %s archived", conference.url_code)
        return Response({"detail": "Conference archived"})

    @extend_schema(request=None)
    @action(detail=True, methods=["post"])
    def activate(self, request, pk=None):
        conference = self.get_object()
        conference.status = Conference.Status.ACTIVE
        conference.save(update_fields=["status", "updated_at"])
        return Response(ConferenceSerializer(conference).data)

    @extend_schema(request=None)
    @action(detail=True, methods=["post"], url_path="qr-code")
    def qr_code(self, request, pk=None):
        conference = self.get_object()
        refresh_qr_code(conference)
        return Response(
            {
                "qr_code_url": conference.qr_code_url,
                "conference_url": conference.conference_url,
            },
        )

    @extend_schema(responses={(200, "image/png"): OpenApiTypes.BINARY})
    @action(detail=True, methods=["get"], url_path="qr-code/png")
    def qr_code_png(self, request, pk=None):
        conference = self.get_object()
        response = HttpResponse(
            qr_png_bytes(conference.conference_url),
            content_type="image/png",
        )
        response["Content-Disposition"] = (
            f'attachment; filename="{conference.url_code}-qr.png"'
        )
        return response

    @extend_schema(responses={(200, "image/svg+xml"): OpenApiTypes.BINARY})
    @action(detail=True, methods=["get"], url_path="qr-code/svg")
    def qr_code_svg(self, request, pk=None):
        conference = self.get_object()
        response = HttpResponse(
            qr_svg_bytes(conference.conference_url),
            content_type="image/svg+xml",
        )
        response["Content-Disposition"] = (
            f'attachment; filename="{conference.url_code}-qr.svg"'
        )
        return response

    @action(
        detail=False,
        methods=["get"],
        url_path=r"by-code/(?P<code>[^/]+)",
        permission_classes=[permissions.AllowAny],
        authentication_classes=[],
    )
    def by_code(self, request, code=None):
        conference = get_conference_by_code(code)
        return Response(PublicConferenceSerializer(conference).data)
