"""Attendee authentication and admin-side attendee management."""

import logging
import math

from django.db.models import Count
from django.db.models import Exists
from django.db.models import OuterRef
from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import extend_schema
from rest_framework import mixins
from rest_framework import permissions
from rest_framework import status
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from conference_survey.attendees import services
from conference_survey.attendees.api.filters import AttendeeFilter
from conference_survey.attendees.api.serializers import AttendeeDetailSerializer
from conference_survey.attendees.api.serializers import AttendeeListSerializer
from conference_survey.attendees.api.serializers import AttendeeLoginSerializer
from conference_survey.attendees.api.serializers import AttendeeSerializer
from conference_survey.attendees.api.serializers import ConferenceBriefSerializer
from conference_survey.attendees.api.serializers import FirstLoginSerializer
from conference_survey.attendees.api.serializers import ForgotPasswordSerializer
from conference_survey.attendees.api.serializers import ResetPasswordSerializer
from conference_survey.attendees.authentication import issue_attendee_token
from conference_survey.attendees.models import Attendee
from conference_survey.conferences.services import get_conference_by_code
from conference_survey.conferences.services import get_owned_conference
from conference_survey.responses.models import SurveyResponse
from conference_survey.surveys.models import Survey
from conference_survey.users.api.permissions import IsConferenceAdmin

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200
FORGOT_PASSWORD_MESSAGE = (
    "If an account exists with this email, a password reset link has been sent."
)


def _auth_payload(attendee: Attendee) -> dict:
    return {
        "token": issue_attendee_token(attendee),
        "attendee": AttendeeSerializer(attendee).data,
        "conference": ConferenceBriefSerializer(attendee.conference).data,
    }


def _positive_int(raw, default: int, maximum: int | None = None) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    if value < 1:
        return default
    return min(value, maximum) if maximum else value


class AttendeeAuthViewSet(viewsets.GenericViewSet):
    """QR first login, password login and password reset for attendees."""

    # Stored tokens the client still sends must not block these endpoints.
    authentication_classes = []
    permission_classes = [permissions.AllowAny]
    serializer_class = FirstLoginSerializer

    def get_serializer_class(self):
        return {
            "first_login": FirstLoginSerializer,
            "login": AttendeeLoginSerializer,
            "forgot_password": ForgotPasswordSerializer,
            "reset_password": ResetPasswordSerializer,
        }.get(self.action, FirstLoginSerializer)

    def _validated(self, request) -> dict:
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data

    @action(detail=False, methods=["post"], url_path="first-login")
    def first_login(self, request):
        data = self._validated(request)
        conference = get_conference_by_code(data["conference_code"])
        result = services.first_login(
            conference=conference,
            email=data["email"],
            first_name=data["first_name"],
            last_name=data["last_name"],
        )
        body = _auth_payload(result.attendee)
        if result.created:
            body["message"] = (
                "Welcome! Your password will be emailed to you shortly."
            )
            return Response(body, status=status.HTTP_201_CREATED)
        body["message"] = "Welcome back!"
        return Response(body)

    @action(detail=False, methods=["post"])
    def login(self, request):
        data = self._validated(request)
        conference = get_conference_by_code(data["conference_code"])
        attendee = services.password_login(
            conference=conference,
            email=data["email"],
            password=data["password"],
        )
        return Response(_auth_payload(attendee))

    @action(detail=False, methods=["post"], url_path="forgot-password")
    def forgot_password(self, request):
        data = self._validated(request)
        services.request_password_reset(
            conference_code=data["conference_code"],
            email=data["email"],
        )
        return Response({"detail": FORGOT_PASSWORD_MESSAGE})

    @action(detail=False, methods=["post"], url_path="reset-password")
    def reset_password(self, request):
        data = self._validated(request)
        attendee = services.reset_password(
            token=data["token"],
            new_password=data["new_password"],
            conference_code=data["conference_code"],
        )
        body = _auth_payload(attendee)
        body["detail"] = "Password reset successfully"
        return Response(body)


class AttendeeViewSet(
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Admin view of the attendees of conferences they own."""

    serializer_class = AttendeeDetailSerializer
    permission_classes = [IsConferenceAdmin]

    def get_queryset(self):
        return (
            Attendee.objects.filter(conference__admin=self.request.user)
            .select_related("conference")
            .annotate(
                response_count=Count("responses", distinct=True),
                surveys_completed=Count("responses__question__survey", distinct=True),
            )
        )

    def perform_destroy(self, instance):
        logger.info("Attendee %s deleted by admin", instance.email)
        instance.delete()

    @extend_schema(
        parameters=[
            OpenApiParameter("status", str, enum=Attendee.Status.values),
            OpenApiParameter("search", str),
            OpenApiParameter("page", int),
            OpenApiParameter("limit", int),
        ],
        responses=AttendeeListSerializer(many=True),
    )
    @action(
        detail=False,
        methods=["get"],
        url_path=r"conference/(?P<conference_id>[^/.]+)",
    )
    def by_conference(self, request, conference_id=None):
        conference = get_owned_conference(request.user, conference_id)
        qs = self.get_queryset().filter(conference=conference)

        qs = AttendeeFilter(request.query_params, queryset=qs).qs

        page = _positive_int(request.query_params.get("page"), 1)
        limit = _positive_int(
            request.query_params.get("limit"),
            DEFAULT_PAGE_SIZE,
            MAX_PAGE_SIZE,
        )
        total = qs.count()
        offset = (page - 1) * limit
        rows = qs.order_by("-created_at")[offset : offset + limit]

        return Response(
            {
                "attendees": AttendeeListSerializer(rows, many=True).data,
                "pagination": {
                    "page": page,
                    "limit": limit,
                    "total": total,
                    "pages": math.ceil(total / limit) if total else 0,
                },
                "survey_count": conference.surveys.count(),
            },
        )

    @action(
        detail=False,
        methods=["get"],
        url_path=r"conference/(?P<conference_id>[^/.]+)/non-responders",
    )
    def non_responders(self, request, conference_id=None):
        conference = get_owned_conference(request.user, conference_id)
        active_survey = conference.surveys.filter(status=Survey.Status.ACTIVE).first()
        total_attendees = conference.attendees.count()
        if active_survey is None:
            return Response(
                {
                    "active_survey": None,
                    "non_responders": [],
                    "total_attendees": total_attendees,
                    "responded_count": 0,
                },
            )

        answered = SurveyResponse.objects.filter(
            attendee=OuterRef("pk"),
            question__survey=active_survey,
        )
        qs = self.get_queryset().filter(conference=conference)
        non_responders = qs.filter(~Exists(answered)).order_by("last_name", "first_name")
        responded_count = qs.filter(Exists(answered)).count()
        return Response(
            {
                "active_survey": {
                    "id": str(active_survey.id),
                    "title": active_survey.title,
                },
                "non_responders": AttendeeListSerializer(non_responders, many=True).data,
                "total_attendees": total_attendees,
                "responded_count": responded_count,
            },
        )

    @action(detail=True, methods=["put"])
    def unlock(self, request, pk=None):
        attendee = services.unlock_attendee(self.get_object())
        return Response(
            {
                "detail": "Attendee unlocked",
                "attendee": AttendeeListSerializer(attendee).data,
            },
        )
