import logging

from django.contrib.auth import authenticate
from django.db import IntegrityError
from rest_framework import permissions
from rest_framework import status
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from conference_survey.attendees.authentication import issue_admin_token
from conference_survey.users.api.permissions import IsConferenceAdmin
from conference_survey.users.api.serializers import AdminLoginSerializer
from conference_survey.users.api.serializers import AdminRegisterSerializer
from conference_survey.users.api.serializers import AdminSerializer
from conference_survey.users.models import User
from conference_survey.utils.exceptions import Conflict
from conference_survey.utils.exceptions import InvalidCredentials

logger = logging.getLogger(__name__)


def _auth_payload(user: User) -> dict:
    return {"token": issue_admin_token(user), "admin": AdminSerializer(user).data}


class AdminAuthViewSet(viewsets.GenericViewSet):
    """Organiser registration, login and profile."""

    permission_classes = [permissions.AllowAny]
    serializer_class = AdminLoginSerializer

    def get_serializer_class(self):
        if self.action == "register":
            return AdminRegisterSerializer
        if self.action == "me":
            return AdminSerializer
        return AdminLoginSerializer

    @action(detail=False, methods=["post"], authentication_classes=[])
    def register(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        if User.objects.filter(email__iexact=data["email"]).exists():
            msg = "An admin with this email already exists"
            raise Conflict(msg)
        try:
            user = User.objects.create_user(
                username=data["email"],
                email=data["email"],
                password=data["password"],
                name=data.get("name", ""),
            )
        except IntegrityError as exc:
            msg = "An admin with this email already exists"
            raise Conflict(msg) from exc
        logger.info("Admin %s registered", user.email)
        return Response(_auth_payload(user), status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"], authentication_classes=[])
    def login(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = authenticate(
            request,
            username=serializer.validated_data["email"],
            password=serializer.validated_data["password"],
        )
        if user is None:
            raise InvalidCredentials
        return Response(_auth_payload(user))

    @action(detail=False, methods=["get"], permission_classes=[IsConferenceAdmin])
    def me(self, request):
        return Response(AdminSerializer(request.user).data)
