"""API exceptions that DRF does not ship with.

Each one may carry ``extra`` fields. The handler in
``conference_survey.utils.exception_handler`` merges them into the JSON body
next to ``detail``.
"""

from __future__ import annotations

from typing import Any

from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.exceptions import APIException


class ConferenceAPIException(APIException):
    def __init__(self, detail=None, code=None, **extra: Any):
        super().__init__(detail, code)
        self.extra = extra


class Conflict(ConferenceAPIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = _("Resource already exists.")
    default_code = "conflict"


class InvalidCredentials(ConferenceAPIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = _("Invalid credentials.")
    default_code = "invalid_credentials"


class AccountLocked(ConferenceAPIException):
    status_code = status.HTTP_423_LOCKED
    default_detail = _("Account is locked.")
    default_code = "account_locked"


class PasswordPending(ConferenceAPIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = _(
        "Your password has not been sent yet. Please check your email later.",
    )
    default_code = "pending_password"

