from __future__ import annotations

import logging
import re
import secrets
import string
from typing import TYPE_CHECKING
from typing import Any

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework.exceptions import NotFound

from conference_survey.conferences.models import Conference
from conference_survey.conferences.qr import qr_data_url

if TYPE_CHECKING:
    from conference_survey.users.models import User

logger = logging.getLogger(__name__)

URL_CODE_BASE_LENGTH = 40
URL_CODE_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits
URL_CODE_SUFFIX_LENGTH = 4

_NON_CODE_CHARS = re.compile(r"[^A-Z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")


def generate_url_code(name: str) -> str:
    """``"Tech Summit 2025!"`` -> ``"TECH-SUMMIT-2025-K3Q9"``."""
    base = _WHITESPACE.sub("-", _NON_CODE_CHARS.sub("", name.upper()))
    base = base[:URL_CODE_BASE_LENGTH]
    suffix = "".join(
        secrets.choice(URL_CODE_SUFFIX_ALPHABET)
        for _ in range(URL_CODE_SUFFIX_LENGTH)
    )
    return f"{base}-{suffix}"


def refresh_qr_code(conference: Conference, *, save: bool = True) -> str:
    conference.qr_code_url = qr_data_url(conference.conference_url)
    if save:
        conference.save(update_fields=["qr_code_url", "updated_at"])
    return conference.qr_code_url


def get_conference_by_code(code: str, queryset=None) -> Conference:
    qs = queryset if queryset is not None else Conference.objects.all()
    conference = qs.filter(url_code__iexact=(code or "").strip()).first()
    if conference is None:
        msg = "Conference not found"
        raise NotFound(msg)
    return conference


def get_owned_conference(admin: User, conference_id: Any, queryset=None) -> Conference:
    """Return the admin's conference or raise 404, never revealing others."""
    qs = queryset if queryset is not None else Conference.objects.all()
    try:
        return qs.get(pk=conference_id, admin=admin)
    except (Conference.DoesNotExist, DjangoValidationError, ValueError) as exc:
        msg = "Conference not found"
        raise NotFound(msg) from exc
