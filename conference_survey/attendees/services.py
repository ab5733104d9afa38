"""Attendee registration, password login with lockout, and password delivery.

Lockout state machine::

    first_login --(password login ok)--> active
    active --(LOCKOUT_ATTEMPTS failures)--> locked
    locked --(locked_until passes, next login)--> active
    locked --(admin unlock or password reset)--> active
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta
from smtplib import SMTPException
from typing import NoReturn

from django.conf import settings
from django.db import IntegrityError
from django.db import transaction
from django.db.transaction import on_commit
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from conference_survey.attendees.authentication import minutes_until
from conference_survey.attendees.authentication import raise_if_locked
from conference_survey.attendees.emails import send_password_email
from conference_survey.attendees.models import Attendee
from conference_survey.attendees.models import PasswordQueue
from conference_survey.attendees.models import PasswordReset
from conference_survey.conferences.models import Conference
from conference_survey.utils.exceptions import AccountLocked
from conference_survey.utils.exceptions import Conflict
from conference_survey.utils.exceptions import InvalidCredentials
from conference_survey.utils.exceptions import PasswordPending

logger = logging.getLogger(__name__)

# No 0/O, 1/l/I: passwords are read off an email and typed on a phone.
PASSWORD_ALPHABET = "abcdefghjkmnpqrstuvwxyzABCDEFGHJKMNPQRSTUVWXYZ23456789"


class PasswordDeliveryError(Exception):
    """Mail transport failed; the queue entry has already been updated."""

    def __init__(self, queue_id: str, attempts: int, *, final: bool):
        super().__init__(f"Password delivery failed for {queue_id} (attempt {attempts})")
        self.queue_id = queue_id
        self.attempts = attempts
        self.final = final


@dataclass
class FirstLoginResult:
    attendee: Attendee
    created: bool


def generate_password(length: int | None = None) -> str:
    length = length or settings.PASSWORD_LENGTH
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


def backoff_seconds(attempt: int) -> int:
    """Exponential backoff: base, 2 * base, 4 * base, ..."""
    return settings.EMAIL_RETRY_BACKOFF_SECONDS * 2 ** max(attempt - 1, 0)


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _reset_lockout(attendee: Attendee) -> None:
    attendee.status = Attendee.Status.ACTIVE
    attendee.failed_attempts = 0
    attendee.locked_until = None


def schedule_password_delivery(attendee: Attendee) -> PasswordQueue:
    from conference_survey.attendees.tasks import deliver_password  # noqa: PLC0415

    scheduled_at = timezone.now() + timedelta(hours=settings.PASSWORD_DELAY_HOURS)
    job = PasswordQueue.objects.create(attendee=attendee, scheduled_at=scheduled_at)
    on_commit(
        lambda: deliver_password.apply_async(args=[str(job.pk)], eta=scheduled_at),
    )
    return job


def first_login(
    *,
    conference: Conference,
    email: str,
    first_name: str,
    last_name: str,
) -> FirstLoginResult:
    """Register an attendee on their first QR scan, or resume a pending one."""
    if not conference.is_active:
        raise ValidationError({"detail": "This conference is not currently active"})

    email = _normalize_email(email)
    existing = Attendee.objects.filter(conference=conference, email=email).first()
    if existing is not None:
        if existing.status == Attendee.Status.FIRST_LOGIN:
            return FirstLoginResult(attendee=existing, created=False)
        msg = "You have already registered. Please log in with your password."
        raise Conflict(msg, requires_password=True)

    try:
        with transaction.atomic():
            attendee = Attendee.objects.create(
                conference=conference,
                email=email,
                first_name=first_name.strip(),
                last_name=last_name.strip(),
            )
            job = schedule_password_delivery(attendee)
    except IntegrityError as exc:
        msg = "You have already registered. Please log in with your password."
        raise Conflict(msg, requires_password=True) from exc

    logger.info(
        "Attendee %s registered for %s; password scheduled for %s",
        attendee.email,
        conference.url_code,
        job.scheduled_at.isoformat(),
    )
    return FirstLoginResult(attendee=attendee, created=True)


def _fail_login(attendee: Attendee) -> NoReturn:
    now = timezone.now()
    with transaction.atomic():
        row = Attendee.objects.select_for_update().get(pk=attendee.pk)
        row.failed_attempts += 1
        locked = row.failed_attempts >= settings.LOCKOUT_ATTEMPTS
        if locked:
            row.status = Attendee.Status.LOCKED
            row.locked_until = now + timedelta(minutes=settings.LOCKOUT_DURATION_MINS)
        row.save(update_fields=["failed_attempts", "status", "locked_until", "updated_at"])

    if locked:
        logger.warning(
            "Attendee %s locked out after %s failed attempts",
            row.email,
            row.failed_attempts,
        )
        msg = (
            "Account locked due to too many failed attempts. "
            f"Try again in {settings.LOCKOUT_DURATION_MINS} minutes."
        )
        raise AccountLocked(
            msg,
            status="locked",
            locked_until=row.locked_until.isoformat(),
            minutes_remaining=minutes_until(row.locked_until),
        )

    remaining = settings.LOCKOUT_ATTEMPTS - row.failed_attempts
    msg = f"Invalid credentials. {remaining} attempt(s) remaining."
    raise InvalidCredentials(msg, attempts_remaining=remaining)


def password_login(*, conference: Conference, email: str, password: str) -> Attendee:
    attendee = Attendee.objects.filter(
        conference=conference,
        email=_normalize_email(email),
    ).first()
    if attendee is None:
        raise InvalidCredentials

    if attendee.status == Attendee.Status.LOCKED:
        raise_if_locked(attendee)
        _reset_lockout(attendee)
        attendee.save(update_fields=["status", "failed_attempts", "locked_until", "updated_at"])

    if not attendee.has_password:
        raise PasswordPending(status="pending_password")

    if not attendee.check_password(password):
        _fail_login(attendee)

    _reset_lockout(attendee)
    attendee.last_login_at = timezone.now()
    attendee.save(
        update_fields=[
            "status",
            "failed_attempts",
            "locked_until",
            "last_login_at",
            "updated_at",
        ],
    )
    return attendee


def request_password_reset(*, conference_code: str, email: str) -> PasswordReset | None:
    """Create a reset token and queue the email. Silent when nothing matches."""
    from conference_survey.attendees.tasks import (  # noqa: PLC0415
        send_password_reset_email,
    )

    attendee = (
        Attendee.objects.select_related("conference")
        .filter(
            conference__url_code__iexact=(conference_code or "").strip(),
            email=_normalize_email(email),
        )
        .first()
    )
    if attendee is None:
        logger.info("Password reset requested for unknown attendee")
        return None

    reset = PasswordReset.objects.create(
        attendee=attendee,
        token=secrets.token_hex(32),
        expires_at=timezone.now()
        + timedelta(minutes=settings.PASSWORD_RESET_TTL_MINUTES),
    )
    reset_url = (
        f"{attendee.conference.conference_url}/reset-password?token={reset.token}"
    )
    on_commit(lambda: send_password_reset_email.delay(str(reset.pk), reset_url))
    return reset


def reset_password(*, token: str, new_password: str, conference_code: str) -> Attendee:
    invalid = {"detail": "Invalid or expired reset token"}
    with transaction.atomic():
        reset = (
            PasswordReset.objects.select_for_update()
            .select_related("attendee__conference")
            .filter(token=token)
            .first()
        )
        if reset is None or not reset.is_usable():
            raise ValidationError(invalid)

        attendee = reset.attendee
        if attendee.conference.url_code.lower() != (conference_code or "").strip().lower():
            raise ValidationError(invalid)

        attendee.set_password(new_password)
        _reset_lockout(attendee)
        attendee.save(
            update_fields=[
                "password",
                "status",
                "failed_attempts",
                "locked_until",
                "updated_at",
            ],
        )
        reset.used = True
        reset.save(update_fields=["used"])

    logger.info("Attendee %s reset their password", attendee.email)
    return attendee


def unlock_attendee(attendee: Attendee) -> Attendee:
    _reset_lockout(attendee)
    attendee.save(update_fields=["status", "failed_attempts", "locked_until", "updated_at"])
    logger.info("Attendee %s unlocked by admin", attendee.email)
    return attendee


def deliver_queued_password(queue_id: str) -> str:
    """Generate, email and store the password for one queue entry.

    The hash is stored only after the email went out, so a failed send never
    leaves an attendee with a password they cannot know. Returns the final
    queue status; raises ``PasswordDeliveryError`` after recording a failure.
    """
    failure: PasswordDeliveryError | None = None
    with transaction.atomic():
        job = (
            PasswordQueue.objects.select_for_update()
            .select_related("attendee__conference")
            .filter(pk=queue_id)
            .first()
        )
        if job is None:
            logger.warning("Password queue entry %s no longer exists", queue_id)
            return "missing"
        if job.status != PasswordQueue.Status.PENDING:
            return job.status

        attendee = job.attendee
        now = timezone.now()
        if attendee.has_password:
            # Set through a reset before the scheduled delivery.
            job.status = PasswordQueue.Status.SENT
            job.sent_at = now
            job.last_error = "skipped: password already set"
            job.save(update_fields=["status", "sent_at", "last_error", "updated_at"])
            return job.status

        password = generate_password()
        try:
            send_password_email(attendee, password)
        except (SMTPException, OSError) as exc:
            job.attempts += 1
            job.last_error = str(exc)[:2000]
            final = job.attempts >= settings.EMAIL_RETRY_ATTEMPTS
            if final:
                job.status = PasswordQueue.Status.FAILED
            job.save(update_fields=["attempts", "last_error", "status", "updated_at"])
            logger.warning(
                "Password email to %s failed (attempt %s/%s): %s",
                attendee.email,
                job.attempts,
                settings.EMAIL_RETRY_ATTEMPTS,
                exc,
            )
            failure = PasswordDeliveryError(str(job.pk), job.attempts, final=final)
        else:
            attendee.set_password(password)
            attendee.save(update_fields=["password", "updated_at"])
            job.attempts += 1
            job.status = PasswordQueue.Status.SENT
            job.sent_at = now
            job.last_error = ""
            job.save(
                update_fields=["attempts", "status", "sent_at", "last_error", "updated_at"],
            )
            logger.info("Password delivered to %s", attendee.email)

    if failure is not None:
        raise failure
    return PasswordQueue.Status.SENT
