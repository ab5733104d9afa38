import uuid

from django.contrib.auth.hashers import check_password
from django.contrib.auth.hashers import make_password
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from conference_survey.conferences.models import Conference


class Attendee(models.Model):
    """A conference participant, identified by email within one conference.

    Attendees are not Django users. The JWT authentication class hands an
    ``Attendee`` to DRF as ``request.user``, so it exposes the small part of
    the user protocol DRF touches.
    """

    class Status(models.TextChoices):
        FIRST_LOGIN = "first_login", _("First login")
        ACTIVE = "active", _("Active")
        LOCKED = "locked", _("Locked")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    conference = models.ForeignKey(
        Conference,
        on_delete=models.CASCADE,
        related_name="attendees",
    )
    email = models.EmailField()
    first_name = models.CharField(max_length=150)
    last_name = models.CharField(max_length=150)
    # Hash only; empty until the generated password has been emailed.
    password = models.CharField(max_length=128, blank=True, default="")
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.FIRST_LOGIN,
    )
    failed_attempts = models.PositiveSmallIntegerField(default=0)
    locked_until = models.DateTimeField(null=True, blank=True)
    first_login_at = models.DateTimeField(default=timezone.now)
    last_login_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["conference", "email"],
                name="unique_attendee_email_per_conference",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover - simple repr
        return f"{self.full_name} <{self.email}>"

    def save(self, *args, **kwargs):
        self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def is_anonymous(self) -> bool:
        return False

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def has_password(self) -> bool:
        return bool(self.password)

    def set_password(self, raw_password: str) -> None:
        self.password = make_password(raw_password)

    def check_password(self, raw_password: str) -> bool:
        if not self.password:
            return False
        return check_password(raw_password, self.password)

    def lock_active(self, now=None) -> bool:
        """True while a lock is in force. Expired locks do not count."""
        now = now or timezone.now()
        return (
            self.status == self.Status.LOCKED
            and self.locked_until is not None
            and self.locked_until > now
        )


class PasswordQueue(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        SENT = "sent", _("Sent")
        FAILED = "failed", _("Failed")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    attendee = models.ForeignKey(
        Attendee,
        on_delete=models.CASCADE,
        related_name="password_jobs",
    )
    scheduled_at = models.DateTimeField()
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
    )
    attempts = models.PositiveSmallIntegerField(default=0)
    last_error = models.TextField(blank=True, default="")
    sent_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["scheduled_at"]
        indexes = [
            models.Index(
                fields=["status", "scheduled_at"],
                name="password_queue_due_idx",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover - simple repr
        return f"PasswordQueue({self.attendee_id}, {self.status})"


class PasswordReset(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    attendee = models.ForeignKey(
        Attendee,
        on_delete=models.CASCADE,
        related_name="password_resets",
    )
    token = models.CharField(max_length=128, unique=True)
    expires_at = models.DateTimeField()
    used = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:  # pragma: no cover - simple repr
        return f"PasswordReset({self.attendee_id})"

    def is_usable(self, now=None) -> bool:
        now = now or timezone.now()
        return not self.used and self.expires_at > now
