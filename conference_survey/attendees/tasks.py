import logging
from datetime import timedelta
from smtplib import SMTPException

from celery import shared_task
from django.conf import settings
from django.utils import timezone

from conference_survey.attendees import emails
from conference_survey.attendees.models import PasswordQueue
from conference_survey.attendees.models import PasswordReset
from conference_survey.attendees.services import PasswordDeliveryError
from conference_survey.attendees.services import backoff_seconds
from conference_survey.attendees.services import deliver_queued_password

logger = logging.getLogger(__name__)

DISPATCH_BATCH_SIZE = 500


@shared_task(bind=True, name="attendees.deliver_password", max_retries=None)
def deliver_password(self, queue_id: str) -> str:
    """Deliver one queued password, retrying mail failures with backoff.

    Args:
        queue_id: Primary key of the ``PasswordQueue`` entry.

    Returns:
        The entry's final status (``sent``, ``failed``) or ``missing``.
    """
    try:
        return deliver_queued_password(queue_id)
    except PasswordDeliveryError as exc:
        if exc.final:
            logger.error(
                "Giving up on password delivery %s after %s attempts",
                queue_id,
                exc.attempts,
            )
            return PasswordQueue.Status.FAILED
        raise self.retry(exc=exc, countdown=backoff_seconds(exc.attempts)) from exc


@shared_task(name="attendees.dispatch_due_passwords")
def dispatch_due_passwords() -> int:
    """Re-enqueue pending deliveries whose ETA message never ran.

    Entries touched within the grace period are left alone so an in-flight
    retry keeps its backoff.

    Returns:
        Number of entries enqueued.
    """
    cutoff = timezone.now() - timedelta(minutes=settings.PASSWORD_DISPATCH_GRACE_MINUTES)
    due = list(
        PasswordQueue.objects.filter(
            status=PasswordQueue.Status.PENDING,
            scheduled_at__lte=cutoff,
            updated_at__lte=cutoff,
        ).values_list("pk", flat=True)[:DISPATCH_BATCH_SIZE],
    )
    for pk in due:
        deliver_password.delay(str(pk))
    if due:
        logger.info("Re-enqueued %s overdue password deliveries", len(due))
    return len(due)


@shared_task(bind=True, name="attendees.send_password_reset_email")
def send_password_reset_email(self, reset_id: str, reset_url: str) -> bool:
    reset = (
        PasswordReset.objects.select_related("attendee__conference")
        .filter(pk=reset_id)
        .first()
    )
    if reset is None or not reset.is_usable():
        return False
    try:
        emails.send_password_reset_email(reset.attendee, reset_url)
    except (SMTPException, OSError) as exc:
        attempt = self.request.retries + 1
        logger.warning("Reset email to %s failed (attempt %s)", reset.attendee.email, attempt)
        raise self.retry(
            exc=exc,
            countdown=backoff_seconds(attempt),
            max_retries=settings.EMAIL_RETRY_ATTEMPTS - 1,
        ) from exc
    return True
