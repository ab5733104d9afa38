import os

from celery import Celery
from celery.signals import setup_logging

# Workers started outside pytest or manage.py run against production settings.
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.production")

app = Celery("conference_survey")

# CELERY_* keys in the Django settings, including CELERY_BEAT_SCHEDULE for
# the overdue password sweep.
app.config_from_object("django.conf:settings", namespace="CELERY")


@setup_logging.connect
def config_loggers(*args, **kwargs):
    """Route worker logging through the same dictConfig as the web process."""
    from logging.config import dictConfig  # noqa: PLC0415

    from django.conf import settings  # noqa: PLC0415

    dictConfig(settings.LOGGING)


# Picks up attendees.tasks and surveys.tasks.
app.autodiscover_tasks()
