from django.db.models.signals import post_save
from django.db.transaction import on_commit
from django.dispatch import receiver

from conference_survey.realtime.events.conferences import publish_attendee_joined

from .models import Attendee


@receiver(post_save, sender=Attendee)
def announce_attendee(sender, instance, created, **kwargs):
    if created:
        on_commit(lambda: publish_attendee_joined(instance))
