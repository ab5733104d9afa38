from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class AttendeesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "conference_survey.attendees"
    verbose_name = _("Attendees")

    def ready(self):
        import conference_survey.attendees.signals  # noqa: F401, PLC0415
