from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class StatisticsConfig(AppConfig):
    name = "conference_survey.statistics"
    label = "survey_statistics"
    verbose_name = _("Statistics")
