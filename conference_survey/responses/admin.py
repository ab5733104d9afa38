from django.contrib import admin

from conference_survey.responses import models


@admin.register(models.SurveyResponse)
class SurveyResponseAdmin(admin.ModelAdmin):
    list_display = ["attendee", "question", "answer", "submitted_at"]
    search_fields = ["attendee__email", "question__text"]
    list_filter = ["question__survey", "submitted_at"]
    list_select_related = ["attendee", "question"]
