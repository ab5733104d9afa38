from django.contrib import admin

from conference_survey.surveys import models


class QuestionInline(admin.TabularInline):
    model = models.Question
    extra = 0
    fields = ["sort_order", "text", "type", "is_required", "options"]
    ordering = ["sort_order"]


@admin.register(models.Survey)
class SurveyAdmin(admin.ModelAdmin):
    list_display = ["title", "conference", "status", "sort_order", "created_at"]
    search_fields = ["title", "conference__name", "conference__url_code"]
    list_filter = ["status"]
    inlines = [QuestionInline]


@admin.register(models.Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ["text", "survey", "type", "is_required", "sort_order"]
    search_fields = ["text", "survey__title"]
    list_filter = ["type", "is_required"]
