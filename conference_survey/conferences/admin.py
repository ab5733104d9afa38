from django.contrib import admin

from conference_survey.conferences import models


@admin.register(models.Conference)
class ConferenceAdmin(admin.ModelAdmin):
    list_display = ["name", "url_code", "admin", "status", "start_date", "end_date"]
    search_fields = ["name", "url_code", "admin__email"]
    list_filter = ["status", "created_at"]
    readonly_fields = ["qr_code_url", "created_at", "updated_at"]
