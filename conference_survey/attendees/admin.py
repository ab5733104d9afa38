from django.contrib import admin
from django.utils import timezone

from conference_survey.attendees import models


@admin.register(models.Attendee)
class AttendeeAdmin(admin.ModelAdmin):
    list_display = [
        "email",
        "first_name",
        "last_name",
        "conference",
        "status",
        "failed_attempts",
        "last_login_at",
    ]
    search_fields = ["email", "first_name", "last_name", "conference__url_code"]
    list_filter = ["status", "conference"]
    exclude = ["password"]
    actions = ["unlock"]

    @admin.action(description="Unlock selected attendees")
    def unlock(self, request, queryset):
        queryset.filter(status=models.Attendee.Status.LOCKED).update(
            status=models.Attendee.Status.ACTIVE,
            failed_attempts=0,
            locked_until=None,
            updated_at=timezone.now(),
        )


@admin.register(models.PasswordQueue)
class PasswordQueueAdmin(admin.ModelAdmin):
    list_display = ["attendee", "scheduled_at", "status", "attempts", "sent_at"]
    list_filter = ["status"]
    search_fields = ["attendee__email"]
    readonly_fields = ["last_error"]


@admin.register(models.PasswordReset)
class PasswordResetAdmin(admin.ModelAdmin):
    list_display = ["attendee", "expires_at", "used", "created_at"]
    list_filter = ["used"]
    search_fields = ["attendee__email"]
    exclude = ["token"]
