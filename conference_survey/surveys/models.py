import uuid

from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _

from conference_survey.conferences.models import Conference


class Survey(models.Model):
    class Status(models.TextChoices):
        DRAFT = "draft", _("Draft")
        ACTIVE = "active", _("Active")
        INACTIVE = "inactive", _("Inactive")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    conference = models.ForeignKey(
        Conference,
        on_delete=models.CASCADE,
        related_name="surveys",
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.DRAFT,
    )
    sort_order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["sort_order", "created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["conference"],
                condition=Q(status="active"),
                name="one_active_survey_per_conference",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover - simple repr
        return self.title

    @property
    def is_active(self) -> bool:
        return self.status == self.Status.ACTIVE


class Question(models.Model):
    class Type(models.TextChoices):
        SINGLE_CHOICE = "single_choice", _("Single choice")
        MULTI_CHOICE = "multi_choice", _("Multiple choice")
        RATING = "rating", _("Rating")
        NUMERIC_RANGE = "numeric_range", _("Numeric range")
        TEXT_SHORT = "text_short", _("Short text")
        TEXT_LONG = "text_long", _("Long text")

    CHOICE_TYPES = frozenset({Type.SINGLE_CHOICE, Type.MULTI_CHOICE})
    TEXT_TYPES = frozenset({Type.TEXT_SHORT, Type.TEXT_LONG})
    DEFAULT_RATING_MIN = 1
    DEFAULT_RATING_MAX = 5

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    survey = models.ForeignKey(
        Survey,
        on_delete=models.CASCADE,
        related_name="questions",
    )
    text = models.TextField()
    type = models.CharField(max_length=32, choices=Type.choices)
    # choices / ranges / min / max / labels / maxLength depending on type
    options = models.JSONField(default=dict, blank=True)
    is_required = models.BooleanField(default=True)
    help_text = models.CharField(max_length=500, blank=True, default="")
    sort_order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["sort_order", "created_at"]

    def __str__(self) -> str:  # pragma: no cover - simple repr
        return self.text[:60]

    @property
    def rating_bounds(self) -> tuple[int, int]:
        options = self.options or {}
        low = options.get("min", self.DEFAULT_RATING_MIN)
        high = options.get("max", self.DEFAULT_RATING_MAX)
        return int(low), int(high)
