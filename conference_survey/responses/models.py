import uuid

from django.db import models

from conference_survey.attendees.models import Attendee
from conference_survey.surveys.models import Question


class SurveyResponse(models.Model):
    """One attendee's answer to one question.

    ``answer`` is either a scalar or a dict carrying ``selected`` (choice
    questions) or ``value`` (rating, numeric and text questions).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    question = models.ForeignKey(
        Question,
        on_delete=models.CASCADE,
        related_name="responses",
    )
    attendee = models.ForeignKey(
        Attendee,
        on_delete=models.CASCADE,
        related_name="responses",
    )
    answer = models.JSONField()
    submitted_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-submitted_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["question", "attendee"],
                name="one_response_per_question_per_attendee",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover - simple repr
        return f"Response({self.attendee_id} -> {self.question_id})"
