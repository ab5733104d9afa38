from rest_framework import serializers

from conference_survey.responses.models import SurveyResponse


class AnswerItemSerializer(serializers.Serializer):
    question_id = serializers.CharField()
    # scalar, list, or {"selected": ...} / {"value": ...}
    answer = serializers.JSONField(allow_null=True)


class SubmitResponsesSerializer(serializers.Serializer):
    responses = AnswerItemSerializer(many=True, allow_empty=False)


class SubmitResultSerializer(serializers.Serializer):
    detail = serializers.CharField()
    count = serializers.IntegerField()


class SurveyResponseSerializer(serializers.ModelSerializer[SurveyResponse]):
    question_id = serializers.UUIDField(read_only=True)
    question_text = serializers.CharField(source="question.text", read_only=True)
    question_type = serializers.CharField(source="question.type", read_only=True)
    attendee_id = serializers.UUIDField(read_only=True)
    attendee_email = serializers.EmailField(source="attendee.email", read_only=True)

    class Meta:
        model = SurveyResponse
        fields = [
            "id",
            "question_id",
            "question_text",
            "question_type",
            "attendee_id",
            "attendee_email",
            "answer",
            "submitted_at",
        ]
        read_only_fields = fields

