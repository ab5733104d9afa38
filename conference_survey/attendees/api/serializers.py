from rest_framework import serializers

from conference_survey.attendees.models import Attendee
from conference_survey.conferences.models import Conference
from conference_survey.responses.models import SurveyResponse

CODE_FIELD_KWARGS = {"max_length": 64, "trim_whitespace": True}


class FirstLoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150)
    conference_code = serializers.CharField(**CODE_FIELD_KWARGS)


class AttendeeLoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(trim_whitespace=False)
    conference_code = serializers.CharField(**CODE_FIELD_KWARGS)


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()
    conference_code = serializers.CharField(**CODE_FIELD_KWARGS)


class ResetPasswordSerializer(serializers.Serializer):
    token = serializers.CharField(max_length=128)
    new_password = serializers.CharField(min_length=8, trim_whitespace=False)
    conference_code = serializers.CharField(**CODE_FIELD_KWARGS)


class ConferenceBriefSerializer(serializers.ModelSerializer[Conference]):
    class Meta:
        model = Conference
        fields = ["id", "name", "url_code"]


class AttendeeSerializer(serializers.ModelSerializer[Attendee]):
    conference_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Attendee
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "status",
            "conference_id",
        ]
        read_only_fields = fields


class AttendeeListSerializer(serializers.ModelSerializer[Attendee]):
    response_count = serializers.IntegerField(read_only=True, default=0)
    surveys_completed = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Attendee
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "status",
            "failed_attempts",
            "locked_until",
            "first_login_at",
            "last_login_at",
            "created_at",
            "response_count",
            "surveys_completed",
        ]
        read_only_fields = fields


class AttendeeResponseSerializer(serializers.ModelSerializer[SurveyResponse]):
    question_id = serializers.UUIDField(read_only=True)
    question_text = serializers.CharField(source="question.text", read_only=True)
    question_type = serializers.CharField(source="question.type", read_only=True)
    survey_id = serializers.UUIDField(source="question.survey_id", read_only=True)
    survey_title = serializers.CharField(
        source="question.survey.title",
        read_only=True,
    )

    class Meta:
        model = SurveyResponse
        fields = [
            "id",
            "question_id",
            "question_text",
            "question_type",
            "survey_id",
            "survey_title",
            "answer",
            "submitted_at",
        ]
        read_only_fields = fields


class AttendeeDetailSerializer(AttendeeListSerializer):
    conference = ConferenceBriefSerializer(read_only=True)
    responses = serializers.SerializerMethodField()

    class Meta(AttendeeListSerializer.Meta):
        fields = [*AttendeeListSerializer.Meta.fields, "conference", "responses"]
        read_only_fields = fields

    def get_responses(self, obj: Attendee) -> list[dict]:
        qs = obj.responses.select_related("question__survey").order_by(
            "question__survey__sort_order",
            "question__sort_order",
        )
        return AttendeeResponseSerializer(qs, many=True).data
