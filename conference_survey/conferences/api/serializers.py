from django.db.models import Count
from rest_framework import serializers

from conference_survey.conferences.models import Conference


class ConferenceSerializer(serializers.ModelSerializer[Conference]):
    url_code = serializers.RegexField(
        r"^[A-Za-z0-9-]+$",
        max_length=64,
        required=False,
        allow_blank=True,
    )
    conference_url = serializers.CharField(read_only=True)
    attendee_count = serializers.IntegerField(read_only=True, default=0)
    survey_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Conference
        fields = [
            "id",
            "name",
            "url_code",
            "description",
            "start_date",
            "end_date",
            "status",
            "qr_code_url",
            "conference_url",
            "attendee_count",
            "survey_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "qr_code_url", "created_at", "updated_at"]

    def validate_url_code(self, value: str) -> str:
        code = value.strip().upper()
        if self.instance is not None and code and code != self.instance.url_code:
            msg = "The conference code cannot be changed once created."
            raise serializers.ValidationError(msg)
        return code

    def validate(self, attrs):
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and end < start:
            raise serializers.ValidationError(
                {"end_date": "End date cannot be before the start date."},
            )
        return attrs


class ConferenceSurveySerializer(serializers.Serializer):
    id = serializers.UUIDField()
    title = serializers.CharField()
    status = serializers.CharField()
    sort_order = serializers.IntegerField()
    question_count = serializers.IntegerField()


class ConferenceDetailSerializer(ConferenceSerializer):
    surveys = serializers.SerializerMethodField()

    class Meta(ConferenceSerializer.Meta):
        fields = [*ConferenceSerializer.Meta.fields, "surveys"]

    def get_surveys(self, obj: Conference) -> list[dict]:
        surveys = obj.surveys.annotate(question_count=Count("questions")).order_by(
            "sort_order",
        )
        return ConferenceSurveySerializer(surveys, many=True).data


class PublicConferenceSerializer(serializers.ModelSerializer[Conference]):
    class Meta:
        model = Conference
        fields = [
            "id",
            "name",
            "url_code",
            "description",
            "start_date",
            "end_date",
            "status",
        ]
        read_only_fields = fields
