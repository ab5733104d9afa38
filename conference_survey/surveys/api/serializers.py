from rest_framework import serializers

from conference_survey.surveys.models import Question
from conference_survey.surveys.models import Survey

MAX_RATING_SPAN = 10


def _non_empty_strings(value) -> bool:
    return (
        isinstance(value, list)
        and bool(value)
        and all(isinstance(item, str) and item.strip() for item in value)
    )


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_question_options(question_type: str, options) -> dict:
    """Check ``options`` carries what ``question_type`` needs to render."""
    if options in (None, ""):
        options = {}
    if not isinstance(options, dict):
        msg = "Options must be an object."
        raise serializers.ValidationError(msg)

    if question_type in Question.CHOICE_TYPES:
        choices = options.get("choices")
        if not _non_empty_strings(choices):
            msg = "Choice questions need a non-empty `choices` list of strings."
            raise serializers.ValidationError(msg)
        if len(set(choices)) != len(choices):
            msg = "Choices must be unique."
            raise serializers.ValidationError(msg)
    elif question_type == Question.Type.NUMERIC_RANGE:
        if not _non_empty_strings(options.get("ranges")):
            msg = "Numeric range questions need a non-empty `ranges` list of strings."
            raise serializers.ValidationError(msg)
    elif question_type == Question.Type.RATING:
        low = options.get("min", Question.DEFAULT_RATING_MIN)
        high = options.get("max", Question.DEFAULT_RATING_MAX)
        if not (_is_int(low) and _is_int(high)) or low >= high:
            msg = "Rating `min` and `max` must be integers with min < max."
            raise serializers.ValidationError(msg)
        if high - low > MAX_RATING_SPAN:
            msg = f"A rating scale can span at most {MAX_RATING_SPAN} steps."
            raise serializers.ValidationError(msg)
    elif question_type in Question.TEXT_TYPES:
        max_length = options.get("maxLength")
        if max_length is not None and not (_is_int(max_length) and max_length > 0):
            msg = "`maxLength` must be a positive integer."
            raise serializers.ValidationError(msg)
    return options


class QuestionSerializer(serializers.ModelSerializer[Question]):
    survey = serializers.UUIDField(source="survey_id", read_only=True)
    survey_id = serializers.UUIDField(write_only=True, required=False)

    class Meta:
        model = Question
        fields = [
            "id",
            "survey",
            "survey_id",
            "text",
            "type",
            "options",
            "is_required",
            "help_text",
            "sort_order",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "sort_order", "created_at", "updated_at"]

    def validate(self, attrs):
        if self.instance is None and "survey_id" not in attrs:
            raise serializers.ValidationError({"survey_id": "This field is required."})
        if self.instance is not None:
            attrs.pop("survey_id", None)
        question_type = attrs.get("type", getattr(self.instance, "type", None))
        if "options" in attrs or "type" in attrs:
            options = attrs.get("options", getattr(self.instance, "options", {}))
            try:
                attrs["options"] = validate_question_options(question_type, options)
            except serializers.ValidationError as exc:
                raise serializers.ValidationError({"options": exc.detail}) from exc
        return attrs


class QuestionReorderSerializer(serializers.Serializer):
    survey_id = serializers.UUIDField()
    question_ids = serializers.ListField(
        child=serializers.UUIDField(),
        allow_empty=False,
    )


class SurveySerializer(serializers.ModelSerializer[Survey]):
    conference = serializers.UUIDField(source="conference_id", read_only=True)
    conference_id = serializers.UUIDField(write_only=True, required=False)
    question_count = serializers.IntegerField(read_only=True, default=0)
    response_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Survey
        fields = [
            "id",
            "conference",
            "conference_id",
            "title",
            "description",
            "status",
            "sort_order",
            "question_count",
            "response_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "status", "created_at", "updated_at"]

    def validate(self, attrs):
        if self.instance is None and "conference_id" not in attrs:
            raise serializers.ValidationError(
                {"conference_id": "This field is required."},
            )
        if self.instance is not None:
            attrs.pop("conference_id", None)
        return attrs


class SurveyDetailSerializer(SurveySerializer):
    questions = QuestionSerializer(many=True, read_only=True)

    class Meta(SurveySerializer.Meta):
        fields = [*SurveySerializer.Meta.fields, "questions"]


class SurveyActivateSerializer(serializers.Serializer):
    send_notification = serializers.BooleanField(default=True)


class AttendeeQuestionSerializer(serializers.ModelSerializer[Question]):
    class Meta:
        model = Question
        fields = [
            "id",
            "text",
            "type",
            "options",
            "is_required",
            "help_text",
            "sort_order",
        ]
        read_only_fields = fields


class AttendeeSurveySerializer(serializers.ModelSerializer[Survey]):
    questions = AttendeeQuestionSerializer(many=True, read_only=True)

    class Meta:
        model = Survey
        fields = ["id", "title", "description", "questions"]
        read_only_fields = fields


class ActiveSurveySerializer(serializers.ModelSerializer[Survey]):
    question_count = serializers.IntegerField(read_only=True, default=0)
    is_completed = serializers.BooleanField(read_only=True, default=False)

    class Meta:
        model = Survey
        fields = ["id", "title", "description", "question_count", "is_completed"]
        read_only_fields = fields
