import django_filters

from conference_survey.attendees.models import Attendee


class AttendeeFilter(django_filters.FilterSet):
    # Unknown status values fail validation and are dropped, not applied.
    status = django_filters.ChoiceFilter(choices=Attendee.Status.choices)
    search = django_filters.CharFilter(field_name="email", lookup_expr="icontains")

    class Meta:
        model = Attendee
        fields = ["status", "search"]
