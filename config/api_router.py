from django.conf import settings
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from conference_survey.attendees.api.views import AttendeeAuthViewSet
from conference_survey.attendees.api.views import AttendeeViewSet
from conference_survey.conferences.api.views import ConferenceViewSet
from conference_survey.exports.api.views import ExportViewSet
from conference_survey.responses.api.views import ResponseViewSet
from conference_survey.statistics.api.views import StatisticsViewSet
from conference_survey.surveys.api.views import QuestionViewSet
from conference_survey.surveys.api.views import SurveyViewSet
from conference_survey.users.api.views import AdminAuthViewSet

router = DefaultRouter() if settings.DEBUG else SimpleRouter()

router.register("auth/admin", AdminAuthViewSet, basename="admin-auth")
router.register("auth/attendee", AttendeeAuthViewSet, basename="attendee-auth")
router.register("conferences", ConferenceViewSet, basename="conferences")
router.register("surveys", SurveyViewSet, basename="surveys")
router.register("questions", QuestionViewSet, basename="questions")
router.register("responses", ResponseViewSet, basename="responses")
router.register("attendees", AttendeeViewSet, basename="attendees")
router.register("statistics", StatisticsViewSet, basename="statistics")
router.register("export", ExportViewSet, basename="export")


app_name = "api"
urlpatterns = router.urls
