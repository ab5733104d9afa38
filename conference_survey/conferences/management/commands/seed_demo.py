from datetime import date

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils.translation import gettext as _

from conference_survey.conferences.models import Conference
from conference_survey.conferences.services import refresh_qr_code
from conference_survey.surveys.models import Question
from conference_survey.surveys.models import Survey

DEMO_ADMIN_EMAIL = "admin@example.com"
DEMO_ADMIN_PASSWORD = "admin12345"  # noqa: S105
DEMO_CONFERENCE_CODE = "PMI-SUMMIT-2026"

SURVEYS = [
    {
        "title": "Attendee Demographics",
        "description": "Help us understand our audience better.",
        "status": Survey.Status.INACTIVE,
        "sort_order": 0,
        "questions": [
            {
                "text": "What is your current role?",
                "type": Question.Type.SINGLE_CHOICE,
                "options": {
                    "choices": [
                        "Project Manager",
                        "Program Manager",
                        "Portfolio Manager",
                        "PMO Director",
                        "Consultant",
                        "Other",
                    ],
                },
            },
            {
                "text": "What certifications do you hold?",
                "type": Question.Type.MULTI_CHOICE,
                "options": {
                    "choices": ["PMP", "CAPM", "PMI-ACP", "PRINCE2", "None yet"],
                },
                "is_required": False,
            },
        ],
    },
    {
        "title": "Day 1 Experience Survey",
        "description": "Share your feedback on today's sessions.",
        "status": Survey.Status.ACTIVE,
        "sort_order": 1,
        "questions": [
            {
                "text": "How would you rate the overall conference experience so far?",
                "type": Question.Type.RATING,
                "options": {"min": 1, "max": 5},
            },
            {
                "text": "Which sessions did you attend today?",
                "type": Question.Type.MULTI_CHOICE,
                "options": {
                    "choices": [
                        "Keynote: Future of PM",
                        "Workshop: Agile at Scale",
                        "Panel: AI in Projects",
                        "Breakout: Risk Management",
                    ],
                },
            },
            {
                "text": "How many years of project management experience do you have?",
                "type": Question.Type.NUMERIC_RANGE,
                "options": {
                    "ranges": ["0-2 years", "3-5 years", "6-10 years", "10+ years"],
                },
            },
            {
                "text": "What topics would you like to see covered in future sessions?",
                "type": Question.Type.TEXT_LONG,
                "options": {"maxLength": 500},
                "is_required": False,
            },
        ],
    },
]


class Command(BaseCommand):
    help = _("Create a demo admin, conference, surveys and questions")

    def add_arguments(self, parser):
        parser.add_argument("--email", default=DEMO_ADMIN_EMAIL)
        parser.add_argument("--password", default=DEMO_ADMIN_PASSWORD)
        parser.add_argument("--code", default=DEMO_CONFERENCE_CODE)

    @transaction.atomic
    def handle(self, *args, **options):
        admin = self._admin(options["email"], options["password"])
        conference, created = Conference.objects.get_or_create(
            url_code=options["code"],
            defaults={
                "admin": admin,
                "name": "PMI Global Summit 2026",
                "description": "Annual project management conference.",
                "start_date": date(2026, 3, 15),
                "end_date": date(2026, 3, 18),
                "status": Conference.Status.ACTIVE,
            },
        )
        if created or not conference.qr_code_url:
            refresh_qr_code(conference)

        for spec in SURVEYS:
            self._survey(conference, spec)

        self.stdout.write(
            self.style.SUCCESS(
                f"Demo data ready: {admin.email} / {conference.conference_url}",
            ),
        )

    def _admin(self, email, password):
        user_model = get_user_model()
        admin, created = user_model.objects.get_or_create(
            email=email.lower(),
            defaults={"username": email.lower(), "name": "Conference Admin"},
        )
        if created:
            admin.set_password(password)
            admin.save(update_fields=["password"])
            self.stdout.write(f"Created admin {admin.email}")
        return admin

    def _survey(self, conference, spec):
        questions = spec["questions"]
        fields = {k: v for k, v in spec.items() if k not in ("title", "questions")}
        if fields["status"] == Survey.Status.ACTIVE:
            # keep at most one active survey per conference
            other_active = conference.surveys.filter(status=Survey.Status.ACTIVE)
            if other_active.exclude(title=spec["title"]).exists():
                fields["status"] = Survey.Status.INACTIVE
        survey, _created = Survey.objects.get_or_create(
            conference=conference,
            title=spec["title"],
            defaults=fields,
        )
        for index, question in enumerate(questions):
            Question.objects.get_or_create(
                survey=survey,
                text=question["text"],
                defaults={
                    "type": question["type"],
                    "options": question["options"],
                    "is_required": question.get("is_required", True),
                    "sort_order": index,
                },
            )
