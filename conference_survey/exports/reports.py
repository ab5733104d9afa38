"""CSV and PDF renderings of survey results."""

from __future__ import annotations

import csv
import io
import json
from typing import TYPE_CHECKING
from typing import Any
from xml.sax.saxutils import escape

from django.db.models import Count
from django.utils import timezone
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph
from reportlab.platypus import SimpleDocTemplate
from reportlab.platypus import Spacer
from reportlab.platypus import Table
from reportlab.platypus import TableStyle

from conference_survey.responses.answers import normalize_answer
from conference_survey.responses.models import SurveyResponse
from conference_survey.statistics.services import survey_statistics

if TYPE_CHECKING:
    from conference_survey.conferences.models import Conference
    from conference_survey.surveys.models import Survey

BOM = "\ufeff"
RESPONSE_HEADERS = [
    "id",
    "first_name",
    "last_name",
    "email",
    "question",
    "type",
    "answer",
    "submitted",
]
ATTENDEE_HEADERS = [
    "first_name",
    "last_name",
    "email",
    "status",
    "first_login",
    "last_login",
    "responses",
]
PDF_TOP_WORDS = 10
ACCENT = colors.HexColor("#1e1b4b")


def format_answer(answer: Any) -> str:
    """Flatten a stored answer into one CSV cell."""
    value = normalize_answer(answer)
    if isinstance(value, list):
        return "; ".join(str(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, sort_keys=True)
    if value is None:
        return ""
    return str(value)


def _iso(value) -> str:
    return value.isoformat() if value else ""


def _csv_text(headers: list[str], rows) -> str:
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return BOM + output.getvalue()


def responses_csv(survey: Survey) -> str:
    responses = (
        SurveyResponse.objects.filter(question__survey=survey)
        .select_related("attendee", "question")
        .order_by("attendee__email", "question__sort_order")
    )
    rows = (
        [
            str(r.pk),
            r.attendee.first_name,
            r.attendee.last_name,
            r.attendee.email,
            r.question.text,
            r.question.type,
            format_answer(r.answer),
            _iso(r.submitted_at),
        ]
        for r in responses.iterator()
    )
    return _csv_text(RESPONSE_HEADERS, rows)


def attendees_csv(conference: Conference) -> str:
    attendees = (
        conference.attendees.annotate(response_count=Count("responses"))
        .order_by("last_name", "first_name", "email")
    )
    rows = (
        [
            a.first_name,
            a.last_name,
            a.email,
            a.status,
            _iso(a.first_login_at),
            _iso(a.last_login_at),
            a.response_count,
        ]
        for a in attendees
    )
    return _csv_text(ATTENDEE_HEADERS, rows)


def _stats_table(stats: dict) -> Table | None:
    if stats.get("word_cloud"):
        rows = [["Word", "Count"]] + [
            [item["word"], item["count"]]
            for item in stats["word_cloud"][:PDF_TOP_WORDS]
        ]
    elif stats.get("data"):
        rows = [["Answer", "Count", "%"]] + [
            [str(item["name"]), item["value"], f"{item['percentage']}%"]
            for item in stats["data"]
        ]
    else:
        return None
    table = Table(rows, hAlign="LEFT")
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), ACCENT),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ],
        ),
    )
    return table


def survey_report_pdf(survey: Survey) -> bytes:
    """Printable results: header block, then one section per question."""
    stats = survey_statistics(survey)
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        topMargin=0.8 * inch,
        bottomMargin=0.8 * inch,
        title=f"{survey.title} results",
    )
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "ReportTitle",
        parent=styles["Title"],
        textColor=ACCENT,
        spaceAfter=18,
    )

    content = [
        Paragraph("Survey Results", title_style),
        Paragraph(f"Conference: {escape(survey.conference.name)}", styles["Normal"]),
        Paragraph(f"Survey: {escape(survey.title)}", styles["Normal"]),
        Paragraph(f"Date: {timezone.localdate():%B %d, %Y}", styles["Normal"]),
        Spacer(1, 10),
        Paragraph(
            f"Total Respondents: {stats['total_respondents']}",
            styles["Heading3"],
        ),
        Spacer(1, 14),
    ]

    for question in stats["questions"]:
        content.append(Paragraph(escape(question["question_text"]), styles["Heading4"]))
        summary = (
            f"{question['question_type']} | {question['total_responses']} responses"
        )
        if "average" in question:
            summary += f" | average {question['average']}"
        content.append(Paragraph(summary, styles["Italic"]))
        table = _stats_table(question)
        if table is not None:
            content.extend([Spacer(1, 4), table])
        content.append(Spacer(1, 12))

    doc.build(content)
    return buffer.getvalue()
