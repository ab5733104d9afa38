import re

import pytest
from rest_framework.exceptions import NotFound

from conference_survey.conferences.qr import qr_data_url
from conference_survey.conferences.qr import qr_png_bytes
from conference_survey.conferences.qr import qr_svg_bytes
from conference_survey.conferences.services import generate_url_code
from conference_survey.conferences.services import get_conference_by_code
from conference_survey.conferences.services import get_owned_conference

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


@pytest.mark.parametrize(
    ("name", "prefix"),
    [
        ("Tech Summit 2025!", "TECH-SUMMIT-2025-"),
        ("Café & Code", "CAF-CODE-"),
    ],
)
def test_generate_url_code(name, prefix):
    code = generate_url_code(name)
    assert code.startswith(prefix)
    assert re.fullmatch(r"[A-Z0-9]{4}", code[len(prefix) :])


def test_generate_url_code_truncates_long_names():
    code = generate_url_code("x" * 100)
    assert code == code.upper()
    assert len(code) == 40 + 5


def test_qr_renderers():
    url = "http://localhost:3000/c/TECH-SUMMIT"
    assert qr_png_bytes(url).startswith(PNG_SIGNATURE)
    assert b"<svg" in qr_svg_bytes(url)
    assert qr_data_url(url).startswith("data:image/png;base64,iVBOR")


@pytest.mark.django_db
class TestLookups:
    def test_by_code_ignores_case_and_whitespace(self, conference):
        assert get_conference_by_code(" tech-summit-2026-ab12 ") == conference

    def test_by_code_unknown(self, db):
        with pytest.raises(NotFound):
            get_conference_by_code("")

    def test_owned_conference_hides_other_admins(self, conference, other_organiser):
        with pytest.raises(NotFound):
            get_owned_conference(other_organiser, conference.pk)

    def test_owned_conference_with_garbage_id(self, organiser):
        with pytest.raises(NotFound):
            get_owned_conference(organiser, "not-a-uuid")
