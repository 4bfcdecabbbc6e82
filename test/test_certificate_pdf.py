"""Tests for participation certificate rendering."""

import sys
import tempfile
import unittest
from datetime import date, datetime, timezone
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from ConfDesk.core.errors import OutputError
from ConfDesk.core.models import AuthorCertificate
from ConfDesk.prefs import Preferences
from ConfDesk.renderers.certificate import (
    CertificateFileWriter,
    CertificatePdfRenderer,
    certificate_filename,
    certificate_lines,
)


def _prefs(locale: str = "en") -> Preferences:
    return Preferences(
        theme="system",
        locale=locale,
        timezone="UTC",
        page_size=8,
        email_notifications=True,
        compact_mode=False,
    )


def _certificate(**overrides) -> AuthorCertificate:
    values = dict(
        id="cert-1",
        author_id="author-1",
        conference_id="c1",
        article_id="a1",
        certificate_number="CERT-2025-0007",
        snapshot_author_name="Zoë Müller",
        snapshot_conference_title="Data Systems Forum 2025",
        snapshot_conference_start_date=date(2025, 5, 12),
        snapshot_conference_end_date=date(2025, 5, 14),
        snapshot_article_title="Streaming joins",
        snapshot_article_status="accepted",
        issued_at=datetime(2025, 6, 1, 8, 0, tzinfo=timezone.utc),
    )
    values.update(overrides)
    return AuthorCertificate(**values)


class TestCertificateLayout(unittest.TestCase):
    def test_filename_uses_conference_and_number(self) -> None:
        self.assertEqual(
            certificate_filename(_certificate()),
            "certificate_data_systems_forum_2025_CERT-2025-0007.pdf",
        )

    def test_lines_carry_snapshot_values(self) -> None:
        texts = [line.text for line in certificate_lines(_certificate(), _prefs())]
        self.assertEqual(texts[0], "Certificate of participation")
        self.assertIn("Zoë Müller", texts)
        self.assertIn('for participation in the conference "Data Systems Forum 2025"', texts)
        self.assertIn("Article status: Accepted", texts)
        self.assertIn("Conference period: 05/12/2025 - 05/14/2025", texts)
        self.assertIn("Certificate No. CERT-2025-0007", texts)
        self.assertIn("Issued on 06/01/2025", texts)

    def test_ukrainian_labels(self) -> None:
        texts = [line.text for line in certificate_lines(_certificate(), _prefs("uk"))]
        self.assertEqual(texts[0], "Сертифікат учасника")
        self.assertIn("Період проведення: 12.05.2025 - 14.05.2025", texts)


class TestCertificatePdf(unittest.TestCase):
    def test_renders_pdf_bytes_with_core_font(self) -> None:
        with self.assertLogs("ConfDesk", level="WARNING"):
            content = CertificatePdfRenderer().render(_certificate(snapshot_author_name="Олена"), _prefs())
        self.assertTrue(content.startswith(b"%PDF"))

    def test_latin_text_renders_without_warning(self) -> None:
        content = CertificatePdfRenderer().render(_certificate(), _prefs())
        self.assertTrue(content.startswith(b"%PDF"))
        self.assertTrue(content.rstrip().endswith(b"%%EOF"))

    def test_missing_font_file(self) -> None:
        renderer = CertificatePdfRenderer("/nonexistent/font.ttf")
        with self.assertRaises(OutputError):
            renderer.render(_certificate(), _prefs())

    def test_file_writer(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = CertificateFileWriter(tmp).write(_certificate(), _prefs())
            self.assertEqual(path.parent, Path(tmp) / "certificates")
            self.assertTrue(path.read_bytes().startswith(b"%PDF"))


if __name__ == "__main__":
    unittest.main()
