"""A4 participation certificate rendered to PDF with fpdf2."""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from pathlib import Path

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from ConfDesk.core.errors import OutputError
from ConfDesk.core.models import AuthorCertificate
from ConfDesk.prefs.formatting import format_date
from ConfDesk.prefs.store import Preferences
from ConfDesk.renderers.labels import label, status_label
from ConfDesk.renderers.template_utils import filename_segment
from ConfDesk.utils.log import log

_CORE_FONT = "Helvetica"
_CUSTOM_FONT = "CertificateFont"
_TEXT_RGB = (15, 23, 42)
_SUBTITLE_RGB = (51, 65, 85)


def certificate_filename(certificate: AuthorCertificate) -> str:
    segment = filename_segment(certificate.snapshot_conference_title, "conference")
    return f"certificate_{segment}_{certificate.certificate_number}.pdf"


@dataclass(frozen=True, slots=True)
class CertificateLine:
    text: str
    size: float
    bold: bool = False
    space_before: float = 0.0
    color: tuple[int, int, int] = _TEXT_RGB


def certificate_lines(certificate: AuthorCertificate, prefs: Preferences) -> list[CertificateLine]:
    """Lay out the certificate text, top to bottom."""
    locale = prefs.locale
    period = (
        f"{format_date(certificate.snapshot_conference_start_date, prefs)}"
        f" - {format_date(certificate.snapshot_conference_end_date, prefs)}"
    )
    return [
        CertificateLine(label(locale, "certificate.title"), 24, bold=True),
        CertificateLine(label(locale, "certificate.subtitle"), 14, space_before=10, color=_SUBTITLE_RGB),
        CertificateLine(certificate.snapshot_author_name, 20, bold=True, space_before=36),
        CertificateLine(
            label(locale, "certificate.body", conference=certificate.snapshot_conference_title),
            12,
            space_before=22,
        ),
        CertificateLine(
            label(locale, "certificate.article", title=certificate.snapshot_article_title),
            12,
            space_before=8,
        ),
        CertificateLine(
            label(
                locale,
                "certificate.status",
                status=status_label(locale, certificate.snapshot_article_status),
            ),
            12,
            space_before=8,
        ),
        CertificateLine(label(locale, "certificate.period", period=period), 12, space_before=8),
        CertificateLine(
            label(locale, "certificate.number", number=certificate.certificate_number),
            12,
            space_before=30,
        ),
        CertificateLine(
            label(locale, "certificate.issued_at", date=format_date(certificate.issued_at, prefs)),
            12,
            space_before=8,
        ),
    ]


def _latin1(text: str) -> str:
    """Fold text into what the built-in PDF fonts can encode.

    Latin-1 characters pass through; others lose their accents or become ``?``.
    """
    chars = []
    for ch in text:
        if ord(ch) < 256:
            chars.append(ch)
            continue
        base = "".join(
            c for c in unicodedata.normalize("NFKD", ch) if not unicodedata.combining(c)
        )
        chars.append(base.encode("latin-1", "replace").decode("latin-1") or "?")
    return "".join(chars)


class CertificatePdfRenderer:
    """Render certificates as A4 PDFs.

    Without a TrueType font only Latin-1 text survives; configure
    ``output.certificate.font`` for Cyrillic names and labels.
    """

    def __init__(self, font_path: str | None = None) -> None:
        self.font_path = font_path

    def render(self, certificate: AuthorCertificate, prefs: Preferences) -> bytes:
        pdf = FPDF(orientation="P", unit="pt", format="A4")
        pdf.set_margins(48, 60, 48)
        pdf.set_auto_page_break(True, margin=60)
        family = self._register_font(pdf)
        pdf.add_page()

        lines = certificate_lines(certificate, prefs)
        if family == _CORE_FONT and any(_latin1(line.text) != line.text for line in lines):
            log.warning("Certificate text needs a Unicode font; set output.certificate.font")

        for line in lines:
            if line.space_before:
                pdf.ln(line.space_before)
            pdf.set_font(family, "B" if line.bold else "", line.size)
            pdf.set_text_color(*line.color)
            text = line.text if family != _CORE_FONT else _latin1(line.text)
            pdf.multi_cell(0, line.size * 1.4, text, align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        return bytes(pdf.output())

    def _register_font(self, pdf: FPDF) -> str:
        if not self.font_path:
            return _CORE_FONT
        if not Path(self.font_path).exists():
            raise OutputError(f"Certificate font not found: {self.font_path}")
        pdf.add_font(_CUSTOM_FONT, "", self.font_path)
        pdf.add_font(_CUSTOM_FONT, "B", self.font_path)
        return _CUSTOM_FONT


class CertificateFileWriter:
    """Write certificate PDFs into ``<base_dir>/certificates``."""

    def __init__(self, base_dir: str, font_path: str | None = None) -> None:
        self.output_dir = Path(base_dir) / "certificates"
        self.renderer = CertificatePdfRenderer(font_path)

    def write(self, certificate: AuthorCertificate, prefs: Preferences) -> Path:
        content = self.renderer.render(certificate, prefs)
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OutputError(f"Failed to create output directory: {self.output_dir}") from exc
        output_path = self.output_dir / certificate_filename(certificate)
        try:
            output_path.write_bytes(content)
        except OSError as exc:
            raise OutputError(f"Failed to write certificate: {output_path}") from exc
        log.info("Certificate saved to %s", output_path)
        return output_path
