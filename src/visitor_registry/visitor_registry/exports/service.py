from __future__ import annotations

import csv
import io
import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Sequence

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..common.datetime_utils import now_local
from ..core.constants import EXPORT_DATE_FORMAT
from ..core.exceptions import ExportError
from ..visitors.model import Visitor

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ["name", "cin", "phone", "reason", "status", "date"]
PDF_HEADERS = ["Nom", "CIN", "Téléphone", "Motif", "Statut", "Date"]

# Unicode TTF candidates; the built-in Helvetica only covers Latin-1.
PDF_FONT_CANDIDATES = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/local/share/fonts/DejaVuSans.ttf",
    "C:/Windows/Fonts/arial.ttf",
)
FALLBACK_FONT = "Helvetica"


def register_pdf_font(font_path: Optional[str] = None) -> str:
    """Register a TrueType font with reportlab and return its name.

    An explicit ``font_path`` must exist. Without one the first installed
    candidate is used, else the built-in Helvetica.
    """
    candidates = [font_path] if font_path else list(PDF_FONT_CANDIDATES)
    for path in candidates:
        if not Path(path).is_file():
            continue
        name = f"VR-{Path(path).stem}"
        if name not in pdfmetrics.getRegisteredFontNames():
            try:
                pdfmetrics.registerFont(TTFont(name, path))
            except TTFError as exc:
                raise ExportError(f"Police PDF illisible : {path}") from exc
        return name

    if font_path:
        raise ExportError(f"Police PDF introuvable : {font_path}")
    logger.warning("No Unicode TTF font found; PDF export falls back to %s", FALLBACK_FONT)
    return FALLBACK_FONT


def _export_row(v: Visitor) -> dict:
    return {
        "name": v.name,
        "cin": v.cin,
        "phone": v.phone,
        "reason": v.reason,
        "status": v.status.value,
        "date": v.created_at.strftime(EXPORT_DATE_FORMAT),
    }


class VisitorExportService:
    """Render a visitor list snapshot as a downloadable document.

    Pure formatting: the caller decides which visitors (usually a filtered
    history) get exported. A failure aborts the whole document.
    """

    def __init__(self, *, font_path: Optional[str] = None):
        self.font_name = register_pdf_font(font_path)

    def to_csv(self, visitors: Iterable[Visitor]) -> bytes:
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=EXPORT_COLUMNS, lineterminator="\r\n")
        writer.writeheader()
        for v in visitors:
            writer.writerow(_export_row(v))

        # BOM so spreadsheet tools detect UTF-8 (accents in names).
        return out.getvalue().encode("utf-8-sig")

    def to_pdf(
        self,
        visitors: Sequence[Visitor],
        *,
        title: str = "Historique des visiteurs",
        generated_at: Optional[datetime] = None,
    ) -> bytes:
        generated_at = generated_at or now_local()
        buf = io.BytesIO()
        try:
            doc = SimpleDocTemplate(
                buf,
                pagesize=landscape(A4),
                leftMargin=12 * mm,
                rightMargin=12 * mm,
                topMargin=12 * mm,
                bottomMargin=12 * mm,
                title=title,
            )
            styles = getSampleStyleSheet()
            cell = ParagraphStyle("VisitorCell", parent=styles["BodyText"], fontName=self.font_name, fontSize=9)
            heading = ParagraphStyle("VisitorTitle", parent=styles["Title"], fontName=self.font_name)
            normal = ParagraphStyle("VisitorNormal", parent=styles["Normal"], fontName=self.font_name)
            header_font = "Helvetica-Bold" if self.font_name == FALLBACK_FONT else self.font_name

            data = [PDF_HEADERS]
            for v in visitors:
                row = _export_row(v)
                data.append(
                    [
                        Paragraph(_escape(row["name"]), cell),
                        row["cin"],
                        row["phone"],
                        Paragraph(_escape(row["reason"]), cell),
                        v.status.label,
                        row["date"],
                    ]
                )

            table = Table(
                data,
                repeatRows=1,
                colWidths=[55 * mm, 30 * mm, 32 * mm, 95 * mm, 24 * mm, 34 * mm],
            )
            table.setStyle(
                TableStyle(
                    [
                        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#1f3b57")),
                        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                        ("FONTNAME", (0, 0), (-1, -1), self.font_name),
                        ("FONTNAME", (0, 0), (-1, 0), header_font),
                        ("FONTSIZE", (0, 0), (-1, -1), 9),
                        ("VALIGN", (0, 0), (-1, -1), "TOP"),
                        ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
                        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f2f5f8")]),
                    ]
                )
            )

            story = [
                Paragraph(_escape(title), heading),
                Paragraph(
                    f"Généré le {generated_at.strftime(EXPORT_DATE_FORMAT)} ({len(visitors)} visiteur(s))",
                    normal,
                ),
                Spacer(1, 6 * mm),
                table,
            ]
            doc.build(story)
        except Exception as exc:
            logger.exception("PDF export failed")
            raise ExportError("Échec de la génération du PDF") from exc

        return buf.getvalue()


def _escape(text: str) -> str:
    # Paragraph parses a mini XML markup.
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
