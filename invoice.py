# invoice.py
"""Invoices for unpaid self-employed shifts and their PDF rendering.

PDF export is a capability handed to whoever needs it (a :class:`PdfExporter`),
so the UI never has to check whether a PDF library is around; when export is
switched off it gets an :class:`UnavailablePdfExporter` instead.
"""
from __future__ import annotations

import io
import logging
import random
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Collection, Iterable, List, Optional, Protocol

from domain import DISPLAY_FORMAT, SELF_EMPLOYED, UNPAID, Shift
from utils import gbp, invoice_lines_dataframe

logger = logging.getLogger(__name__)

PAYMENT_TERMS_DAYS = 7
DEFAULT_CLIENT = "NHS Trust / Agency Name"


class PdfExportUnavailable(RuntimeError):
    pass


@dataclass
class Invoice:
    number: str
    client_name: str
    issue_date: date
    due_date: date
    lines: List[Shift] = field(default_factory=list)

    @property
    def total(self) -> float:
        return sum(s.day_salary for s in self.lines)


def invoiceable_shifts(shifts: Iterable[Shift]) -> List[Shift]:
    return [s for s in shifts if s.payment_status == UNPAID and s.tax_status == SELF_EMPLOYED]


def default_invoice_number(today: date, rng: Optional[random.Random] = None) -> str:
    rng = rng or random.Random()
    return f"INV-{today.year}-{rng.randrange(1000)}"


def build_invoice(
    shifts: Iterable[Shift],
    selected_ids: Collection[str],
    *,
    issue_date: date,
    client_name: str = DEFAULT_CLIENT,
    due_date: Optional[date] = None,
    number: Optional[str] = None,
) -> Invoice:
    """Selected shifts that are still invoiceable, in collection order."""
    lines = [s for s in invoiceable_shifts(shifts) if s.id in selected_ids]
    return Invoice(
        number=number or default_invoice_number(issue_date),
        client_name=client_name.strip() or DEFAULT_CLIENT,
        issue_date=issue_date,
        due_date=due_date or issue_date + timedelta(days=PAYMENT_TERMS_DAYS),
        lines=lines,
    )


def invoice_filename(invoice: Invoice) -> str:
    return f"{invoice.number}.pdf"


class PdfExporter(Protocol):
    @property
    def available(self) -> bool: ...

    def export(self, invoice: Invoice) -> bytes: ...


class UnavailablePdfExporter:
    def __init__(self, reason: str = "PDF export is disabled."):
        self.reason = reason

    @property
    def available(self) -> bool:
        return False

    def export(self, invoice: Invoice) -> bytes:
        raise PdfExportUnavailable(self.reason)


class ReportlabPdfExporter:
    """A4 portrait invoice: title, parties, line table, total box, page border."""

    @property
    def available(self) -> bool:
        return True

    def export(self, invoice: Invoice) -> bytes:
        from reportlab.lib import colors
        from reportlab.lib.enums import TA_RIGHT
        from reportlab.lib.pagesizes import A4
        from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
        from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

        buf = io.BytesIO()
        doc = SimpleDocTemplate(buf, pagesize=A4, topMargin=36, bottomMargin=36, leftMargin=36, rightMargin=36)
        styles = getSampleStyleSheet()
        right_style = ParagraphStyle(name="Right", parent=styles["Normal"], alignment=TA_RIGHT)
        total_style = ParagraphStyle(
            name="Total", parent=styles["Normal"], alignment=TA_RIGHT,
            fontName="Helvetica-Bold", fontSize=12, leading=15,
        )

        story = [Paragraph("INVOICE", styles["Title"]), Spacer(1, 8)]
        parties = Table(
            [[
                Paragraph(f"<b>Bill to:</b><br/>{_escape(invoice.client_name)}", styles["Normal"]),
                Paragraph(
                    f"Invoice No: <b>{_escape(invoice.number)}</b><br/>"
                    f"Invoice Date: {invoice.issue_date.strftime(DISPLAY_FORMAT)}<br/>"
                    f"Due Date: {invoice.due_date.strftime(DISPLAY_FORMAT)}",
                    right_style,
                ),
            ]],
            colWidths=[doc.width / 2, doc.width / 2],
        )
        parties.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
        story += [parties, Spacer(1, 16)]

        df = invoice_lines_dataframe(invoice.lines)
        if df.empty:
            story.append(Paragraph("No shifts selected.", styles["Normal"]))
        else:
            data = [list(df.columns)] + df.values.tolist()
            table = Table(data, repeatRows=1, hAlign="CENTER",
                          colWidths=[70, doc.width - 270, 50, 70, 80])
            table.setStyle(TableStyle([
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#F5F5F7")),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 10),
                ("ALIGN", (2, 0), (-1, -1), "RIGHT"),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#E0E0E0")),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.whitesmoke, colors.white]),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ]))
            story.append(table)

        story += [Spacer(1, 12)]
        total_box = Table(
            [[Paragraph(f"Subtotal: {gbp(invoice.total)}", right_style)],
             [Paragraph(f"Total due: {gbp(invoice.total)}", total_style)]],
            colWidths=[min(260, 0.5 * doc.width)], hAlign="RIGHT",
        )
        total_box.setStyle(TableStyle([
            ("BOX", (0, 0), (-1, -1), 0.6, colors.HexColor("#C7CCD6")),
            ("LEFTPADDING", (0, 0), (-1, -1), 6),
            ("RIGHTPADDING", (0, 0), (-1, -1), 6),
            ("TOPPADDING", (0, 0), (-1, -1), 4),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
        ]))
        story += [total_box, Spacer(1, 18)]
        story.append(Paragraph(
            f"Please make payment by {invoice.due_date.strftime(DISPLAY_FORMAT)}. "
            "Thank you for your business.",
            styles["Normal"],
        ))

        def draw_page_border(canvas, doc_obj):
            canvas.saveState()
            w, h = doc_obj.pagesize
            canvas.setStrokeColor(colors.HexColor("#C7CCD6"))
            canvas.setLineWidth(0.8)
            margin = 12
            canvas.rect(margin, margin, w - 2 * margin, h - 2 * margin)
            canvas.restoreState()

        doc.build(story, onFirstPage=draw_page_border, onLaterPages=draw_page_border)
        logger.info("Rendered invoice %s with %d line(s)", invoice.number, len(invoice.lines))
        return buf.getvalue()


def _escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def exporter_for(enabled: bool) -> PdfExporter:
    return ReportlabPdfExporter() if enabled else UnavailablePdfExporter()


__all__ = [
    "Invoice",
    "PdfExporter",
    "ReportlabPdfExporter",
    "UnavailablePdfExporter",
    "PdfExportUnavailable",
    "invoiceable_shifts",
    "default_invoice_number",
    "build_invoice",
    "invoice_filename",
    "exporter_for",
]
