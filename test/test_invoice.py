"""Tests for invoice selection and PDF export."""

import random
from datetime import date

import pytest

from domain import PAYE, PENDING, RECEIVED, UNPAID
from invoice import (
    DEFAULT_CLIENT,
    PdfExportUnavailable,
    ReportlabPdfExporter,
    UnavailablePdfExporter,
    build_invoice,
    default_invoice_number,
    exporter_for,
    invoice_filename,
    invoiceable_shifts,
)


@pytest.fixture
def shifts(shift_factory):
    return [
        shift_factory(id="a", day_salary=400.0, payment_status=UNPAID),
        shift_factory(id="b", day_salary=300.0, payment_status=UNPAID, tax_status=PAYE),
        shift_factory(id="c", day_salary=200.0, payment_status=PENDING),
        shift_factory(id="d", day_salary=100.0, payment_status=RECEIVED, amount_received=100.0),
        shift_factory(id="e", day_salary=250.0, payment_status=UNPAID, agency="R&D <Locums>"),
    ]


def test_only_unpaid_self_employed_shifts_are_invoiceable(shifts):
    assert [s.id for s in invoiceable_shifts(shifts)] == ["a", "e"]


def test_build_invoice_selects_and_totals(shifts):
    invoice = build_invoice(shifts, {"e", "a", "b"}, issue_date=date(2024, 6, 1), number="INV-2024-7")
    assert [s.id for s in invoice.lines] == ["a", "e"]
    assert invoice.total == 650.0
    assert invoice.due_date == date(2024, 6, 8)
    assert invoice.client_name == DEFAULT_CLIENT
    assert invoice_filename(invoice) == "INV-2024-7.pdf"


def test_build_invoice_with_nothing_selected(shifts):
    invoice = build_invoice(shifts, [], issue_date=date(2024, 6, 1), client_name="  ")
    assert invoice.lines == []
    assert invoice.total == 0
    assert invoice.client_name == DEFAULT_CLIENT
    assert invoice.number.startswith("INV-2024-")


def test_default_invoice_number_is_seedable():
    first = default_invoice_number(date(2025, 1, 2), random.Random(3))
    again = default_invoice_number(date(2025, 1, 2), random.Random(3))
    assert first == again
    prefix, year, serial = first.split("-")
    assert (prefix, year) == ("INV", "2025")
    assert 0 <= int(serial) < 1000


def test_reportlab_exporter_renders_pdf(shifts):
    invoice = build_invoice(
        shifts, {"a", "e"}, issue_date=date(2024, 6, 1), client_name="St Mary's & Co", number="INV-2024-1"
    )
    exporter = ReportlabPdfExporter()
    assert exporter.available
    pdf = exporter.export(invoice)
    assert pdf.startswith(b"%PDF")


def test_unavailable_exporter_raises():
    exporter = UnavailablePdfExporter("switched off")
    assert not exporter.available
    with pytest.raises(PdfExportUnavailable, match="switched off"):
        exporter.export(build_invoice([], [], issue_date=date(2024, 1, 1)))


def test_exporter_for():
    assert isinstance(exporter_for(True), ReportlabPdfExporter)
    assert isinstance(exporter_for(False), UnavailablePdfExporter)
