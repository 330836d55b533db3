# app.py
# -----------------------------------------------
# 🩺 Locum shift ledger (Streamlit)
# -----------------------------------------------
# Requires: streamlit, pandas, httpx, reportlab
# Shifts live in a Google Sheet behind an Apps Script web app (SHIFTS_API_URL).
# Every save/delete is followed by a full reload from the sheet.

import logging
from dataclasses import replace
from datetime import date, timedelta

import streamlit as st

from api_client import ResilientClient
from config import AppConfig, load_config
from domain import PAYMENT_STATUSES, RECEIVED, TAX_STATUSES, Shift, apply_form, new_shift
from invoice import (
    DEFAULT_CLIENT,
    PAYMENT_TERMS_DAYS,
    PdfExportUnavailable,
    build_invoice,
    default_invoice_number,
    exporter_for,
    invoice_filename,
    invoiceable_shifts,
)
from repository import ShiftRepository
from services import (
    aggregate_metrics,
    category_options,
    chart_points,
    chart_y_ticks,
    compute_salary,
    monthly_received_trend,
    top_agencies,
    CHART_HEIGHT,
    CHART_PADDING,
    CHART_WIDTH,
)
from store import ShiftStore
from utils import gbp, shifts_to_dataframe

CONFIG: AppConfig = load_config()
logging.basicConfig(level=CONFIG.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

TITULO_APP = "Locum Shift Ledger"


@st.cache_resource
def get_client(max_attempts: int, timeout_s: float) -> ResilientClient:
    return ResilientClient(max_attempts=max_attempts, timeout=timeout_s)


def get_store() -> ShiftStore:
    if "store" not in st.session_state:
        repo = ShiftRepository(get_client(CONFIG.max_attempts, CONFIG.timeout_s), CONFIG)
        store = ShiftStore(repo, CONFIG.timezone)
        with st.spinner("Connecting to Google Sheets..."):
            store.fetch_all()
        st.session_state["store"] = store
    return st.session_state["store"]


# =========================
# Page config + header
# =========================
st.set_page_config(page_title=TITULO_APP, page_icon="🩺", layout="wide")

st.markdown("""
<style>
.app-header {
  font-weight: 600;
  font-size: 1.5rem;
  line-height: 1.2;
  margin: 0.2rem 0 0.6rem 0;
}
</style>
""", unsafe_allow_html=True)
st.markdown(f'<div class="app-header">🩺 {TITULO_APP}</div>', unsafe_allow_html=True)

store = get_store()
hoy = CONFIG.today()
pdf_exporter = exporter_for(CONFIG.pdf_enabled)


# =========================
# State helpers
# =========================
def _flash_success_if_any():
    msg = st.session_state.pop("_flash_success", None)
    if msg:
        st.success(msg)


def _show_store_error():
    message = store.take_error()
    if message:
        st.error(message)


def _form_shift() -> Shift:
    if "form_shift" not in st.session_state:
        st.session_state["form_shift"] = new_shift(hoy)
    return st.session_state["form_shift"]


def _start_edit(shift: Shift):
    st.session_state["form_shift"] = replace(shift)
    st.session_state["_goto_page"] = "Log shift"


# =========================
# 📈 Trend chart (SVG)
# =========================
def trend_svg(months: list[str], amounts: list[float]) -> str:
    w, h, pad = CHART_WIDTH, CHART_HEIGHT, CHART_PADDING
    points = chart_points(amounts)
    parts = [
        f'<svg viewBox="0 0 {w} {h}" width="100%" height="{h}" style="background:#fff;border-radius:8px">',
        f'<line x1="{pad}" y1="{h - pad}" x2="{pad}" y2="{pad}" stroke="#E5E7EB"/>',
        f'<line x1="{pad}" y1="{h - pad}" x2="{w - pad}" y2="{h - pad}" stroke="#E5E7EB"/>',
    ]
    for y, value in chart_y_ticks(amounts):
        parts.append(f'<line x1="{pad}" y1="{y}" x2="{w - pad}" y2="{y}" stroke="#F3F4F6" stroke-dasharray="4 4"/>')
        parts.append(f'<text x="{pad - 5}" y="{y + 5}" text-anchor="end" font-size="11" fill="#6B7280">£{value:.0f}</text>')
    for (x, _), month in zip(points, months):
        parts.append(f'<text x="{x}" y="{h - pad + 20}" text-anchor="middle" font-size="11" fill="#6B7280">{month[2:]}</text>')
    path = " ".join(f"{'M' if i == 0 else 'L'} {x} {y}" for i, (x, y) in enumerate(points))
    parts.append(f'<path d="{path}" fill="none" stroke="#3B82F6" stroke-width="3"/>')
    for x, y in points:
        parts.append(f'<circle cx="{x}" cy="{y}" r="4" fill="#1D4ED8"/>')
    parts.append("</svg>")
    return "".join(parts)


# =========================
# 📊 Dashboard
# =========================
def page_dashboard():
    metrics = aggregate_metrics(store.shifts)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total Received", gbp(metrics.total_received))
    c2.metric("Total Outstanding Salary", gbp(metrics.total_outstanding))
    c3.metric("Total Shifts Logged", metrics.total_shifts)
    c4.metric("Total Hours", f"{metrics.total_hours:g}")

    left, right = st.columns(2)
    with left:
        st.subheader("Salary Breakdown by Tax Status")
        if not metrics.by_tax_status:
            st.caption("No shifts yet.")
        for status, amount in metrics.by_tax_status.items():
            st.markdown(f"- **{status} Shifts Salary**: {gbp(amount)}")
    with right:
        st.subheader("Top Agencies by Salary")
        for agency in top_agencies(metrics):
            st.markdown(f"- **{agency.name}** ({agency.shift_count} shifts): {gbp(agency.total_salary)}")

    st.subheader("📈 Monthly Received Payments Trend")
    trend = monthly_received_trend(store.shifts)
    if not trend:
        st.info("No received payments data available for trend analysis.")
    else:
        svg = trend_svg([m.month for m in trend], [m.amount for m in trend])
        st.markdown(svg, unsafe_allow_html=True)


# =========================
# ➕ Log / edit shift
# =========================
def page_log_shift():
    base = _form_shift()
    editing = store.find(base.id) is not None
    st.subheader("✏️ Edit shift" if editing else "➕ Log new locum shift")

    c1, c2 = st.columns(2)
    fecha = c1.date_input("Date", value=date.fromisoformat(base.date) if base.date else None)
    if not base.date:
        c1.caption(f"Stored date '{base.display_date}' could not be read; it is kept unless you pick one.")
    agency = c2.text_input("Agency", value=base.agency)
    c1, c2 = st.columns(2)
    location = c1.text_input("Location", value=base.location)
    hours = c2.number_input("Hours", min_value=0.0, step=0.5, value=float(base.hours))
    c1, c2, c3 = st.columns(3)
    rate = c1.number_input("Rate (£/hr)", min_value=0.0, step=0.01, value=float(base.rate))
    c2.text_input("Day Salary (£)", value=f"{compute_salary(hours, rate):.2f}", disabled=True)
    tax_opts = category_options(TAX_STATUSES, base.tax_status)
    tax_status = c3.selectbox("Tax Status", tax_opts, index=tax_opts.index(base.tax_status))

    c1, c2, c3 = st.columns(3)
    pay_opts = category_options(PAYMENT_STATUSES, base.payment_status)
    payment_status = c1.selectbox("Payment Status", pay_opts, index=pay_opts.index(base.payment_status))
    is_received = payment_status == RECEIVED
    amount_received = c2.number_input(
        "Amount Received (£)", min_value=0.0, step=0.01,
        value=float(base.amount_received), disabled=not is_received,
    )
    received_raw = bool(base.received_date) and not _iso(base.received_date)
    received_on = c3.date_input(
        "Received Date",
        value=None if received_raw else (date.fromisoformat(base.received_date) if base.received_date else hoy),
        disabled=not is_received,
    )
    if received_raw:
        c3.caption(f"Stored as '{base.received_date}'; kept unless you pick a date.")

    if st.button("Save Shift", use_container_width=True, type="primary"):
        shift = apply_form(
            base,
            picked_date=fecha,
            agency=agency,
            location=location,
            hours=hours,
            rate=rate,
            tax_status=tax_status,
            payment_status=payment_status,
            amount_received=amount_received,
            picked_received=received_on,
        )
        with st.spinner("Saving..."):
            ok = store.save(shift)
        if ok:
            st.session_state.pop("form_shift", None)
            st.session_state["_flash_success"] = f"Saved shift on {shift.display_date}: {gbp(shift.day_salary)}"
            st.session_state["_goto_page"] = "Dashboard"
            st.rerun()
        else:
            _show_store_error()

    if editing and st.button("Cancel edit", use_container_width=True):
        st.session_state.pop("form_shift", None)
        st.rerun()


def _iso(value: str) -> bool:
    try:
        date.fromisoformat(value)
        return True
    except ValueError:
        return False


# =========================
# 🗓️ Shifts list
# =========================
def page_shifts():
    st.subheader("🗓️ Shifts")
    df = shifts_to_dataframe(store.shifts)
    if df.empty:
        st.info("No shifts recorded yet.")
        return
    st.dataframe(df.drop(columns=["ID"]), use_container_width=True, hide_index=True)

    labels = {s.id: f"{s.display_date} · {s.agency} · {gbp(s.day_salary)}" for s in store.shifts}
    chosen = st.selectbox("Shift", list(labels), format_func=labels.get)
    c1, c2 = st.columns(2)
    if c1.button("Edit", use_container_width=True):
        _start_edit(store.find(chosen))
        st.rerun()
    confirmed = c2.checkbox("Yes, delete this shift", key=f"confirm_delete_{chosen}")
    if c2.button("Delete", use_container_width=True):
        if store.delete(chosen, confirm=lambda _id: confirmed):
            st.session_state["_flash_success"] = "Shift deleted."
            st.rerun()
        elif not confirmed:
            st.warning("Tick the confirmation box to delete.")
        else:
            _show_store_error()


# =========================
# 🧾 Invoice generator
# =========================
def page_invoice():
    st.subheader("🧾 Invoice Generator")
    candidates = invoiceable_shifts(store.shifts)

    if "invoice_number" not in st.session_state:
        st.session_state["invoice_number"] = default_invoice_number(hoy)
    c1, c2 = st.columns(2)
    number = c1.text_input("Invoice No.", key="invoice_number")
    due = c2.date_input("Due Date", value=hoy + timedelta(days=PAYMENT_TERMS_DAYS))
    client_name = st.text_input("Client Name", value=DEFAULT_CLIENT)

    if not candidates:
        st.info("No self-employed shifts marked as 'Unpaid' to invoice.")
        return

    selected = [
        s.id for s in candidates
        if st.checkbox(f"{s.display_date} · {s.agency} - {s.location} · {gbp(s.day_salary)}", key=f"inv_{s.id}")
    ]
    invoice = build_invoice(
        store.shifts, selected, issue_date=hoy, client_name=client_name, due_date=due, number=number,
    )
    st.caption(f"{len(invoice.lines)} selected · Total {gbp(invoice.total)}")

    if not pdf_exporter.available:
        st.warning("PDF export is not available in this deployment.")
        return
    if not invoice.lines:
        return
    try:
        pdf_bytes = pdf_exporter.export(invoice)
    except PdfExportUnavailable as exc:
        st.error(str(exc))
        return
    st.download_button(
        "Download Invoice PDF",
        data=pdf_bytes,
        file_name=invoice_filename(invoice),
        mime="application/pdf",
        use_container_width=True,
    )


# =========================
# Navigation
# =========================
PAGES = {
    "Dashboard": page_dashboard,
    "Log shift": page_log_shift,
    "Shifts": page_shifts,
    "Invoice": page_invoice,
}

st.session_state.setdefault("page", "Dashboard")
if "_goto_page" in st.session_state:
    st.session_state["page"] = st.session_state.pop("_goto_page")
st.sidebar.radio("Navigate", list(PAGES), key="page")
if st.sidebar.button("🔄 Refresh from sheet", use_container_width=True):
    with st.spinner("Loading data..."):
        store.fetch_all()

_flash_success_if_any()
_show_store_error()
PAGES[st.session_state["page"]]()
