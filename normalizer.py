# normalizer.py
"""Turns loosely-typed spreadsheet rows into :class:`Shift` records and back.

Rows come from the Apps Script endpoint with camelCase keys and whatever
types the sheet cells happened to hold (numbers, numeric strings, blanks,
timestamps). Nothing in here raises on bad data: numbers fall back to 0,
dates fall back to their raw text, categories fall back to their default.
"""
from __future__ import annotations

import math
import re
import uuid
from typing import Any, Iterable, Mapping

from domain import (
    DEFAULT_AGENCY,
    DEFAULT_LOCATION,
    DEFAULT_TIMEZONE,
    RECEIVED,
    SELF_EMPLOYED,
    UNPAID,
    Shift,
    UnparsedDate,
    parse_shift_date,
)

_GROUPED = re.compile(r"\d{1,3}(,\d{3})+(\.\d+)?")


def to_number(value: Any) -> float:
    """Permissive non-negative float. Missing, blank, non-numeric, NaN or negative -> 0.0.

    Commas are only accepted as thousands separators (``1,250.50``); a decimal
    comma such as ``7,5`` is not a number.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if _GROUPED.fullmatch(value):
            value = value.replace(",", "")
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def _text(value: Any, default: str) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def _shift_id(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = "" if value is None else str(value).strip()
    return text or uuid.uuid4().hex


def _received_date(value: Any, tz: str) -> str:
    if value is None or str(value).strip() == "":
        return ""
    parsed = parse_shift_date(value, tz)
    return parsed.display if isinstance(parsed, UnparsedDate) else parsed.iso


def normalize(raw: Mapping[str, Any] | None, tz: str = DEFAULT_TIMEZONE) -> Shift | None:
    """Canonical Shift from a store row, or None when the row itself is missing.

    ``tz`` is the zone whose calendar day a sheet timestamp is read as.
    """
    if raw is None:
        return None

    parsed_date = parse_shift_date(raw.get("date"), tz)
    hours = to_number(raw.get("hours"))
    rate = to_number(raw.get("rate"))

    raw_salary = raw.get("daySalary")
    if raw_salary is None or str(raw_salary).strip() == "":
        day_salary = hours * rate
    else:
        day_salary = to_number(raw_salary)

    payment_status = _text(raw.get("paymentStatus"), UNPAID)
    if payment_status == RECEIVED:
        amount_received = to_number(raw.get("amountReceived"))
        received_date = _received_date(raw.get("receivedDate"), tz)
    else:
        amount_received, received_date = 0.0, ""

    return Shift(
        id=_shift_id(raw.get("id")),
        date=parsed_date.iso,
        display_date=parsed_date.display,
        agency=_text(raw.get("agency"), DEFAULT_AGENCY),
        location=_text(raw.get("location"), DEFAULT_LOCATION),
        hours=hours,
        rate=rate,
        day_salary=day_salary,
        payment_status=payment_status,
        amount_received=amount_received,
        received_date=received_date,
        tax_status=_text(raw.get("taxStatus"), SELF_EMPLOYED),
    )


def normalize_all(records: Iterable[Mapping[str, Any] | None], tz: str = DEFAULT_TIMEZONE) -> list[Shift]:
    shifts = (normalize(r, tz) for r in records)
    return [s for s in shifts if s is not None]


def to_payload(shift: Shift) -> dict[str, Any]:
    """Full record in the store's field names, ready to JSON-encode."""
    hours = to_number(shift.hours)
    rate = to_number(shift.rate)
    received = shift.payment_status == RECEIVED
    return {
        "id": shift.id,
        "date": shift.date or shift.display_date,
        "agency": shift.agency,
        "location": shift.location,
        "hours": hours,
        "rate": rate,
        "daySalary": hours * rate,
        "paymentStatus": shift.payment_status,
        "amountReceived": to_number(shift.amount_received) if received else 0.0,
        "receivedDate": shift.received_date if received else "",
        "taxStatus": shift.tax_status,
    }


__all__ = ["to_number", "normalize", "normalize_all", "to_payload"]
