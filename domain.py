# domain.py
from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime
from zoneinfo import ZoneInfo

UNPAID = "Unpaid"
PENDING = "Pending"
RECEIVED = "Received"
PAYMENT_STATUSES = (UNPAID, PENDING, RECEIVED)

SELF_EMPLOYED = "Self-Employed"
PAYE = "PAYE"
TAX_STATUSES = (SELF_EMPLOYED, PAYE)

DEFAULT_AGENCY = "Private"
DEFAULT_LOCATION = "Not specified"

ISO_FORMAT = "%Y-%m-%d"
DISPLAY_FORMAT = "%d/%m/%Y"
DEFAULT_TIMEZONE = "Europe/London"


@dataclass
class Shift:
    """A single worked shift as held in the in-memory collection."""
    id: str
    date: str                       # YYYY-MM-DD, '' when the store value did not parse
    display_date: str = ""          # DD/MM/YYYY, or the raw store value
    agency: str = DEFAULT_AGENCY
    location: str = DEFAULT_LOCATION
    hours: float = 0.0
    rate: float = 0.0
    day_salary: float = 0.0
    payment_status: str = UNPAID
    amount_received: float = 0.0
    received_date: str = ""
    tax_status: str = SELF_EMPLOYED

    @property
    def is_received(self) -> bool:
        return self.payment_status == RECEIVED

    @property
    def has_valid_date(self) -> bool:
        return bool(self.date)


@dataclass(frozen=True)
class ParsedDate:
    value: date

    @property
    def iso(self) -> str:
        return self.value.isoformat()

    @property
    def display(self) -> str:
        return self.value.strftime(DISPLAY_FORMAT)


@dataclass(frozen=True)
class UnparsedDate:
    """Keeps the original text so it can still be shown and sent back."""
    original: str

    @property
    def iso(self) -> str:
        return ""

    @property
    def display(self) -> str:
        return self.original


ShiftDate = ParsedDate | UnparsedDate


def _local_date(moment: datetime, tz: str) -> date:
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(ZoneInfo(tz)).date()


def parse_shift_date(value: object, tz: str = DEFAULT_TIMEZONE) -> ShiftDate:
    """Tries YYYY-MM-DD, then DD/MM/YYYY. Never raises.

    Sheets serialises date cells as UTC timestamps (``2024-07-04T23:00:00.000Z``
    is 5 July in London), so timestamps are read as the calendar day in ``tz``.
    """
    if isinstance(value, datetime):
        return ParsedDate(_local_date(value, tz))
    if isinstance(value, date):
        return ParsedDate(value)
    text = "" if value is None else str(value).strip()
    if "T" in text:
        try:
            moment = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            pass
        else:
            return ParsedDate(_local_date(moment, tz))
    candidates = [text, text[:10]] if "T" in text else [text]
    for candidate in candidates:
        for fmt in (ISO_FORMAT, DISPLAY_FORMAT):
            try:
                return ParsedDate(datetime.strptime(candidate, fmt).date())
            except ValueError:
                continue
    return UnparsedDate(text)


def with_payment_status(shift: Shift, status: str) -> Shift:
    """Returns a copy with the new status; leaving Received clears the payment fields."""
    if status == RECEIVED:
        return replace(shift, payment_status=status)
    return replace(shift, payment_status=status, amount_received=0.0, received_date="")


def apply_form(
    base: Shift,
    *,
    picked_date: date | None,
    agency: str,
    location: str,
    hours: float,
    rate: float,
    tax_status: str,
    payment_status: str,
    amount_received: float,
    picked_received: date | None,
) -> Shift:
    """Merges shift form values into ``base``.

    A ``None`` picked date leaves the stored date alone, so text the parser
    could not read (``date == ''``) is sent back to the store unchanged.
    """
    shift = replace(
        base,
        agency=agency.strip() or base.agency,
        location=location.strip() or base.location,
        hours=hours,
        rate=rate,
        day_salary=hours * rate,
        amount_received=amount_received,
        tax_status=tax_status,
    )
    if picked_date is not None:
        shift = replace(shift, date=picked_date.isoformat(), display_date=picked_date.strftime(DISPLAY_FORMAT))
    if picked_received is not None:
        shift = replace(shift, received_date=picked_received.isoformat())
    return with_payment_status(shift, payment_status)


def new_shift(today: date) -> Shift:
    """Blank record for the shift form."""
    hours, rate = 8.0, 55.0
    return Shift(
        id=uuid.uuid4().hex,
        date=today.isoformat(),
        display_date=today.strftime(DISPLAY_FORMAT),
        agency="Locum Agency 1",
        location="City Hospital",
        hours=hours,
        rate=rate,
        day_salary=hours * rate,
    )


__all__ = [
    "Shift",
    "ParsedDate",
    "UnparsedDate",
    "ShiftDate",
    "parse_shift_date",
    "with_payment_status",
    "apply_form",
    "new_shift",
    "UNPAID",
    "PENDING",
    "RECEIVED",
    "PAYMENT_STATUSES",
    "SELF_EMPLOYED",
    "PAYE",
    "TAX_STATUSES",
    "DEFAULT_AGENCY",
    "DEFAULT_LOCATION",
]
