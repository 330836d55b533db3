# services.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple

from domain import RECEIVED, TAX_STATUSES, UNPAID, Shift
from normalizer import to_number

CHART_WIDTH = 700
CHART_HEIGHT = 300
CHART_PADDING = 40


@dataclass(frozen=True)
class AgencyTotal:
    name: str
    shift_count: int
    total_salary: float


@dataclass(frozen=True)
class MonthlyAmount:
    month: str      # YYYY-MM
    amount: float


@dataclass(frozen=True)
class DashboardMetrics:
    total_shifts: int = 0
    total_hours: float = 0.0
    total_received: float = 0.0
    total_outstanding: float = 0.0
    by_tax_status: Dict[str, float] = field(default_factory=dict)
    by_agency: List[AgencyTotal] = field(default_factory=list)


def compute_salary(hours, rate) -> float:
    """hours * rate, or 0.0 when either side is not a valid non-negative number."""
    salary = to_number(hours) * to_number(rate)
    return salary if math.isfinite(salary) else 0.0


def aggregate_metrics(shifts: Iterable[Shift]) -> DashboardMetrics:
    """Dashboard totals. Shifts in an intermediate status (Pending) count as
    neither received nor outstanding."""
    total_shifts = 0
    total_hours = 0.0
    total_received = 0.0
    total_outstanding = 0.0
    tax_totals: Dict[str, float] = {}
    agency_totals: Dict[str, List[float]] = {}

    for s in shifts:
        total_shifts += 1
        total_hours += s.hours
        if s.payment_status == RECEIVED:
            total_received += s.amount_received
        elif s.payment_status == UNPAID:
            total_outstanding += s.day_salary

        tax_totals[s.tax_status] = tax_totals.get(s.tax_status, 0.0) + s.day_salary

        bucket = agency_totals.setdefault(s.agency, [0, 0.0])
        bucket[0] += 1
        bucket[1] += s.day_salary

    # Known categories first, anything unexpected after, in the order seen
    ordered = [t for t in TAX_STATUSES if t in tax_totals]
    ordered += [t for t in tax_totals if t not in TAX_STATUSES]

    # sorted() is stable, so equal salaries keep first-encountered order
    by_agency = sorted(
        (AgencyTotal(name, int(count), salary) for name, (count, salary) in agency_totals.items()),
        key=lambda a: a.total_salary,
        reverse=True,
    )

    return DashboardMetrics(
        total_shifts=total_shifts,
        total_hours=total_hours,
        total_received=total_received,
        total_outstanding=total_outstanding,
        by_tax_status={t: tax_totals[t] for t in ordered},
        by_agency=by_agency,
    )


def top_agencies(metrics: DashboardMetrics, limit: int = 5) -> List[AgencyTotal]:
    return metrics.by_agency[:max(0, limit)]


def monthly_received_trend(shifts: Iterable[Shift]) -> List[MonthlyAmount]:
    """Received money bucketed by the month of ``received_date``, oldest first.

    Empty input yields an empty list; callers show "no data" rather than a zero line.
    """
    monthly: Dict[str, float] = {}
    for s in shifts:
        if s.payment_status != RECEIVED or s.amount_received <= 0:
            continue
        month = s.received_date[:7]
        if not month:
            continue
        monthly[month] = monthly.get(month, 0.0) + s.amount_received
    return [MonthlyAmount(m, monthly[m]) for m in sorted(monthly)]


def _y_bounds(amounts: Sequence[float]) -> Tuple[float, float]:
    return min(0.0, min(amounts)), max(amounts)


def chart_points(
    amounts: Sequence[float],
    width: int = CHART_WIDTH,
    height: int = CHART_HEIGHT,
    padding: int = CHART_PADDING,
) -> List[Tuple[float, float]]:
    """Maps (index, amount) onto the logical SVG canvas. Deterministic.

    A single point is centred horizontally; a flat series (max == min) is
    drawn across the vertical centre.
    """
    if not amounts:
        return []
    inner_w = width - 2 * padding
    inner_h = height - 2 * padding
    low, high = _y_bounds(amounts)
    y_range = high - low
    n = len(amounts)

    points = []
    for i, amount in enumerate(amounts):
        x = padding + inner_w / 2 if n == 1 else padding + (i / (n - 1)) * inner_w
        if y_range == 0:
            y = height - padding - inner_h / 2
        else:
            y = height - padding - ((amount - low) / y_range) * inner_h
        points.append((x, y))
    return points


def chart_y_ticks(
    amounts: Sequence[float],
    height: int = CHART_HEIGHT,
    padding: int = CHART_PADDING,
    ratios: Sequence[float] = (0.0, 0.5, 1.0),
) -> List[Tuple[float, float]]:
    """(y pixel, value) pairs for horizontal gridlines."""
    if not amounts:
        return []
    low, high = _y_bounds(amounts)
    inner_h = height - 2 * padding
    return [(height - padding - r * inner_h, low + r * (high - low)) for r in ratios]


def category_options(vocabulary: Sequence[str], current: str) -> List[str]:
    """Form choices; keeps an unexpected stored value selectable."""
    options = list(vocabulary)
    if current and current not in options:
        options.append(current)
    return options


__all__ = [
    "AgencyTotal",
    "MonthlyAmount",
    "DashboardMetrics",
    "compute_salary",
    "aggregate_metrics",
    "top_agencies",
    "monthly_received_trend",
    "chart_points",
    "chart_y_ticks",
    "category_options",
]
