# utils.py
from __future__ import annotations

from typing import Iterable

import pandas as pd

from domain import Shift


def gbp(x: float) -> str:
    sign = "-" if x < 0 else ""
    return f"{sign}£{abs(x):,.2f}"


def shifts_to_dataframe(shifts: Iterable[Shift]) -> pd.DataFrame:
    rows = []
    for s in shifts:
        rows.append({
            "ID": s.id,
            "Sort": s.date,
            "Date": s.display_date,
            "Agency": s.agency,
            "Location": s.location,
            "Hours": s.hours,
            "Rate": s.rate,
            "Day Salary": s.day_salary,
            "Payment": s.payment_status,
            "Received": s.amount_received,
            "Received On": s.received_date,
            "Tax": s.tax_status,
        })
    df = pd.DataFrame(rows)
    if not df.empty:
        # Unparsed dates ('' sort key) sink to the bottom
        df = df.sort_values(["Sort"], ascending=False).reset_index(drop=True)
        df = df.drop(columns=["Sort"])
    return df


def invoice_lines_dataframe(shifts: Iterable[Shift]) -> pd.DataFrame:
    rows = [
        {
            "Date": s.display_date,
            "Description": f"{s.agency} at {s.location}",
            "Hours": f"{s.hours:g}",
            "Rate": gbp(s.rate),
            "Amount": gbp(s.day_salary),
        }
        for s in shifts
    ]
    return pd.DataFrame(rows, columns=["Date", "Description", "Hours", "Rate", "Amount"])


__all__ = ["gbp", "shifts_to_dataframe", "invoice_lines_dataframe"]
