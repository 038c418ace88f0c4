# SMB Forecast - Financial Dashboard & Forecasting for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Monthly series helpers for SMB Forecast.

A series is a chronologically ordered sequence of PeriodStatement objects,
one per calendar month, without gaps or duplicates. Series are handled as
plain tuples so they can be shared between callers without copying.
"""

import datetime as dt
from collections.abc import Sequence
from typing import Union

import pandas as pd

from .statement import (
    FLAT_COLUMNS,
    TAX_RATE,
    PeriodStatement,
    check_invariants,
    to_flat_dict,
)

Series = tuple[PeriodStatement, ...]


def month_start(value: Union[str, dt.date, dt.datetime]) -> dt.date:
    """Normalize a date-like value to the first day of its month.

    Accepts date, datetime (including pandas Timestamp) and ISO strings
    ('2025-05', '2025-05-17').
    """
    if isinstance(value, dt.datetime):
        return dt.date(value.year, value.month, 1)
    if isinstance(value, dt.date):
        return value.replace(day=1)

    raw = str(value).strip()
    try:
        if len(raw) == 7:
            parsed = dt.date.fromisoformat(f"{raw}-01")
        else:
            parsed = dt.date.fromisoformat(raw[:10])
    except ValueError as exc:
        raise ValueError(f"Invalid month value: {value!r}") from exc
    return parsed.replace(day=1)


def add_months(d: dt.date, months: int) -> dt.date:
    """Return the first day of the month ``months`` after ``d``."""
    index = d.year * 12 + (d.month - 1) + months
    return dt.date(index // 12, index % 12 + 1, 1)


def month_label(d: dt.date) -> str:
    """Short display label, e.g. "May '25"."""
    return f"{d.strftime('%b')} '{d.strftime('%y')}"


def validate_series(
    series: Sequence[PeriodStatement], tax_rate: float = TAX_RATE
) -> Series:
    """Check ordering and invariants of a series and return it as a tuple.

    Raises:
        ValueError: if months are not strictly consecutive (gap, duplicate
            or out of order) or a date is not the first day of a month.
        InvalidStatement: if any statement violates a total invariant.
    """
    out = tuple(series)
    previous = None
    for period in out:
        if period.date.day != 1:
            raise ValueError(
                f"Period date {period.date.isoformat()} is not the first day "
                "of a month."
            )
        if previous is not None:
            expected = add_months(previous.date, 1)
            if period.date == previous.date:
                raise ValueError(f"Duplicate month in series: {period.date:%Y-%m}")
            if period.date != expected:
                raise ValueError(
                    f"Series is not consecutive: {previous.date:%Y-%m} is "
                    f"followed by {period.date:%Y-%m}, expected {expected:%Y-%m}."
                )
        check_invariants(period, tax_rate)
        previous = period
    return out


def trailing_window(series: Sequence[PeriodStatement], size: int) -> Series:
    """Return the last ``size`` periods of a series (or all if shorter)."""
    if size <= 0:
        raise ValueError("Window size must be a positive integer.")
    return tuple(series)[-size:]


def series_to_frame(series: Sequence[PeriodStatement]) -> pd.DataFrame:
    """Wide DataFrame with one row per month and FLAT_COLUMNS as columns."""
    rows = [to_flat_dict(p) for p in series]
    df = pd.DataFrame(rows, columns=list(FLAT_COLUMNS))
    if not df.empty:
        df["date"] = pd.to_datetime(df["date"])
    return df
