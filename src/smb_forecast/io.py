# SMB Forecast - Financial Dashboard & Forecasting for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for SMB Forecast.

This module reads monthly actuals from a CSV file and writes series
(actuals or forecasts) back to CSV.

Expected input format
---------------------
One row per month, column names case-insensitive:

    date, in_store, delivery, catering,
    food, beverages, packaging,
    wages, salaries, marketing, rent, utilities,
    pos_fees, delivery_commissions, insurance, repairs

- ``date``: any day of the month (YYYY-MM or YYYY-MM-DD); it is normalized
  to the first day of the month.
- camelCase column names used by the dashboard front-end (``inStore``,
  ``posFees``, ``deliveryCommissions``...) are accepted as aliases.
- Missing leaf columns are treated as 0.0.
- Total columns (``revenue_total``, ``net_income``...) may be present but
  are ignored: totals are always recomputed from the leaves.

Rows are sorted by date and the resulting series is validated (no gap, no
duplicate month).
"""

import os
from collections.abc import Sequence
from typing import Union

import pandas as pd

from .series import Series, month_start, series_to_frame, validate_series
from .statement import (
    LEAF_COLUMNS,
    TAX_RATE,
    PeriodStatement,
    build_statement,
    normalize_name,
)


def read_actuals(
    path: Union[str, "os.PathLike[str]"], tax_rate: float = TAX_RATE
) -> Series:
    """
    Read monthly actuals from a CSV file.

    Parameters
    ----------
    path:
        Path to the CSV file.
    tax_rate:
        Tax rate used to recompute net income.

    Returns
    -------
    tuple[PeriodStatement, ...]
        Validated, chronologically ordered series.

    Raises
    ------
    ValueError
        If the 'date' column is missing, dates or amounts cannot be parsed,
        or months are duplicated / not consecutive.
    """
    df = pd.read_csv(path)

    # Normalize column names (case-insensitive, camelCase aliases)
    df.columns = [normalize_name(c) for c in df.columns]

    if "date" not in df.columns:
        raise ValueError("Invalid actuals structure: missing 'date' column.")

    known = [c for c in LEAF_COLUMNS if c in df.columns]
    if not known:
        raise ValueError(
            "Invalid actuals structure: no statement leaf column found. "
            f"Expected some of: {', '.join(LEAF_COLUMNS)}."
        )

    d = df.copy()
    try:
        d["date"] = pd.to_datetime(d["date"].astype(str), errors="raise")
    except Exception as exc:  # noqa: BLE001
        raise ValueError("Invalid values in 'date' column.") from exc

    for col in known:
        d[col] = pd.to_numeric(d[col], errors="coerce")
    if d[known].isna().any().any():
        raise ValueError("Invalid numeric values in actuals leaf columns.")

    d = d.sort_values("date", kind="stable")

    periods: list[PeriodStatement] = []
    for row in d.itertuples(index=False):
        values = row._asdict()
        leaves = {c: float(values[c]) for c in known}
        periods.append(
            build_statement(month_start(values["date"]), tax_rate=tax_rate, **leaves)
        )

    return validate_series(periods, tax_rate)


def write_series(
    series: Sequence[PeriodStatement],
    path: Union[str, "os.PathLike[str]"],
    decimals: int = 2,
) -> None:
    """Write a series to CSV (wide format, one row per month)."""
    df = series_to_frame(series)
    if not df.empty:
        df["date"] = df["date"].dt.strftime("%Y-%m-%d")
    df.round(decimals).to_csv(path, index=False)
