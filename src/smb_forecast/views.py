# SMB Forecast - Financial Dashboard & Forecasting for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for SMB Forecast.

This module turns period statements into display tables at different
levels of detail:

- simplified: levels 0-1 (headline rows and main groups),
- regular:    levels 0-2,
- detailed:   every row (default).

``statement_view()`` renders one month in long format; ``series_view()``
pivots a series into one column per month, the layout used by the
monthly statement tables of the dashboard.
"""

from collections.abc import Sequence
from typing import Optional

import pandas as pd

from .series import month_label
from .statement import PeriodStatement, statement_to_rows

VIEW_LEVELS: dict[str, Optional[int]] = {
    "simplified": 1,
    "regular": 2,
    "detailed": None,
}


def _max_level(view: str) -> Optional[int]:
    try:
        return VIEW_LEVELS[view]
    except KeyError:
        raise ValueError(
            f"Unknown view {view!r}, expected one of: {', '.join(VIEW_LEVELS)}."
        ) from None


def statement_view(period: PeriodStatement, view: str = "detailed") -> pd.DataFrame:
    """One month as a long-format table.

    Columns: display_order, id, level, name, type, amount.
    """
    rows = statement_to_rows(period, max_level=_max_level(view))
    return pd.DataFrame(
        rows, columns=["display_order", "id", "level", "name", "type", "amount"]
    )


def series_view(
    series: Sequence[PeriodStatement],
    view: str = "detailed",
    indent: bool = True,
) -> pd.DataFrame:
    """Statement lines as rows, one column per month.

    The first column, ``name``, is indented by level when ``indent`` is set
    so the table reads like a statement in a console.
    """
    max_level = _max_level(view)
    if not series:
        return pd.DataFrame(columns=["name"])

    columns: dict[str, list[float]] = {}
    names: list[str] = []
    for i, period in enumerate(series):
        rows = statement_to_rows(period, max_level=max_level)
        if i == 0:
            names = [
                ("  " * r["level"] if indent else "") + r["name"] for r in rows
            ]
        columns[month_label(period.date)] = [r["amount"] for r in rows]

    df = pd.DataFrame(columns)
    df.insert(0, "name", names)
    return df
