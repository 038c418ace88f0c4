# SMB Forecast - Financial Dashboard & Forecasting for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Summary figures for dashboards.

Helpers in this module turn actual and forecast series into the small
tables the dashboard displays: headline totals and margins, trailing
actuals vs forecast net income, a combined chartable frame and yearly
totals. They only read PeriodStatement values; no arithmetic here feeds
back into the engine.
"""

from collections.abc import Sequence
from dataclasses import dataclass

import pandas as pd

from .series import month_label, trailing_window
from .statement import PeriodStatement


@dataclass(frozen=True)
class SeriesTotals:
    """Totals over a series, with margins expressed in percent."""

    revenue: float
    gross_profit: float
    net_income: float

    @property
    def gross_margin_pct(self) -> float:
        return self.gross_profit / self.revenue * 100 if self.revenue > 0 else 0.0

    @property
    def net_margin_pct(self) -> float:
        return self.net_income / self.revenue * 100 if self.revenue > 0 else 0.0


def series_totals(series: Sequence[PeriodStatement]) -> SeriesTotals:
    return SeriesTotals(
        revenue=sum(p.revenue.total for p in series),
        gross_profit=sum(p.gross_profit for p in series),
        net_income=sum(p.net_income for p in series),
    )


def variance_vs_actuals(
    actuals: Sequence[PeriodStatement],
    forecast: Sequence[PeriodStatement],
    trailing: int = 12,
) -> pd.DataFrame:
    """Net income over the trailing actual months vs the forecast months.

    Returns a DataFrame with columns: name, value. The last row holds the
    difference (forecast - actual).
    """
    actual_total = series_totals(trailing_window(actuals, trailing)).net_income
    forecast_total = series_totals(forecast).net_income
    return pd.DataFrame(
        [
            {"name": f"Actual TTM ({trailing} mo)", "value": actual_total},
            {"name": f"Forecast ({len(forecast)} mo)", "value": forecast_total},
            {"name": "Difference", "value": forecast_total - actual_total},
        ],
        columns=["name", "value"],
    )


def _chartable_rows(series: Sequence[PeriodStatement], kind: str) -> list[dict]:
    return [
        {
            "date": pd.Timestamp(p.date),
            "month": month_label(p.date),
            "revenue": p.revenue.total,
            "gross_profit": p.gross_profit,
            "net_income": p.net_income,
            "type": kind,
        }
        for p in series
    ]


def combined_frame(
    actuals: Sequence[PeriodStatement],
    forecast: Sequence[PeriodStatement] = (),
    trailing: int = 12,
) -> pd.DataFrame:
    """Trailing actuals followed by the forecast, ready for charting."""
    rows = _chartable_rows(trailing_window(actuals, trailing), "actual")
    rows += _chartable_rows(forecast, "forecast")
    return pd.DataFrame(
        rows,
        columns=["date", "month", "revenue", "gross_profit", "net_income", "type"],
    )


def yearly_totals(series: Sequence[PeriodStatement]) -> pd.DataFrame:
    """Revenue, gross profit and net income per calendar year."""
    df = pd.DataFrame(
        [
            {
                "year": p.date.year,
                "revenue": p.revenue.total,
                "gross_profit": p.gross_profit,
                "net_income": p.net_income,
            }
            for p in series
        ],
        columns=["year", "revenue", "gross_profit", "net_income"],
    )
    return df.groupby("year", as_index=False).sum()
