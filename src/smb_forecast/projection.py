# SMB Forecast - Financial Dashboard & Forecasting for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Twelve-month projection engine.

``project()`` advances the last actual period month by month and returns
a forecast series of exactly ``horizon`` periods (12 by default).

Per-period algorithm
--------------------
For each forecast period i = 1..horizon, strictly in order:

1. date = last actual month + i months.
2. Baseline revenue lines: previous baseline line + growth slope
   (additive monthly step). The previous value is the last actual for
   i = 1 and the previous period's *baseline* revenue afterwards.
3. Variable costs = assumption ratio * baseline total revenue.
   Fixed costs = assumption monthly average.
4. Every modification whose start date is on/before the period date is
   applied, in scenario order.
5. ``recompute_totals()`` finalizes every derived field.
6. The baseline revenue of this period becomes the carry-forward base.

Only revenue is carried from one period to the next, and it is carried
before modifications: a scenario is re-applied to each period's baseline
instead of compounding on its own output. With a +10 % modification and a
zero slope, every forecast month is 10 % above the last actual month.

Targets are checked before the first period is built, so a malformed
scenario aborts the whole run (``TargetNotFound``) and never yields a
partially modified forecast. The engine is a pure function of its inputs:
no I/O, no randomness, no shared state.
"""

import logging
from collections.abc import Sequence

import pandas as pd

from .baseline import AVERAGE_ITEMS, GROWTH_LINES, RATIO_ITEMS, BaselineAssumptions
from .errors import InsufficientHistory
from .modifications import Modification, apply_all
from .series import Series, add_months, series_to_frame
from .statement import (
    LEAF_BY_ITEM,
    TAX_RATE,
    PeriodStatement,
    Revenue,
    check_invariants,
    recompute_totals,
    resolve_leaf,
    set_leaf,
)

logger = logging.getLogger(__name__)

DEFAULT_HORIZON: int = 12


def _baseline_period(
    previous_revenue: Revenue,
    assumptions: BaselineAssumptions,
    date,
) -> PeriodStatement:
    """Build the un-modified statement of one forecast month (without totals)."""
    revenue = Revenue(
        **{
            line: getattr(previous_revenue, line) + assumptions.growth[line]
            for line in GROWTH_LINES
        }
    )
    total_revenue = revenue.in_store + revenue.delivery + revenue.catering

    period = PeriodStatement(date=date, revenue=revenue)
    for item in RATIO_ITEMS:
        leaf = LEAF_BY_ITEM[item]
        period = set_leaf(
            period, leaf.category, item, assumptions.ratios[item] * total_revenue
        )
    for item in AVERAGE_ITEMS:
        leaf = LEAF_BY_ITEM[item]
        period = set_leaf(period, leaf.category, item, assumptions.averages[item])
    return period


def project(
    actuals: Sequence[PeriodStatement],
    assumptions: BaselineAssumptions,
    modifications: Sequence[Modification] = (),
    horizon: int = DEFAULT_HORIZON,
    tax_rate: float = TAX_RATE,
) -> Series:
    """Project ``horizon`` months after the last actual period.

    Args:
        actuals: Actual series; only the last period seeds the projection.
        assumptions: Baseline assumptions (possibly user-edited).
        modifications: Active modifications, in application order.
        horizon: Number of forecast months.
        tax_rate: Tax rate applied to positive operating income.

    Returns:
        A tuple of ``horizon`` valid PeriodStatement objects.

    Raises:
        InsufficientHistory: if ``actuals`` is empty.
        TargetNotFound: if a modification targets an unknown leaf.
    """
    if not actuals:
        raise InsufficientHistory(0, 1)
    if horizon <= 0:
        raise ValueError("Forecast horizon must be a positive integer.")

    modifications = tuple(modifications)
    for modification in modifications:
        resolve_leaf(modification.target.category, modification.target.item)

    seed = actuals[-1]
    carry = seed.revenue
    forecast: list[PeriodStatement] = []

    for i in range(1, horizon + 1):
        date = add_months(seed.date, i)
        baseline = _baseline_period(carry, assumptions, date)
        period = recompute_totals(apply_all(baseline, modifications), tax_rate)
        check_invariants(period, tax_rate)

        logger.debug(
            "Forecast %s: revenue=%.2f net_income=%.2f",
            date.isoformat(),
            period.revenue.total,
            period.net_income,
        )
        forecast.append(period)
        carry = baseline.revenue

    return tuple(forecast)


def project_frame(
    actuals: Sequence[PeriodStatement],
    assumptions: BaselineAssumptions,
    modifications: Sequence[Modification] = (),
    horizon: int = DEFAULT_HORIZON,
    tax_rate: float = TAX_RATE,
) -> pd.DataFrame:
    """Same as ``project()`` but returns the wide DataFrame with a 'type' column."""
    df = series_to_frame(
        project(actuals, assumptions, modifications, horizon, tax_rate)
    )
    df["type"] = "forecast"
    return df
