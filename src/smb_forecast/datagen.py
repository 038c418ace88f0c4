# SMB Forecast - Financial Dashboard & Forecasting for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Sample actuals for a quick-service restaurant.

Used for demos and tests when no actuals CSV is configured. The generator
is seeded, so the same (start, end, seed) always yields the same series.

Model
-----
- Base revenue 60,000 growing 0.6 % per month, with +/-5 % noise,
  split 60 % in-store, 35 % delivery, 5 % catering.
- COGS: food 25 %, beverages 8 %, packaging 2 % of revenue.
- Wages 22 % of revenue; salaries 8,000 with a 3 % yearly raise.
- Rent 5,000 with a 2 % yearly increase; utilities 1,500 to 2,000.
- POS fees 1 % of revenue; delivery commissions 15 % of delivery revenue;
  insurance 1,000; repairs 500 to 1,500; marketing 3 % of revenue.
"""

import datetime as dt

import numpy as np

from .series import Series, add_months, month_start
from .statement import TAX_RATE, build_statement


def generate_sample_actuals(
    start: dt.date = dt.date(2020, 1, 1),
    end: dt.date = dt.date(2025, 5, 1),
    seed: int = 42,
    tax_rate: float = TAX_RATE,
) -> Series:
    """Generate one statement per month from ``start`` to ``end`` inclusive."""
    start = month_start(start)
    end = month_start(end)
    if end < start:
        raise ValueError("Sample end month cannot be before start month.")

    rng = np.random.default_rng(seed)
    out = []
    current = start
    month_index = 0

    while current <= end:
        years = current.year - start.year
        growth = 1.006**month_index
        fluctuation = 0.95 + rng.random() * 0.1
        base_revenue = 60000 * growth * fluctuation

        in_store = base_revenue * 0.6
        delivery = base_revenue * 0.35
        catering = base_revenue * 0.05
        total = in_store + delivery + catering

        out.append(
            build_statement(
                current,
                tax_rate=tax_rate,
                in_store=in_store,
                delivery=delivery,
                catering=catering,
                food=total * 0.25,
                beverages=total * 0.08,
                packaging=total * 0.02,
                wages=total * 0.22,
                salaries=8000 * 1.03**years,
                marketing=total * 0.03,
                rent=5000 * 1.02**years,
                utilities=1500 + rng.random() * 500,
                pos_fees=total * 0.01,
                delivery_commissions=delivery * 0.15,
                insurance=1000.0,
                repairs=500 + rng.random() * 1000,
            )
        )
        current = add_months(current, 1)
        month_index += 1

    return tuple(out)
