# SMB Forecast - Financial Dashboard & Forecasting for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Baseline assumptions derived from trailing actuals.

The projection engine does not extrapolate statements blindly: it starts
from a small set of forward-looking assumptions computed once from the
most recent actual periods (12 by default):

1. Growth slopes
   --------------
   For each revenue line (in_store, delivery, catering), the slope of an
   ordinary least-squares regression of the line against the period index
   (0..n-1). Only the slope is kept; the projection continues from the last
   actual value, not from the regression intercept.

2. Cost ratios
   ------------
   For costs that scale with sales (food, beverages, packaging, wages,
   marketing, POS fees, delivery commissions):

       ratio = sum(cost over window) / sum(total revenue over window)

   The ratio is 0.0 when revenue sums to zero.

3. Fixed cost averages
   --------------------
   For costs that do not scale with sales (salaries, rent, utilities,
   insurance, repairs): arithmetic mean over the window.

Every leaf of the statement is driven by exactly one of these groups.

Assumptions are immutable. Users may edit them before running a projection
through ``BaselineAssumptions.with_overrides()``, which returns a new
object.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

import pandas as pd

from .errors import InsufficientHistory
from .series import trailing_window
from .statement import LEAF_BY_ITEM, PeriodStatement, get_leaf

logger = logging.getLogger(__name__)

DEFAULT_WINDOW: int = 12

GROWTH_LINES: tuple[str, ...] = ("in_store", "delivery", "catering")
RATIO_ITEMS: tuple[str, ...] = (
    "food",
    "beverages",
    "packaging",
    "wages",
    "marketing",
    "pos_fees",
    "delivery_commissions",
)
AVERAGE_ITEMS: tuple[str, ...] = (
    "salaries",
    "rent",
    "utilities",
    "insurance",
    "repairs",
)

# Override key prefix -> attribute holding the corresponding mapping.
_OVERRIDE_GROUPS: dict[str, str] = {
    "growth_": "growth",
    "ratio_": "ratios",
    "average_": "averages",
}


@dataclass(frozen=True)
class BaselineAssumptions:
    """
    Forward-looking assumptions for one forecasting session.

    Attributes
    ----------
    growth :
        Monthly additive growth per revenue line (currency per month).
    ratios :
        Cost-to-total-revenue ratios per variable cost item.
    averages :
        Monthly average per fixed cost item.
    window_size :
        Number of actual periods the assumptions were derived from.
    """

    growth: Mapping[str, float] = field(default_factory=dict)
    ratios: Mapping[str, float] = field(default_factory=dict)
    averages: Mapping[str, float] = field(default_factory=dict)
    window_size: int = 0

    def __post_init__(self) -> None:
        # Freeze the mappings and fill missing keys with 0.0
        for attr, keys in (
            ("growth", GROWTH_LINES),
            ("ratios", RATIO_ITEMS),
            ("averages", AVERAGE_ITEMS),
        ):
            source = getattr(self, attr)
            unknown = set(source) - set(keys)
            if unknown:
                raise KeyError(
                    f"Unknown {attr} assumption key(s): {', '.join(sorted(unknown))}"
                )
            values = {k: float(source.get(k, 0.0)) for k in keys}
            object.__setattr__(self, attr, MappingProxyType(values))

    def as_dict(self) -> dict[str, float]:
        """Flat view keyed as 'growth_<line>', 'ratio_<item>', 'average_<item>'."""
        out: dict[str, float] = {}
        out.update({f"growth_{k}": v for k, v in self.growth.items()})
        out.update({f"ratio_{k}": v for k, v in self.ratios.items()})
        out.update({f"average_{k}": v for k, v in self.averages.items()})
        return out

    def with_overrides(self, overrides: Mapping[str, float]) -> "BaselineAssumptions":
        """Return a copy with some assumptions replaced.

        Keys use the flat naming of ``as_dict()``
        (e.g. {'growth_in_store': 250.0, 'ratio_food': 0.24}).

        Raises:
            KeyError: for unknown keys.
            ValueError: for values that cannot be converted to float.
        """
        groups = {
            "growth": dict(self.growth),
            "ratios": dict(self.ratios),
            "averages": dict(self.averages),
        }
        for key, raw in overrides.items():
            for prefix, attr in _OVERRIDE_GROUPS.items():
                if key.startswith(prefix) and key[len(prefix) :] in groups[attr]:
                    try:
                        groups[attr][key[len(prefix) :]] = float(raw)
                    except (TypeError, ValueError) as exc:
                        raise ValueError(
                            f"Invalid value for assumption '{key}': {raw!r}"
                        ) from exc
                    break
            else:
                raise KeyError(f"Unknown assumption key: {key!r}")

        return BaselineAssumptions(
            growth=groups["growth"],
            ratios=groups["ratios"],
            averages=groups["averages"],
            window_size=self.window_size,
        )


def linear_slope(values: Sequence[float]) -> float:
    """Least-squares slope of ``values`` against their index (0..n-1).

    Returns 0.0 when fewer than two values are given.
    """
    y = pd.Series(list(values), dtype="float64")
    if len(y) < 2:
        return 0.0
    x = pd.Series(range(len(y)), dtype="float64")
    return float(y.cov(x) / x.var())


def derive_baseline(
    actuals: Sequence[PeriodStatement],
    window: int = DEFAULT_WINDOW,
    allow_flat_growth: bool = False,
) -> BaselineAssumptions:
    """Compute baseline assumptions from the trailing window of actuals.

    Args:
        actuals: Actual series (oldest first).
        window: Number of most recent periods to use.
        allow_flat_growth: Explicit opt-in to the degraded mode where a
            single actual period yields zero growth slopes instead of an
            error.

    Raises:
        InsufficientHistory: with fewer than 2 periods (or with no period
            at all when ``allow_flat_growth`` is set).
    """
    periods = trailing_window(actuals, window) if actuals else ()
    n = len(periods)

    if n == 0 or (n < 2 and not allow_flat_growth):
        raise InsufficientHistory(n)

    if n < 2:
        logger.warning(
            "Only %d actual period available: growth slopes set to 0.0.", n
        )

    growth = {
        line: linear_slope([getattr(p.revenue, line) for p in periods])
        for line in GROWTH_LINES
    }

    total_revenue = sum(p.revenue.total for p in periods)
    ratios: dict[str, float] = {}
    for item in RATIO_ITEMS:
        category = LEAF_BY_ITEM[item].category
        cost = sum(get_leaf(p, category, item) for p in periods)
        ratios[item] = cost / total_revenue if total_revenue != 0 else 0.0

    averages: dict[str, float] = {}
    for item in AVERAGE_ITEMS:
        category = LEAF_BY_ITEM[item].category
        averages[item] = sum(get_leaf(p, category, item) for p in periods) / n

    logger.debug(
        "Derived baseline from %d periods (%s to %s): growth=%s",
        n,
        periods[0].date.isoformat(),
        periods[-1].date.isoformat(),
        growth,
    )

    return BaselineAssumptions(
        growth=growth, ratios=ratios, averages=averages, window_size=n
    )


def assumptions_to_frame(assumptions: BaselineAssumptions) -> pd.DataFrame:
    """Long-format DataFrame of assumptions (columns: key, group, item, value)."""
    rows = []
    for group, mapping in (
        ("growth", assumptions.growth),
        ("ratio", assumptions.ratios),
        ("average", assumptions.averages),
    ):
        for item, value in mapping.items():
            rows.append(
                {
                    "key": f"{group}_{item}",
                    "group": group,
                    "item": item,
                    "value": value,
                }
            )
    return pd.DataFrame(rows, columns=["key", "group", "item", "value"])
