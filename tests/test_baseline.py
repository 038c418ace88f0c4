import datetime as dt

import pytest

from smb_forecast.baseline import (
    AVERAGE_ITEMS,
    GROWTH_LINES,
    RATIO_ITEMS,
    BaselineAssumptions,
    assumptions_to_frame,
    derive_baseline,
    linear_slope,
)
from smb_forecast.errors import InsufficientHistory
from smb_forecast.series import add_months
from smb_forecast.statement import build_statement


def _series(rows: list[dict]) -> tuple:
    start = dt.date(2024, 1, 1)
    return tuple(
        build_statement(add_months(start, i), **leaves) for i, leaves in enumerate(rows)
    )


def test_every_leaf_is_driven_by_one_assumption_group() -> None:
    groups = list(GROWTH_LINES) + list(RATIO_ITEMS) + list(AVERAGE_ITEMS)
    assert len(groups) == 15
    assert len(set(groups)) == 15


def test_linear_slope() -> None:
    assert linear_slope([1000.0, 1100.0, 1200.0, 1300.0]) == pytest.approx(100.0)
    assert linear_slope([5.0, 5.0, 5.0]) == pytest.approx(0.0)
    assert linear_slope([1.0, 3.0, 2.0]) == pytest.approx(0.5)
    assert linear_slope([42.0]) == 0.0
    assert linear_slope([]) == 0.0


def test_ratio_is_sum_of_cost_over_sum_of_revenue() -> None:
    actuals = _series(
        [
            {"in_store": 4000.0, "food": 800.0},
            {"in_store": 6000.0, "food": 1200.0},
        ]
    )

    assumptions = derive_baseline(actuals)

    assert assumptions.ratios["food"] == pytest.approx(0.20)
    assert assumptions.ratios["beverages"] == 0.0
    assert assumptions.window_size == 2


def test_growth_slope_and_fixed_averages() -> None:
    actuals = _series(
        [
            {"in_store": 1000.0, "delivery": 500.0, "rent": 5000.0, "salaries": 8000.0},
            {"in_store": 1100.0, "delivery": 450.0, "rent": 5000.0, "salaries": 8000.0},
            {"in_store": 1200.0, "delivery": 400.0, "rent": 5300.0, "salaries": 8600.0},
        ]
    )

    assumptions = derive_baseline(actuals)

    assert assumptions.growth["in_store"] == pytest.approx(100.0)
    assert assumptions.growth["delivery"] == pytest.approx(-50.0)
    assert assumptions.growth["catering"] == pytest.approx(0.0)
    assert assumptions.averages["rent"] == pytest.approx(5100.0)
    assert assumptions.averages["salaries"] == pytest.approx(8200.0)


def test_window_uses_most_recent_periods() -> None:
    actuals = _series([{"in_store": v} for v in (9000.0, 100.0, 200.0, 300.0)])

    assumptions = derive_baseline(actuals, window=3)

    assert assumptions.window_size == 3
    assert assumptions.growth["in_store"] == pytest.approx(100.0)


def test_zero_revenue_gives_zero_ratios() -> None:
    actuals = _series([{"food": 100.0}, {"food": 120.0}])

    assumptions = derive_baseline(actuals)

    assert all(v == 0.0 for v in assumptions.ratios.values())


def test_insufficient_history() -> None:
    one = _series([{"in_store": 1000.0, "rent": 4000.0}])

    with pytest.raises(InsufficientHistory) as excinfo:
        derive_baseline(one)
    assert excinfo.value.available == 1

    with pytest.raises(InsufficientHistory):
        derive_baseline(())


def test_flat_growth_is_an_explicit_degraded_mode(caplog) -> None:
    one = _series([{"in_store": 1000.0, "rent": 4000.0, "food": 250.0}])

    with caplog.at_level("WARNING", logger="smb_forecast.baseline"):
        assumptions = derive_baseline(one, allow_flat_growth=True)

    assert assumptions.growth["in_store"] == 0.0
    assert assumptions.averages["rent"] == pytest.approx(4000.0)
    assert assumptions.ratios["food"] == pytest.approx(0.25)
    assert "growth slopes set to 0.0" in caplog.text

    with pytest.raises(InsufficientHistory):
        derive_baseline((), allow_flat_growth=True)


def test_derivation_is_deterministic() -> None:
    actuals = _series(
        [{"in_store": 1000.0 + 37.5 * i, "food": 300.0} for i in range(12)]
    )

    assert derive_baseline(actuals) == derive_baseline(actuals)


def test_with_overrides_returns_edited_copy() -> None:
    base = BaselineAssumptions(growth={"in_store": 10.0}, ratios={"food": 0.25})

    edited = base.with_overrides({"growth_in_store": 250.0, "average_rent": 5200})

    assert edited.growth["in_store"] == 250.0
    assert edited.averages["rent"] == 5200.0
    assert edited.ratios["food"] == 0.25
    assert base.growth["in_store"] == 10.0

    with pytest.raises(KeyError):
        base.with_overrides({"growth_merch": 1.0})

    with pytest.raises(ValueError):
        base.with_overrides({"ratio_food": "a lot"})


def test_assumptions_are_read_only() -> None:
    base = BaselineAssumptions(growth={"in_store": 10.0})

    with pytest.raises(TypeError):
        base.growth["in_store"] = 0.0  # type: ignore[index]

    with pytest.raises(KeyError):
        BaselineAssumptions(ratios={"rent": 0.1})


def test_assumptions_to_frame() -> None:
    df = assumptions_to_frame(BaselineAssumptions(ratios={"food": 0.25}))

    assert list(df.columns) == ["key", "group", "item", "value"]
    assert len(df) == 15
    row = df[df["key"] == "ratio_food"].iloc[0]
    assert row["group"] == "ratio"
    assert row["value"] == pytest.approx(0.25)
