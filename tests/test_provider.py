import datetime as dt

import pytest

from smb_forecast.baseline import derive_baseline
from smb_forecast.datagen import generate_sample_actuals
from smb_forecast.errors import InsufficientHistory
from smb_forecast.provider import ActualsProvider
from smb_forecast.statement import build_statement, is_valid


def test_sample_actuals_cover_requested_months() -> None:
    series = generate_sample_actuals()

    assert len(series) == 65
    assert series[0].date == dt.date(2020, 1, 1)
    assert series[-1].date == dt.date(2025, 5, 1)
    assert all(is_valid(p) for p in series)
    assert all(p.revenue.total > 0 for p in series)


def test_sample_actuals_are_seeded() -> None:
    a = generate_sample_actuals(seed=7)
    b = generate_sample_actuals(seed=7)
    c = generate_sample_actuals(seed=8)

    assert a == b
    assert a != c


def test_sample_actuals_reject_inverted_range() -> None:
    with pytest.raises(ValueError):
        generate_sample_actuals(start=dt.date(2025, 1, 1), end=dt.date(2024, 1, 1))


def test_provider_from_sample() -> None:
    provider = ActualsProvider.from_sample(
        start=dt.date(2023, 1, 1), end=dt.date(2024, 6, 1), seed=3
    )

    assert len(provider) == 18
    assert provider.source == "sample(seed=3)"
    assert provider.years() == [2024, 2023]
    assert len(provider.for_year(2024)) == 6
    assert provider.last_period.date == dt.date(2024, 6, 1)
    assert len(provider.trailing()) == 12

    assumptions = derive_baseline(provider.actuals)
    assert assumptions.window_size == 12
    assert 0.2 < assumptions.ratios["food"] < 0.3


def test_provider_from_csv(tmp_path) -> None:
    path = tmp_path / "actuals.csv"
    path.write_text(
        "date,in_store\n2025-01-01,1000\n2025-02-01,1200\n", encoding="utf-8"
    )

    provider = ActualsProvider.from_csv(path, tax_rate=0.1)

    assert provider.source == str(path)
    assert provider.last_period.net_income == pytest.approx(1080.0)


def test_provider_validates_series() -> None:
    jan = build_statement(dt.date(2025, 1, 1), in_store=1.0)
    mar = build_statement(dt.date(2025, 3, 1), in_store=1.0)

    with pytest.raises(ValueError):
        ActualsProvider((jan, mar))

    with pytest.raises(InsufficientHistory):
        ActualsProvider(()).last_period
