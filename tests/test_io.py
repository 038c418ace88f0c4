import datetime as dt
from pathlib import Path

import pandas as pd
import pytest

from smb_forecast.io import read_actuals, write_series


def _write_csv(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "actuals.csv"
    path.write_text(text, encoding="utf-8")
    return path


def test_read_actuals_accepts_camel_case_and_recomputes_totals(tmp_path) -> None:
    path = _write_csv(
        tmp_path,
        "date,inStore,delivery,food,posFees,netIncome\n"
        "2025-02-14,1100,500,400,16,999999\n"
        "2025-01-03,1000,400,350,14,999999\n",
    )

    series = read_actuals(path)

    assert [p.date for p in series] == [dt.date(2025, 1, 1), dt.date(2025, 2, 1)]
    first = series[0]
    assert first.revenue.in_store == 1000.0
    assert first.revenue.total == pytest.approx(1400.0)
    assert first.expenses.g_and_a.pos_fees == 14.0
    # Totals in the file are ignored
    assert first.operating_income == pytest.approx(1400.0 - 350.0 - 14.0)
    assert first.net_income == pytest.approx(first.operating_income * 0.75)


def test_read_actuals_rejects_gaps(tmp_path) -> None:
    path = _write_csv(
        tmp_path,
        "date,in_store\n2025-01-01,1000\n2025-03-01,1000\n",
    )

    with pytest.raises(ValueError, match="not consecutive"):
        read_actuals(path)


@pytest.mark.parametrize(
    "text",
    [
        "month,in_store\n2025-01-01,1000\n",
        "date,revenue\n2025-01-01,1000\n",
        "date,in_store\nsoon,1000\n",
        "date,in_store\n2025-01-01,lots\n",
    ],
)
def test_read_actuals_rejects_invalid_structure(tmp_path, text) -> None:
    with pytest.raises(ValueError):
        read_actuals(_write_csv(tmp_path, text))


def test_write_series_round_trip(tmp_path) -> None:
    source = _write_csv(
        tmp_path,
        "date,in_store,food,rent\n"
        "2025-01-01,1000.123,300,200\n"
        "2025-02-01,1100,330,200\n",
    )
    series = read_actuals(source)
    out = tmp_path / "out.csv"

    write_series(series, out)

    df = pd.read_csv(out)
    assert df["date"].tolist() == ["2025-01-01", "2025-02-01"]
    assert df["in_store"].tolist() == [1000.12, 1100.0]
    assert df["net_income"].iloc[1] == pytest.approx(427.5)
    assert read_actuals(out)[1] == series[1]
