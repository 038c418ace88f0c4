from datetime import date
from pathlib import Path

import pytest

from smb_forecast.config import default_app_config, load_app_config


def _write_config(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "smb_forecast_config.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_app_config_full(tmp_path) -> None:
    path = _write_config(
        tmp_path,
        """
[company]
name = "Casa Taco"
currency = "EUR"

[data]
actuals = "data/actuals.csv"

[forecast]
horizon = 6
window = 9
tax_rate = 0.2
allow_flat_growth = true

[assumptions]
growth_in_store = 250
ratio_food = 0.24

[display]
decimals = 0
""",
    )

    cfg = load_app_config(str(path))

    assert cfg.company_name == "Casa Taco"
    assert cfg.currency == "EUR"
    assert cfg.data.actuals == (tmp_path / "data" / "actuals.csv").resolve()
    assert cfg.forecast.horizon == 6
    assert cfg.forecast.window == 9
    assert cfg.forecast.tax_rate == pytest.approx(0.2)
    assert cfg.forecast.allow_flat_growth is True
    assert cfg.assumption_overrides == {"growth_in_store": 250.0, "ratio_food": 0.24}
    assert cfg.decimals == 0


def test_load_app_config_defaults(tmp_path) -> None:
    cfg = load_app_config(str(_write_config(tmp_path, "[company]\nname = 'X'\n")))

    assert cfg.data.actuals is None
    assert cfg.data.sample_start == date(2020, 1, 1)
    assert cfg.data.sample_end == date(2025, 5, 1)
    assert cfg.forecast.horizon == 12
    assert cfg.forecast.tax_rate == pytest.approx(0.25)
    assert cfg.assumption_overrides == {}


@pytest.mark.parametrize(
    "text",
    [
        "[forecast]\nhorizon = 0\n",
        "[forecast]\nwindow = 1\n",
        "[forecast]\ntax_rate = 1.5\n",
        "[assumptions]\ngrowth_merch = 1\n",
        "[forecast]\nallow_flat_growth = \"false\"\n",
        "[assumptions]\nratio_food = 'high'\n",
        "[data]\nsample_start = 2025-01-01\nsample_end = 2024-01-01\n",
        "forecast = 3\n",
        "[company\n",
    ],
)
def test_load_app_config_rejects_invalid_values(tmp_path, text) -> None:
    with pytest.raises(ValueError):
        load_app_config(str(_write_config(tmp_path, text)))


def test_load_app_config_missing_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_app_config(str(tmp_path / "missing.toml"))


def test_default_app_config_uses_sample_data() -> None:
    cfg = default_app_config()

    assert cfg.data.actuals is None
    assert cfg.forecast.window == 12
