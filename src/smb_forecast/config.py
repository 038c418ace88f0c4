# SMB Forecast - Financial Dashboard & Forecasting for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for SMB Forecast.

This module is responsible for:
- loading the application configuration from a TOML file,
- validating forecast settings and assumption overrides,
- exposing typed dataclasses used by the rest of the application.
"""

import tomllib  # Python 3.11+
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Optional

from .baseline import DEFAULT_WINDOW, BaselineAssumptions
from .projection import DEFAULT_HORIZON
from .statement import TAX_RATE

DEFAULT_CONFIG_FILE = "smb_forecast_config.toml"


@dataclass(frozen=True)
class DataConfig:
    """Where actuals come from.

    When ``actuals`` is None, a seeded sample series covering
    [sample_start, sample_end] is generated instead.
    """

    actuals: Optional[Path]
    sample_start: date = date(2020, 1, 1)
    sample_end: date = date(2025, 5, 1)
    sample_seed: int = 42


@dataclass(frozen=True)
class ForecastConfig:
    """Projection settings."""

    horizon: int = DEFAULT_HORIZON
    window: int = DEFAULT_WINDOW
    tax_rate: float = TAX_RATE
    allow_flat_growth: bool = False


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for SMB Forecast.

    This aggregates:
    - the company name and presentation currency,
    - the actuals source,
    - the forecast settings,
    - optional overrides of baseline assumptions,
    - display options.
    """

    company_name: str
    currency: str
    data: DataConfig
    forecast: ForecastConfig
    assumption_overrides: dict[str, float] = field(default_factory=dict)
    decimals: int = 2


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, Mapping):
        raise ValueError(f"Config section [{name}] must be a table.")
    return value


def _parse_date(value: Any, key: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError as exc:
        raise ValueError(
            f"Invalid date for '{key}', expected YYYY-MM-DD format."
        ) from exc


def _parse_data(section: Mapping[str, Any], base_dir: Path) -> DataConfig:
    actuals_raw = section.get("actuals") or None
    actuals = (base_dir / str(actuals_raw)).resolve() if actuals_raw else None

    start = _parse_date(section.get("sample_start", "2020-01-01"), "data.sample_start")
    end = _parse_date(section.get("sample_end", "2025-05-01"), "data.sample_end")
    if end < start:
        raise ValueError("data.sample_end cannot be before data.sample_start.")

    try:
        seed = int(section.get("sample_seed", 42))
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "Invalid value for 'data.sample_seed'. Expected an integer."
        ) from exc

    return DataConfig(
        actuals=actuals, sample_start=start, sample_end=end, sample_seed=seed
    )


def _parse_forecast(section: Mapping[str, Any]) -> ForecastConfig:
    try:
        horizon = int(section.get("horizon", DEFAULT_HORIZON))
        window = int(section.get("window", DEFAULT_WINDOW))
        tax_rate = float(section.get("tax_rate", TAX_RATE))
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "Invalid value in [forecast]: 'horizon' and 'window' must be "
            "integers, 'tax_rate' a number."
        ) from exc

    if horizon <= 0:
        raise ValueError("forecast.horizon must be a positive integer.")
    if window < 2:
        raise ValueError("forecast.window must be at least 2.")
    if not 0.0 <= tax_rate < 1.0:
        raise ValueError("forecast.tax_rate must be in [0, 1).")

    allow_flat_growth = section.get("allow_flat_growth", False)
    if not isinstance(allow_flat_growth, bool):
        raise ValueError(
            "Invalid value for 'forecast.allow_flat_growth'. Expected true or false."
        )

    return ForecastConfig(
        horizon=horizon,
        window=window,
        tax_rate=tax_rate,
        allow_flat_growth=allow_flat_growth,
    )


def _parse_overrides(section: Mapping[str, Any]) -> dict[str, float]:
    # Validate keys against the assumption schema without deriving anything
    known = set(BaselineAssumptions().as_dict())
    overrides: dict[str, float] = {}
    for key, value in section.items():
        if key not in known:
            raise ValueError(f"Unknown assumption override '{key}' in [assumptions].")
        try:
            overrides[str(key)] = float(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(
                f"Invalid value for 'assumptions.{key}'. Expected a number."
            ) from exc
    return overrides


def default_app_config() -> AppConfig:
    """Configuration used when no TOML file exists (sample data, defaults)."""
    return AppConfig(
        company_name="Sample Taqueria",
        currency="USD",
        data=DataConfig(actuals=None),
        forecast=ForecastConfig(),
    )


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the SMB Forecast application configuration from a TOML file.

    Expected top-level sections in the TOML file
    --------------------------------------------
    [company]
        name, currency.

    [data]
        actuals: CSV path of monthly actuals (optional). When omitted, a
        seeded sample series is generated from sample_start, sample_end
        and sample_seed.

    [forecast]
        horizon (months, default 12), window (trailing months used for
        baseline derivation, default 12), tax_rate (default 0.25),
        allow_flat_growth (default false).

    [assumptions]
        Optional overrides of baseline assumptions, keyed
        'growth_<line>', 'ratio_<item>' or 'average_<item>'.

    [display]
        decimals (default 2).

    All file paths are resolved relative to the directory of the TOML file.

    Parameters
    ----------
    config_path : str, optional
        Path to the TOML file. Defaults to 'smb_forecast_config.toml' in the
        current working directory.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.
    """
    config_file = Path(config_path or DEFAULT_CONFIG_FILE).resolve()

    raw = _load_toml(config_file)
    base_dir = config_file.parent

    company = _section(raw, "company")
    display = _section(raw, "display")

    try:
        decimals = int(display.get("decimals", 2))
    except (TypeError, ValueError):
        decimals = 2

    return AppConfig(
        company_name=str(company.get("name") or "My company"),
        currency=str(company.get("currency") or "USD"),
        data=_parse_data(_section(raw, "data"), base_dir),
        forecast=_parse_forecast(_section(raw, "forecast")),
        assumption_overrides=_parse_overrides(_section(raw, "assumptions")),
        decimals=decimals,
    )
