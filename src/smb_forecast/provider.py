# SMB Forecast - Financial Dashboard & Forecasting for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Actuals provider.

The provider is built once when the application starts (from a CSV file
or from the seeded sample generator) and passed explicitly to whatever
needs actuals: CLI handlers, the rule-based resolver, summaries. There is
no module-level dataset.
"""

import datetime as dt
import os
from dataclasses import dataclass
from typing import Union

from .datagen import generate_sample_actuals
from .errors import InsufficientHistory
from .io import read_actuals
from .series import Series, trailing_window, validate_series
from .statement import TAX_RATE, PeriodStatement


@dataclass(frozen=True)
class ActualsProvider:
    """Immutable holder of the validated actuals series."""

    actuals: Series
    source: str = "memory"
    tax_rate: float = TAX_RATE

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "actuals", validate_series(self.actuals, self.tax_rate)
        )

    @classmethod
    def from_csv(
        cls, path: Union[str, "os.PathLike[str]"], tax_rate: float = TAX_RATE
    ) -> "ActualsProvider":
        return cls(
            actuals=read_actuals(path, tax_rate), source=str(path), tax_rate=tax_rate
        )

    @classmethod
    def from_sample(
        cls,
        start: dt.date = dt.date(2020, 1, 1),
        end: dt.date = dt.date(2025, 5, 1),
        seed: int = 42,
        tax_rate: float = TAX_RATE,
    ) -> "ActualsProvider":
        return cls(
            actuals=generate_sample_actuals(start, end, seed, tax_rate),
            source=f"sample(seed={seed})",
            tax_rate=tax_rate,
        )

    def __len__(self) -> int:
        return len(self.actuals)

    @property
    def last_period(self) -> PeriodStatement:
        if not self.actuals:
            raise InsufficientHistory(0, 1)
        return self.actuals[-1]

    def years(self) -> list[int]:
        """Calendar years covered, most recent first."""
        return sorted({p.date.year for p in self.actuals}, reverse=True)

    def for_year(self, year: int) -> Series:
        return tuple(p for p in self.actuals if p.date.year == year)

    def trailing(self, size: int = 12) -> Series:
        return trailing_window(self.actuals, size)
