# SMB Forecast - Financial Dashboard & Forecasting for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Error types raised by the forecasting engine.

All engine errors derive from ``ForecastError``, itself a ``ValueError``,
so callers that already handle ``ValueError`` (CLI, configuration loaders)
keep working without special cases.
"""


class ForecastError(ValueError):
    """Base class for every error raised by the forecasting engine."""


class InsufficientHistory(ForecastError):
    """Raised when too few actual periods are available to derive slopes."""

    def __init__(self, available: int, required: int = 2):
        self.available = available
        self.required = required
        super().__init__(
            f"Insufficient history: {available} actual period(s) available, "
            f"at least {required} required to derive growth slopes."
        )


class TargetNotFound(ForecastError):
    """Raised when a modification targets a (category, item) pair that does
    not exist in the statement schema."""

    def __init__(self, category: str, item: str):
        self.category = category
        self.item = item
        super().__init__(f"Unknown modification target: ({category!r}, {item!r}).")


class InvalidParameterRange(ForecastError):
    """Raised when a parameter value falls outside its declared bounds."""

    def __init__(self, value: float, minimum: float, maximum: float):
        self.value = value
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(
            f"Parameter value {value} is outside the allowed range "
            f"[{minimum}, {maximum}]."
        )


class InvalidStatement(ForecastError):
    """Raised when a period statement violates one of its total invariants."""

    def __init__(self, field: str, expected: float, actual: float):
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Invalid statement: '{field}' is {actual}, expected {expected}."
        )
