# SMB Forecast - Financial Dashboard & Forecasting for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Scenario modifications for SMB Forecast.

A modification is a typed, targeted and bounded operation on one leaf of
a period statement, for example "reduce packaging costs by 15 %" or "add
$4,200 of monthly wages from March". Modifications are produced by an
intent resolver (rule-based or language-model based, see resolver.py),
reviewed and adjusted by the user, then collected in a Scenario and
consumed by the projection engine.

Kinds
-----
- percentage : new_leaf = leaf * (1 + value / 100)
- fixed      : new_leaf = leaf + value   (absolute monthly delta)

Targets are validated against the statement schema when a modification is
built (``TargetNotFound``), and parameter values against their bounds when
a modification enters a Scenario or its value is edited
(``InvalidParameterRange``).

Modifications never recompute totals themselves: the projection engine
applies all of them to a period, then calls ``recompute_totals()`` once.
"""

import datetime as dt
import uuid
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field, replace
from typing import Literal, Optional

import pandas as pd

from .errors import InvalidParameterRange
from .series import month_start
from .statement import PeriodStatement, get_leaf, resolve_leaf, set_leaf

ModificationKind = Literal["percentage", "fixed"]
KINDS: tuple[str, ...] = ("percentage", "fixed")


@dataclass(frozen=True)
class Target:
    """A (category, item) pair resolved against the statement schema.

    The pair is normalized at construction ('inStore' becomes 'in_store',
    ('expenses', 'wages') becomes ('expenses.labor', 'wages')). Unknown
    pairs raise ``TargetNotFound``.
    """

    category: str
    item: str

    def __post_init__(self) -> None:
        leaf = resolve_leaf(self.category, self.item)
        object.__setattr__(self, "category", leaf.category)
        object.__setattr__(self, "item", leaf.item)

    @property
    def label(self) -> str:
        return resolve_leaf(self.category, self.item).label

    def __str__(self) -> str:
        return f"{self.category}.{self.item}"


@dataclass(frozen=True)
class Parameter:
    """Bounded numeric parameter with a step for interactive adjustment.

    Attributes:
        value: Current value (percent for 'percentage', currency for 'fixed').
        minimum: Lowest accepted value.
        maximum: Highest accepted value.
        step: Slider step.
        unit: '%' or '$'.
    """

    value: float
    minimum: float
    maximum: float
    step: float = 1.0
    unit: str = "%"

    def __post_init__(self) -> None:
        if self.minimum > self.maximum:
            raise ValueError(
                f"Parameter minimum {self.minimum} is greater than maximum "
                f"{self.maximum}."
            )
        if self.step <= 0:
            raise ValueError("Parameter step must be strictly positive.")

    @property
    def in_range(self) -> bool:
        return self.minimum <= self.value <= self.maximum

    def validate(self) -> None:
        if not self.in_range:
            raise InvalidParameterRange(self.value, self.minimum, self.maximum)


@dataclass(frozen=True)
class Modification:
    """
    A user-approved scenario operation.

    ``description`` and ``explanation`` are informational only and never
    read by the arithmetic. ``start_date`` gates the modification: periods
    before it are left untouched. ``None`` means "from the first forecast
    period onward".
    """

    kind: ModificationKind
    target: Target
    parameter: Parameter
    description: str = ""
    explanation: str = ""
    start_date: Optional[dt.date] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self) -> None:
        if self.kind not in KINDS:
            raise ValueError(
                f"Unknown modification kind {self.kind!r}, expected one of {KINDS}."
            )
        if self.start_date is not None:
            object.__setattr__(self, "start_date", month_start(self.start_date))

    def applies_to(self, period_date: dt.date) -> bool:
        return self.start_date is None or self.start_date <= period_date

    def with_value(self, value: float) -> "Modification":
        """Return a copy with a new (unvalidated) parameter value."""
        return replace(self, parameter=replace(self.parameter, value=float(value)))


def apply_modification(
    period: PeriodStatement, modification: Modification
) -> PeriodStatement:
    """Apply one modification to a period and return the new period.

    The function is pure: ``period`` is left untouched. It is a no-op when
    the modification starts after the period. Totals are NOT recomputed.
    """
    if not modification.applies_to(period.date):
        return period

    target = modification.target
    leaf = get_leaf(period, target.category, target.item)
    value = modification.parameter.value

    if modification.kind == "percentage":
        new_leaf = leaf * (1 + value / 100)
    else:
        new_leaf = leaf + value

    return set_leaf(period, target.category, target.item, new_leaf)


def apply_all(
    period: PeriodStatement, modifications: Iterable[Modification]
) -> PeriodStatement:
    """Apply modifications in order, each one on the output of the previous."""
    for modification in modifications:
        period = apply_modification(period, modification)
    return period


# ---------------------------------------------------------------------------
# Factory and descriptions
# ---------------------------------------------------------------------------


def _format_currency(value: float) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.0f}"


def default_parameter(kind: str, value: float) -> Parameter:
    """Default bounds for a resolver-proposed value.

    - percentage: [-100, max(100, 2 * |value|)], step 1
    - fixed:      [0.5 * value, 1.5 * value] (ordered), step 100,
                  or [-1000, 1000] when the value is zero.
    """
    value = float(value)
    if kind == "percentage":
        return Parameter(
            value=value,
            minimum=-100.0,
            maximum=max(100.0, 2 * abs(value)),
            step=1.0,
            unit="%",
        )
    if value == 0:
        return Parameter(
            value=0.0, minimum=-1000.0, maximum=1000.0, step=100.0, unit="$"
        )
    low, high = sorted((value * 0.5, value * 1.5))
    return Parameter(value=value, minimum=low, maximum=high, step=100.0, unit="$")


def describe(modification: Modification) -> str:
    """Human-readable summary using the modification's current value."""
    target = modification.target
    value = modification.parameter.value
    if modification.kind == "percentage":
        verb = "Increase" if value >= 0 else "Decrease"
        text = f"{verb} {target.label.lower()} by {abs(value):g}%"
    else:
        verb = "Add" if value >= 0 else "Remove"
        amount = _format_currency(abs(value))
        text = f"{verb} {amount} per month to {target.label.lower()}"
    if modification.start_date is not None:
        text += f" from {modification.start_date:%Y-%m}"
    return text + "."


def make_modification(
    kind: str,
    category: str,
    item: str,
    value: float,
    start_date: Optional[dt.date] = None,
    parameter: Optional[Parameter] = None,
    description: Optional[str] = None,
    explanation: str = "",
) -> Modification:
    """Build a Modification, filling default bounds and description.

    Raises:
        TargetNotFound: if (category, item) is not a statement leaf.
        ValueError: for an unknown kind.
    """
    if kind not in KINDS:
        raise ValueError(
            f"Unknown modification kind {kind!r}, expected one of {KINDS}."
        )
    mod = Modification(
        kind=kind,  # type: ignore[arg-type]
        target=Target(category, item),
        parameter=parameter or default_parameter(kind, value),
        explanation=explanation,
        start_date=start_date,
    )
    return replace(mod, description=description or describe(mod))


# ---------------------------------------------------------------------------
# Active scenario
# ---------------------------------------------------------------------------


class Scenario:
    """Ordered set of active modifications.

    Insertion order is application order: when several modifications target
    the same leaf, each operates on the output of the previous one. The
    registry validates parameter bounds on insertion and on edit, so the
    projection engine only ever receives in-range values.
    """

    def __init__(self, modifications: Iterable[Modification] = ()):
        self._items: dict[str, Modification] = {}
        self.extend(modifications)

    def __iter__(self) -> Iterator[Modification]:
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, modification_id: object) -> bool:
        return modification_id in self._items

    @property
    def modifications(self) -> tuple[Modification, ...]:
        """Snapshot of the active modifications, in application order."""
        return tuple(self._items.values())

    def add(self, modification: Modification) -> Modification:
        modification.parameter.validate()
        if modification.id in self._items:
            raise ValueError(f"Duplicate modification id: {modification.id}")
        self._items[modification.id] = modification
        return modification

    def extend(self, modifications: Iterable[Modification]) -> None:
        for modification in modifications:
            self.add(modification)

    def get(self, modification_id: str) -> Modification:
        try:
            return self._items[modification_id]
        except KeyError:
            raise KeyError(
                f"No active modification with id {modification_id!r}"
            ) from None

    def update_value(self, modification_id: str, value: float) -> Modification:
        """Change a modification's parameter value, keeping its position."""
        updated = self.get(modification_id).with_value(value)
        updated.parameter.validate()
        updated = replace(updated, description=describe(updated))
        self._items[modification_id] = updated
        return updated

    def remove(self, modification_id: str) -> Modification:
        modification = self.get(modification_id)
        del self._items[modification_id]
        return modification

    def clear(self) -> None:
        self._items.clear()


def modifications_to_frame(modifications: Iterable[Modification]) -> pd.DataFrame:
    """Display table of modifications (one row each, application order)."""
    columns = [
        "id",
        "kind",
        "category",
        "item",
        "value",
        "unit",
        "minimum",
        "maximum",
        "start_date",
        "description",
    ]
    rows = [
        {
            "id": m.id,
            "kind": m.kind,
            "category": m.target.category,
            "item": m.target.item,
            "value": m.parameter.value,
            "unit": m.parameter.unit,
            "minimum": m.parameter.minimum,
            "maximum": m.parameter.maximum,
            "start_date": m.start_date.isoformat() if m.start_date else "",
            "description": m.description,
        }
        for m in modifications
    ]
    return pd.DataFrame(rows, columns=columns)
