# SMB Forecast - Financial Dashboard & Forecasting for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Chart of accounts for scenario modifications.

The chart of accounts is the read-only list of (category, item) pairs a
modification may target. It is derived from the statement schema and
handed to intent resolvers so they only propose valid targets.
"""

from dataclasses import dataclass
from typing import Any

from .errors import TargetNotFound
from .statement import LEAF_FIELDS, resolve_leaf


@dataclass(frozen=True)
class ChartOfAccounts:
    """Enumeration of modifiable (category, item) pairs."""

    pairs: tuple[tuple[str, str], ...]

    @classmethod
    def default(cls) -> "ChartOfAccounts":
        return cls(pairs=tuple(f.key for f in LEAF_FIELDS))

    @property
    def categories(self) -> tuple[str, ...]:
        seen: dict[str, None] = {}
        for category, _ in self.pairs:
            seen.setdefault(category, None)
        return tuple(seen)

    def items(self, category: str) -> tuple[str, ...]:
        return tuple(item for cat, item in self.pairs if cat == category)

    def contains(self, category: str, item: str) -> bool:
        """Return True if (category, item), after alias resolution, is listed."""
        try:
            leaf = resolve_leaf(category, item)
        except TargetNotFound:
            return False
        return leaf.key in self.pairs

    def to_payload(self) -> dict[str, Any]:
        """Shape sent to the language-model resolver.

        {
          "revenue": ["in_store", ...],
          "cogs": ["food", ...],
          "expenses": {"labor": [...], "marketing": [...], ...}
        }
        """
        expenses: dict[str, list[str]] = {}
        for category, item in self.pairs:
            if category == "expenses":
                expenses.setdefault(item, []).append(item)
            elif category.startswith("expenses."):
                expenses.setdefault(category.split(".", 1)[1], []).append(item)
        return {
            "revenue": list(self.items("revenue")),
            "cogs": list(self.items("cogs")),
            "expenses": expenses,
        }
