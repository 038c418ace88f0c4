# SMB Forecast - Financial Dashboard & Forecasting for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Financial statement model for SMB Forecast.

This module defines the structure of one month of financial data (a
"period statement") for a small restaurant-style business, together with
the single operation that keeps it arithmetically consistent:
``recompute_totals()``.

Structure
---------
A period statement is a tree of frozen dataclasses:

    PeriodStatement
      date                  first day of the calendar month
      revenue               in_store, delivery, catering, total
      cogs                  food, beverages, packaging, total
      gross_profit
      expenses
        labor               wages, salaries, total
        marketing
        rent_and_utilities  rent, utilities, total
        g_and_a             pos_fees, delivery_commissions, insurance,
                            repairs, total
        total
      operating_income
      net_income

Leaves are the only independent values. The eight derived fields (every
``total``, ``gross_profit``, ``operating_income`` and ``net_income``) are
always rewritten bottom-up by ``recompute_totals()``. Nothing in the code
base sets a derived field directly.

Leaf lookup
-----------
Modification targets are resolved through ``LEAF_FIELDS``, a closed table
of ``(category, item)`` pairs built once from the schema. camelCase names
coming from the dashboard front-end or the language-model resolver
(``inStore``, ``rentAndUtilities``, ``gAndA``...) are accepted as aliases.

All helpers return new objects (``dataclasses.replace``); statements are
never mutated in place.
"""

import datetime as dt
import re
from dataclasses import dataclass, field, replace
from typing import Any, Optional

from .errors import InvalidStatement, TargetNotFound

# Fixed corporate tax rate applied to positive operating income.
TAX_RATE: float = 0.25

# Absolute tolerance used when checking total invariants.
TOLERANCE: float = 1e-6


@dataclass(frozen=True)
class Revenue:
    in_store: float = 0.0
    delivery: float = 0.0
    catering: float = 0.0
    total: float = 0.0


@dataclass(frozen=True)
class Cogs:
    food: float = 0.0
    beverages: float = 0.0
    packaging: float = 0.0
    total: float = 0.0


@dataclass(frozen=True)
class Labor:
    wages: float = 0.0
    salaries: float = 0.0
    total: float = 0.0


@dataclass(frozen=True)
class RentAndUtilities:
    rent: float = 0.0
    utilities: float = 0.0
    total: float = 0.0


@dataclass(frozen=True)
class GeneralAndAdmin:
    pos_fees: float = 0.0
    delivery_commissions: float = 0.0
    insurance: float = 0.0
    repairs: float = 0.0
    total: float = 0.0


@dataclass(frozen=True)
class Expenses:
    labor: Labor = field(default_factory=Labor)
    marketing: float = 0.0
    rent_and_utilities: RentAndUtilities = field(default_factory=RentAndUtilities)
    g_and_a: GeneralAndAdmin = field(default_factory=GeneralAndAdmin)
    total: float = 0.0


@dataclass(frozen=True)
class PeriodStatement:
    """One month of financial data.

    Only leaves should be provided when building a statement by hand; use
    ``build_statement()`` which calls ``recompute_totals()`` for you.
    """

    date: dt.date
    revenue: Revenue = field(default_factory=Revenue)
    cogs: Cogs = field(default_factory=Cogs)
    gross_profit: float = 0.0
    expenses: Expenses = field(default_factory=Expenses)
    operating_income: float = 0.0
    net_income: float = 0.0

    @property
    def taxes(self) -> float:
        """Income taxes implied by operating and net income."""
        return self.operating_income - self.net_income


# ---------------------------------------------------------------------------
# Leaf lookup table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LeafField:
    """A leaf of the statement schema, addressable as (category, item).

    Attributes:
        category: Dotted group name (e.g. 'cogs', 'expenses.labor').
        item: Leaf name within the group (e.g. 'packaging', 'wages').
        path: Attribute path from the statement root.
        label: Human-readable label.
    """

    category: str
    item: str
    path: tuple[str, ...]
    label: str

    @property
    def key(self) -> tuple[str, str]:
        return (self.category, self.item)


LEAF_FIELDS: tuple[LeafField, ...] = (
    LeafField("revenue", "in_store", ("revenue", "in_store"), "In-store sales"),
    LeafField("revenue", "delivery", ("revenue", "delivery"), "Delivery sales"),
    LeafField("revenue", "catering", ("revenue", "catering"), "Catering sales"),
    LeafField("cogs", "food", ("cogs", "food"), "Food"),
    LeafField("cogs", "beverages", ("cogs", "beverages"), "Beverages"),
    LeafField("cogs", "packaging", ("cogs", "packaging"), "Packaging"),
    LeafField(
        "expenses.labor", "wages", ("expenses", "labor", "wages"), "Hourly wages"
    ),
    LeafField(
        "expenses.labor", "salaries", ("expenses", "labor", "salaries"), "Salaries"
    ),
    LeafField("expenses", "marketing", ("expenses", "marketing"), "Marketing"),
    LeafField(
        "expenses.rent_and_utilities",
        "rent",
        ("expenses", "rent_and_utilities", "rent"),
        "Rent",
    ),
    LeafField(
        "expenses.rent_and_utilities",
        "utilities",
        ("expenses", "rent_and_utilities", "utilities"),
        "Utilities",
    ),
    LeafField(
        "expenses.g_and_a",
        "pos_fees",
        ("expenses", "g_and_a", "pos_fees"),
        "POS fees",
    ),
    LeafField(
        "expenses.g_and_a",
        "delivery_commissions",
        ("expenses", "g_and_a", "delivery_commissions"),
        "Delivery commissions",
    ),
    LeafField(
        "expenses.g_and_a",
        "insurance",
        ("expenses", "g_and_a", "insurance"),
        "Insurance",
    ),
    LeafField(
        "expenses.g_and_a", "repairs", ("expenses", "g_and_a", "repairs"), "Repairs"
    ),
)

LEAF_BY_KEY: dict[tuple[str, str], LeafField] = {f.key: f for f in LEAF_FIELDS}
LEAF_BY_ITEM: dict[str, LeafField] = {f.item: f for f in LEAF_FIELDS}

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def normalize_name(name: str) -> str:
    """Convert a camelCase or spaced name to the schema's snake_case.

    Examples:
        'inStore'          → 'in_store'
        'rentAndUtilities' → 'rent_and_utilities'
        'gAndA'            → 'g_and_a'
        'Delivery Commissions' → 'delivery_commissions'
    """
    s = str(name).strip()
    s = _CAMEL_BOUNDARY.sub("_", s)
    s = re.sub(r"[\s\-]+", "_", s)
    return re.sub(r"_+", "_", s).lower()


def _normalize_category(category: str) -> str:
    return ".".join(normalize_name(part) for part in str(category).split("."))


def resolve_leaf(category: str, item: str) -> LeafField:
    """Return the LeafField addressed by (category, item).

    Resolution rules, in order:
      1. exact match after name normalization,
      2. a group name without its 'expenses.' prefix (e.g. 'labor'),
      3. the bare 'expenses' category with an item that belongs to exactly
         one expense group (e.g. ('expenses', 'wages')).

    Raises:
        TargetNotFound: if no leaf matches.
    """
    cat = _normalize_category(category)
    it = normalize_name(item)

    leaf = LEAF_BY_KEY.get((cat, it))
    if leaf is not None:
        return leaf

    leaf = LEAF_BY_KEY.get((f"expenses.{cat}", it))
    if leaf is not None:
        return leaf

    if cat == "expenses":
        candidate = LEAF_BY_ITEM.get(it)
        if candidate is not None and candidate.category.startswith("expenses"):
            return candidate

    raise TargetNotFound(category, item)


def get_leaf(period: PeriodStatement, category: str, item: str) -> float:
    """Return the value of a leaf addressed by (category, item)."""
    leaf = resolve_leaf(category, item)
    value: Any = period
    for attr in leaf.path:
        value = getattr(value, attr)
    return float(value)


def _replace_path(obj: Any, path: tuple[str, ...], value: float) -> Any:
    head, rest = path[0], path[1:]
    if not rest:
        return replace(obj, **{head: value})
    return replace(obj, **{head: _replace_path(getattr(obj, head), rest, value)})


def set_leaf(
    period: PeriodStatement, category: str, item: str, value: float
) -> PeriodStatement:
    """Return a copy of ``period`` with one leaf replaced.

    Totals are NOT recomputed; call ``recompute_totals()`` once all leaf
    changes for the period have been made.
    """
    leaf = resolve_leaf(category, item)
    return _replace_path(period, leaf.path, float(value))


# ---------------------------------------------------------------------------
# Totals
# ---------------------------------------------------------------------------


def compute_taxes(operating_income: float, tax_rate: float = TAX_RATE) -> float:
    """Taxes owed on operating income (zero when it is not positive)."""
    return max(operating_income, 0.0) * tax_rate


def recompute_totals(
    period: PeriodStatement, tax_rate: float = TAX_RATE
) -> PeriodStatement:
    """Return a copy of ``period`` with every derived field rewritten.

    The walk is bottom-up: group totals first, then gross profit, the
    expenses total, operating income and finally net income. ``date`` and
    leaves are left untouched, so the function is idempotent.
    """
    r = period.revenue
    revenue = replace(r, total=r.in_store + r.delivery + r.catering)

    c = period.cogs
    cogs = replace(c, total=c.food + c.beverages + c.packaging)

    gross_profit = revenue.total - cogs.total

    e = period.expenses
    labor = replace(e.labor, total=e.labor.wages + e.labor.salaries)
    rent_and_utilities = replace(
        e.rent_and_utilities,
        total=e.rent_and_utilities.rent + e.rent_and_utilities.utilities,
    )
    g = e.g_and_a
    g_and_a = replace(
        g, total=g.pos_fees + g.delivery_commissions + g.insurance + g.repairs
    )
    expenses = replace(
        e,
        labor=labor,
        rent_and_utilities=rent_and_utilities,
        g_and_a=g_and_a,
        total=labor.total + e.marketing + rent_and_utilities.total + g_and_a.total,
    )

    operating_income = gross_profit - expenses.total
    net_income = operating_income - compute_taxes(operating_income, tax_rate)

    return replace(
        period,
        revenue=revenue,
        cogs=cogs,
        gross_profit=gross_profit,
        expenses=expenses,
        operating_income=operating_income,
        net_income=net_income,
    )


def build_statement(
    date: dt.date, tax_rate: float = TAX_RATE, **leaves: float
) -> PeriodStatement:
    """Build a consistent statement from leaf values.

    Leaves are given by item name (``in_store=1000.0, wages=250.0``...).
    Missing leaves default to 0.0; unknown names raise ``TargetNotFound``.
    ``date`` (a date, datetime or pandas Timestamp) is stored as a plain
    date on the first day of its month.
    """
    period = PeriodStatement(date=dt.date(date.year, date.month, 1))
    for name, value in leaves.items():
        leaf = LEAF_BY_ITEM.get(normalize_name(name))
        if leaf is None:
            raise TargetNotFound("*", name)
        period = _replace_path(period, leaf.path, float(value))
    return recompute_totals(period, tax_rate)


def _derived_fields(period: PeriodStatement) -> dict[str, float]:
    e = period.expenses
    return {
        "revenue.total": period.revenue.total,
        "cogs.total": period.cogs.total,
        "gross_profit": period.gross_profit,
        "expenses.labor.total": e.labor.total,
        "expenses.rent_and_utilities.total": e.rent_and_utilities.total,
        "expenses.g_and_a.total": e.g_and_a.total,
        "expenses.total": e.total,
        "operating_income": period.operating_income,
        "net_income": period.net_income,
    }


def check_invariants(
    period: PeriodStatement,
    tax_rate: float = TAX_RATE,
    tolerance: float = TOLERANCE,
) -> None:
    """Raise InvalidStatement on the first derived field that is inconsistent
    with its leaves."""
    actual = _derived_fields(period)
    expected = _derived_fields(recompute_totals(period, tax_rate))
    for name, value in expected.items():
        if abs(actual[name] - value) > tolerance:
            raise InvalidStatement(name, value, actual[name])


def is_valid(
    period: PeriodStatement,
    tax_rate: float = TAX_RATE,
    tolerance: float = TOLERANCE,
) -> bool:
    """Return True when every total invariant holds."""
    try:
        check_invariants(period, tax_rate, tolerance)
    except InvalidStatement:
        return False
    return True


# ---------------------------------------------------------------------------
# Flat and row representations
# ---------------------------------------------------------------------------

# Column order of the wide (one row per month) representation.
DERIVED_COLUMNS: tuple[str, ...] = (
    "revenue_total",
    "cogs_total",
    "gross_profit",
    "labor_total",
    "rent_and_utilities_total",
    "g_and_a_total",
    "expenses_total",
    "operating_income",
    "net_income",
)
LEAF_COLUMNS: tuple[str, ...] = tuple(f.item for f in LEAF_FIELDS)
FLAT_COLUMNS: tuple[str, ...] = ("date",) + LEAF_COLUMNS + DERIVED_COLUMNS


def to_flat_dict(period: PeriodStatement) -> dict[str, Any]:
    """Flatten a statement into a single-level dict keyed by FLAT_COLUMNS."""
    out: dict[str, Any] = {"date": period.date}
    for leaf in LEAF_FIELDS:
        value: Any = period
        for attr in leaf.path:
            value = getattr(value, attr)
        out[leaf.item] = float(value)

    e = period.expenses
    out.update(
        {
            "revenue_total": period.revenue.total,
            "cogs_total": period.cogs.total,
            "gross_profit": period.gross_profit,
            "labor_total": e.labor.total,
            "rent_and_utilities_total": e.rent_and_utilities.total,
            "g_and_a_total": e.g_and_a.total,
            "expenses_total": e.total,
            "operating_income": period.operating_income,
            "net_income": period.net_income,
        }
    )
    return out


def from_flat_dict(
    row: dict[str, Any], tax_rate: float = TAX_RATE
) -> PeriodStatement:
    """Rebuild a statement from a flat dict.

    Only ``date`` and leaf columns are read; derived columns, if present,
    are ignored and recomputed.
    """
    date = row["date"]
    if isinstance(date, dt.datetime):
        date = date.date()
    leaves = {name: float(row.get(name, 0.0) or 0.0) for name in LEAF_COLUMNS}
    return build_statement(date, tax_rate=tax_rate, **leaves)


# (id, level, name, attribute path, type) in display order.
_STATEMENT_LAYOUT: tuple[tuple[int, int, str, tuple[str, ...], str], ...] = (
    (1, 1, "Revenue", ("revenue", "total"), "calc"),
    (2, 2, "In-store sales", ("revenue", "in_store"), "acc"),
    (3, 2, "Delivery sales", ("revenue", "delivery"), "acc"),
    (4, 2, "Catering sales", ("revenue", "catering"), "acc"),
    (5, 1, "Cost of goods sold", ("cogs", "total"), "calc"),
    (6, 2, "Food", ("cogs", "food"), "acc"),
    (7, 2, "Beverages", ("cogs", "beverages"), "acc"),
    (8, 2, "Packaging", ("cogs", "packaging"), "acc"),
    (9, 0, "Gross profit", ("gross_profit",), "calc"),
    (10, 1, "Operating expenses", ("expenses", "total"), "calc"),
    (11, 2, "Labor", ("expenses", "labor", "total"), "calc"),
    (12, 3, "Hourly wages", ("expenses", "labor", "wages"), "acc"),
    (13, 3, "Salaries", ("expenses", "labor", "salaries"), "acc"),
    (14, 2, "Marketing", ("expenses", "marketing"), "acc"),
    (
        15,
        2,
        "Rent & utilities",
        ("expenses", "rent_and_utilities", "total"),
        "calc",
    ),
    (16, 3, "Rent", ("expenses", "rent_and_utilities", "rent"), "acc"),
    (17, 3, "Utilities", ("expenses", "rent_and_utilities", "utilities"), "acc"),
    (18, 2, "General & administrative", ("expenses", "g_and_a", "total"), "calc"),
    (19, 3, "POS fees", ("expenses", "g_and_a", "pos_fees"), "acc"),
    (
        20,
        3,
        "Delivery commissions",
        ("expenses", "g_and_a", "delivery_commissions"),
        "acc",
    ),
    (21, 3, "Insurance", ("expenses", "g_and_a", "insurance"), "acc"),
    (22, 3, "Repairs", ("expenses", "g_and_a", "repairs"), "acc"),
    (23, 0, "Operating income", ("operating_income",), "calc"),
    (24, 1, "Income taxes", ("taxes",), "calc"),
    (25, 0, "Net income", ("net_income",), "calc"),
)


def statement_to_rows(
    period: PeriodStatement, max_level: Optional[int] = None
) -> list[dict[str, Any]]:
    """Return the statement as display rows.

    Each row is a dict with keys:
        display_order, id, level, name, type, amount

    Args:
        period: Statement to render.
        max_level: Optional level filter (0 keeps only the headline rows).
    """
    rows: list[dict[str, Any]] = []
    for row_id, level, name, path, row_type in _STATEMENT_LAYOUT:
        if max_level is not None and level > max_level:
            continue
        value: Any = period
        for attr in path:
            value = getattr(value, attr)
        rows.append(
            {
                "display_order": row_id * 10,
                "id": row_id,
                "level": level,
                "name": name,
                "type": row_type,
                "amount": round(float(value), 2),
            }
        )
    return rows
