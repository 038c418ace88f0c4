# SMB Forecast - Financial Dashboard & Forecasting for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Intent resolution: from free text to scenario modifications.

Turning "hire two cooks" into a modification is not the engine's job. This
module defines the contract between the engine and whatever resolves user
intent, plus two resolvers:

1. ``parse_resolver_response()``
   ------------------------------
   Parses the structured JSON returned by the language-model endpoint:

       {"responseType": "modification",
        "data": [{"type": "percentage", "category": "revenue",
                  "item": "inStore", "value": 15, "startDate": "2025-08"}]}

       {"responseType": "question",
        "data": "Which revenue item would you like to increase?"}

   Items that do not resolve to a chart-of-accounts target are dropped (and
   logged). When nothing usable is left, a clarifying question is returned
   instead of an empty scenario.

2. ``RuleBasedResolver``
   ----------------------
   Offline keyword rules used when no language model is configured:
   cheaper supplies, hiring, and explicit "increase X by N%" requests.

Ambiguity is never an exception: a resolver answers with a
``ResolverResult`` whose ``question`` is set.
"""

import datetime as dt
import json
import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Optional, Union

from .chart import ChartOfAccounts
from .errors import TargetNotFound
from .modifications import Modification, Parameter, make_modification
from .series import month_start
from .statement import LEAF_FIELDS, PeriodStatement

logger = logging.getLogger(__name__)

FALLBACK_QUESTION = (
    "I couldn't identify a specific change from your request. Which line "
    "item would you like to adjust, and by how much?"
)


@dataclass(frozen=True)
class ResolverResult:
    """Outcome of intent resolution: modifications, or a clarifying question."""

    modifications: tuple[Modification, ...] = ()
    question: Optional[str] = None

    @property
    def is_question(self) -> bool:
        return self.question is not None


def _parse_start_date(raw: Any) -> Optional[dt.date]:
    if raw in (None, ""):
        return None
    return month_start(raw)


def _modification_from_item(
    item: Mapping[str, Any], chart: ChartOfAccounts
) -> Modification:
    kind = str(item.get("type", "")).strip().lower()
    category = str(item.get("category", ""))
    name = str(item.get("item", ""))
    if not chart.contains(category, name):
        raise TargetNotFound(category, name)

    try:
        value = float(item["value"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid modification value: {item.get('value')!r}") from exc

    parameter = None
    if "min" in item and "max" in item:
        parameter = Parameter(
            value=value,
            minimum=float(item["min"]),
            maximum=float(item["max"]),
            step=float(item.get("step", 1.0 if kind == "percentage" else 100.0)),
            unit="%" if kind == "percentage" else "$",
        )

    return make_modification(
        kind,
        category,
        name,
        value,
        start_date=_parse_start_date(item.get("startDate")),
        parameter=parameter,
        description=item.get("description") or None,
        explanation=str(item.get("explanation") or ""),
    )


def parse_resolver_response(
    payload: Union[str, Mapping[str, Any]],
    chart: Optional[ChartOfAccounts] = None,
) -> ResolverResult:
    """Parse a language-model response into a ResolverResult.

    Raises:
        ValueError: if the payload is not valid JSON or does not follow the
            {responseType, data} structure.
    """
    chart = chart or ChartOfAccounts.default()

    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise ValueError("Resolver response is not valid JSON.") from exc

    if not isinstance(payload, Mapping):
        raise ValueError("Resolver response must be a JSON object.")

    response_type = payload.get("responseType")
    data = payload.get("data")

    if response_type == "question":
        return ResolverResult(question=str(data or FALLBACK_QUESTION))

    if response_type != "modification":
        raise ValueError(f"Unknown resolver responseType: {response_type!r}")

    if isinstance(data, Mapping):
        data = [data]
    if not isinstance(data, list):
        raise ValueError("Resolver 'data' must be a list of modifications.")

    modifications: list[Modification] = []
    for raw in data:
        if not isinstance(raw, Mapping):
            logger.warning("Ignoring malformed resolver item: %r", raw)
            continue
        try:
            modifications.append(_modification_from_item(raw, chart))
        except ValueError as exc:
            logger.warning("Ignoring resolver item %r: %s", dict(raw), exc)

    if not modifications:
        return ResolverResult(question=FALLBACK_QUESTION)
    return ResolverResult(modifications=tuple(modifications))


# ---------------------------------------------------------------------------
# Rule-based resolver
# ---------------------------------------------------------------------------

_NUMBER_WORDS: dict[str, int] = {
    "a": 1,
    "an": 1,
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
}

_SAVINGS_RE = re.compile(
    r"(?:use|find|get|source|implement|switch to)\s+cheaper\s+"
    r"(packaging|food|beverages)",
    re.IGNORECASE,
)
_HIRE_RE = re.compile(
    r"(?:hire|add|bring on)\s+(\d+|a|an|one|two|three|four|five)\s+"
    r"(?:more\s*)?(?:new\s*)?(?:workers?|employees?|cooks?|persons?|people|staff)",
    re.IGNORECASE,
)


def _item_pattern() -> str:
    names = set()
    for leaf in LEAF_FIELDS:
        names.add(leaf.item.replace("_", r"[ _-]?"))
        names.add(re.escape(leaf.label.lower()).replace(r"\ ", r"\s+"))
    return "|".join(sorted(names, key=len, reverse=True))


_CHANGE_RE = re.compile(
    r"(increase|raise|grow|boost|cut|reduce|decrease|lower)\s+"
    r"(?:our\s+|the\s+|my\s+)?(" + _item_pattern() + r")"
    r"(?:\s+(?:revenue|sales|costs?|expenses?))?\s+by\s+"
    r"\$?(\d[\d,]*(?:\.\d+)?)\s*(%|percent)?",
    re.IGNORECASE,
)

_LABEL_TO_ITEM: dict[str, str] = {leaf.label.lower(): leaf.item for leaf in LEAF_FIELDS}

# Average monthly revenue handled by one employee, used to estimate headcount.
REVENUE_PER_EMPLOYEE: float = 15000.0
DEFAULT_MONTHLY_WAGE: float = 5000.0


class RuleBasedResolver:
    """Keyword-based resolver working from the latest actuals."""

    def __init__(
        self,
        actuals: Sequence[PeriodStatement],
        chart: Optional[ChartOfAccounts] = None,
    ):
        self.actuals = tuple(actuals)
        self.chart = chart or ChartOfAccounts.default()

    def resolve(self, text: str) -> ResolverResult:
        modifications: list[Modification] = []

        savings = _SAVINGS_RE.search(text)
        if savings:
            modifications.append(self._cheaper_supplies(savings.group(1).lower()))

        hire = _HIRE_RE.search(text)
        if hire:
            mod = self._hiring(hire.group(1).lower())
            if mod is not None:
                modifications.append(mod)

        for match in _CHANGE_RE.finditer(text):
            mod = self._explicit_change(match)
            if mod is not None:
                modifications.append(mod)

        if not modifications:
            return ResolverResult(question=FALLBACK_QUESTION)
        return ResolverResult(modifications=tuple(modifications))

    def _cheaper_supplies(self, account: str) -> Modification:
        return make_modification(
            "percentage",
            "cogs",
            account,
            -15.0,
            parameter=Parameter(value=-15.0, minimum=-50.0, maximum=0.0, step=1.0),
            explanation=(
                "Switching suppliers for consumable goods typically yields a "
                "10-20% saving for quick-service restaurants; 15% is used as "
                "the starting estimate."
            ),
        )

    def _hiring(self, quantity_raw: str) -> Optional[Modification]:
        quantity = _NUMBER_WORDS.get(quantity_raw)
        if quantity is None:
            try:
                quantity = int(quantity_raw)
            except ValueError:
                return None
        if quantity <= 0:
            return None

        if self.actuals:
            last = self.actuals[-1]
            employees = round(last.revenue.total / REVENUE_PER_EMPLOYEE)
            average_wage = (
                last.expenses.labor.wages / employees
                if employees > 0
                else DEFAULT_MONTHLY_WAGE
            )
        else:
            average_wage = DEFAULT_MONTHLY_WAGE

        increase = quantity * average_wage
        if increase <= 0:
            return None
        return make_modification(
            "fixed",
            "expenses.labor",
            "wages",
            increase,
            parameter=Parameter(
                value=increase,
                minimum=increase * 0.5,
                maximum=increase * 1.5,
                step=100.0,
                unit="$",
            ),
            description=(
                f"Hiring {quantity} employee(s) increases monthly wages by "
                f"~${increase:,.0f}."
            ),
            explanation=(
                "Average monthly wage per employee estimated from the latest "
                f"month of actuals: ~${average_wage:,.0f}."
            ),
        )

    def _explicit_change(self, match: "re.Match[str]") -> Optional[Modification]:
        verb, raw_item, raw_value, percent = match.groups()
        item = _LABEL_TO_ITEM.get(re.sub(r"\s+", " ", raw_item.lower()))
        if item is None:
            item = re.sub(r"[ -]", "_", raw_item.lower())
        leaf = next((f for f in LEAF_FIELDS if f.item == item), None)
        if leaf is None or not self.chart.contains(leaf.category, leaf.item):
            return None

        value = float(raw_value.replace(",", ""))
        if verb.lower() in {"cut", "reduce", "decrease", "lower"}:
            value = -value
        kind = "percentage" if percent else "fixed"
        return make_modification(kind, leaf.category, leaf.item, value)
