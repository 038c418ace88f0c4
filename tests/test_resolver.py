import datetime as dt
import json

import pytest

from smb_forecast.chart import ChartOfAccounts
from smb_forecast.resolver import (
    FALLBACK_QUESTION,
    RuleBasedResolver,
    parse_resolver_response,
)
from smb_forecast.statement import build_statement


def _actuals() -> tuple:
    return (
        build_statement(
            dt.date(2025, 5, 1),
            in_store=36000.0,
            delivery=21000.0,
            catering=3000.0,
            wages=13200.0,
        ),
    )


# ---------------------------------------------------------------------------
# Structured responses
# ---------------------------------------------------------------------------


def test_parse_modification_response() -> None:
    payload = json.dumps(
        {
            "responseType": "modification",
            "data": [
                {
                    "type": "percentage",
                    "category": "revenue",
                    "item": "inStore",
                    "value": 15,
                    "description": "Boost in-store sales with a loyalty program.",
                },
                {
                    "type": "fixed",
                    "category": "expenses",
                    "item": "wages",
                    "value": 4200,
                    "min": 2000,
                    "max": 8000,
                    "step": 50,
                    "startDate": "2025-08",
                },
            ],
        }
    )

    result = parse_resolver_response(payload)

    assert not result.is_question
    pct, fixed = result.modifications
    assert (pct.target.category, pct.target.item) == ("revenue", "in_store")
    assert pct.parameter.value == 15.0
    assert pct.description == "Boost in-store sales with a loyalty program."

    assert (fixed.target.category, fixed.target.item) == ("expenses.labor", "wages")
    assert fixed.start_date == dt.date(2025, 8, 1)
    assert (fixed.parameter.minimum, fixed.parameter.maximum) == (2000.0, 8000.0)
    assert fixed.parameter.step == 50.0
    assert fixed.parameter.unit == "$"


def test_parse_single_object_data() -> None:
    result = parse_resolver_response(
        {
            "responseType": "modification",
            "data": {
                "type": "fixed",
                "category": "cogs",
                "item": "food",
                "value": -300,
            },
        }
    )

    assert len(result.modifications) == 1
    assert result.modifications[0].parameter.value == -300.0


def test_parse_question_response() -> None:
    result = parse_resolver_response(
        {"responseType": "question", "data": "Which revenue line?"}
    )

    assert result.is_question
    assert result.question == "Which revenue line?"
    assert result.modifications == ()


def test_unresolvable_items_are_dropped() -> None:
    payload = {
        "responseType": "modification",
        "data": [
            {"type": "percentage", "category": "revenue", "item": "merch", "value": 5},
            {"type": "fixed", "category": "cogs", "item": "packaging", "value": "n/a"},
            "not an object",
        ],
    }

    result = parse_resolver_response(payload)

    assert result.is_question
    assert result.question == FALLBACK_QUESTION


def test_chart_restricts_targets() -> None:
    chart = ChartOfAccounts(pairs=(("cogs", "packaging"),))
    payload = {
        "responseType": "modification",
        "data": [
            {"type": "percentage", "category": "cogs", "item": "food", "value": -5},
            {"type": "percentage", "category": "cogs", "item": "packaging", "value": 5},
        ],
    }

    result = parse_resolver_response(payload, chart=chart)

    assert [m.target.item for m in result.modifications] == ["packaging"]


@pytest.mark.parametrize(
    "payload",
    [
        "{not json",
        "[1, 2]",
        {"responseType": "shrug", "data": []},
        {"responseType": "modification", "data": "increase sales"},
    ],
)
def test_malformed_responses_raise(payload) -> None:
    with pytest.raises(ValueError):
        parse_resolver_response(payload)


# ---------------------------------------------------------------------------
# Rule-based resolver
# ---------------------------------------------------------------------------


def test_rule_cheaper_packaging() -> None:
    result = RuleBasedResolver(_actuals()).resolve("Let's use cheaper packaging")

    (mod,) = result.modifications
    assert mod.kind == "percentage"
    assert (mod.target.category, mod.target.item) == ("cogs", "packaging")
    assert mod.parameter.value == -15.0
    assert (mod.parameter.minimum, mod.parameter.maximum) == (-50.0, 0.0)


def test_rule_hiring_uses_latest_wages_per_employee() -> None:
    result = RuleBasedResolver(_actuals()).resolve("What if we hire two cooks?")

    (mod,) = result.modifications
    # 60,000 revenue / 15,000 = 4 employees, 13,200 / 4 = 3,300 each
    assert mod.kind == "fixed"
    assert (mod.target.category, mod.target.item) == ("expenses.labor", "wages")
    assert mod.parameter.value == pytest.approx(6600.0)
    assert mod.parameter.minimum == pytest.approx(3300.0)
    assert mod.parameter.maximum == pytest.approx(9900.0)
    assert "Hiring 2 employee(s)" in mod.description


def test_rule_hiring_with_negative_wages_asks_instead() -> None:
    actuals = (
        build_statement(dt.date(2025, 5, 1), in_store=60000.0, wages=-1200.0),
    )

    result = RuleBasedResolver(actuals).resolve("hire two cooks")

    assert result.is_question
    assert result.question == FALLBACK_QUESTION


def test_rule_hiring_without_actuals_uses_default_wage() -> None:
    result = RuleBasedResolver(()).resolve("hire 3 new staff")

    assert result.modifications[0].parameter.value == pytest.approx(15000.0)


@pytest.mark.parametrize(
    "text, kind, item, value",
    [
        ("increase in-store revenue by 15%", "percentage", "in_store", 15.0),
        ("reduce marketing by $1,200", "fixed", "marketing", -1200.0),
        (
            "cut delivery commissions by 5 percent",
            "percentage",
            "delivery_commissions",
            -5.0,
        ),
    ],
)
def test_rule_explicit_change(text, kind, item, value) -> None:
    result = RuleBasedResolver(_actuals()).resolve(text)

    (mod,) = result.modifications
    assert mod.kind == kind
    assert mod.target.item == item
    assert mod.parameter.value == pytest.approx(value)


def test_rule_based_resolver_asks_when_nothing_matches() -> None:
    result = RuleBasedResolver(_actuals()).resolve("make us rich")

    assert result.is_question
    assert result.question == FALLBACK_QUESTION
