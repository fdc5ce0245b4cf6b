from decimal import Decimal

import pytest

from backend.app.alerts import rules
from backend.app.domain.enums import AlertSeverity, AlertType


D = Decimal


def _by_metric(drafts, trigger_metric):
    return [d for d in drafts if d.trigger_metric == trigger_metric]


def test_every_rule_belongs_to_a_known_family():
    assert {rule.family for rule in rules.ALERT_RULES} == set(rules.FAMILIES)
    assert len(rules.ALERT_RULES) == 12


@pytest.mark.parametrize(
    "current, expected",
    [
        (D("0.80"), [AlertSeverity.CRITICAL]),
        (D("1.00"), [AlertSeverity.MEDIUM]),
        (D("1.20"), [AlertSeverity.MEDIUM]),
        (D("1.50"), []),
        (D("1.80"), []),
    ],
)
def test_current_ratio_bands(current, expected):
    drafts = rules.evaluate(
        rules.FAMILY_LIQUIDITY,
        {"current_ratio": current, "quick_ratio": D("5"), "cash_ratio": D("5")},
    )
    assert [d.severity for d in _by_metric(drafts, "Current Ratio")] == expected


def test_all_matching_rules_fire():
    drafts = rules.evaluate(
        rules.FAMILY_LIQUIDITY,
        {"current_ratio": D("0.5"), "quick_ratio": D("0.4"), "cash_ratio": D("0.1")},
    )
    assert [d.title for d in drafts] == ["Critical Current Ratio", "Low Quick Ratio", "Low Cash Ratio"]
    assert all(d.alert_type == AlertType.LIQUIDITY_ISSUE for d in drafts)


def test_absent_metrics_never_fire():
    drafts = rules.evaluate(
        rules.FAMILY_LIQUIDITY,
        {"current_ratio": None, "quick_ratio": None, "cash_ratio": None},
    )
    assert drafts == []

    drafts = rules.evaluate(rules.FAMILY_CCC, {"ccc": D("0"), "dso": None, "dpo": None, "dio": None})
    assert drafts == []


def test_low_dpo_requires_positive_value():
    assert rules.evaluate(rules.FAMILY_CCC, {"ccc": D("0"), "dpo": D("0")}) == []

    drafts = rules.evaluate(rules.FAMILY_CCC, {"ccc": D("0"), "dpo": D("12.5")})
    assert len(drafts) == 1
    assert drafts[0].severity == AlertSeverity.LOW
    assert drafts[0].trigger_threshold == "30"
    assert drafts[0].trigger_value == "12.50"


def test_ccc_message_includes_components():
    drafts = rules.evaluate(
        rules.FAMILY_CCC,
        {"ccc": D("120"), "dso": D("50"), "dpo": D("40"), "dio": D("110")},
    )
    titles = [d.title for d in drafts]
    assert titles == [
        "High Cash Conversion Cycle",
        "High Days Sales Outstanding",
        "High Days Inventory Outstanding",
    ]
    ccc = drafts[0]
    assert ccc.severity == AlertSeverity.HIGH
    assert ccc.alert_type == AlertType.CCC_ISSUE
    assert "DSO: 50.00 days, DPO: 40.00 days, DIO: 110.00 days." in ccc.message


def test_cash_gap_messages_use_context():
    drafts = rules.evaluate(
        rules.FAMILY_CASH_GAP,
        {"projected_cash": D("-2500"), "cash": D("4000")},
        {"currency": "EUR", "upcoming_payables": "8000.00", "expected_receivables": "1500.00"},
    )
    assert [(d.title, d.severity) for d in drafts] == [
        ("Potential Cash Gap Detected", AlertSeverity.HIGH),
        ("Low Cash Balance", AlertSeverity.MEDIUM),
    ]
    assert drafts[0].message.startswith("Your projected cash balance in 30 days is -2500.00 EUR.")
    assert "Upcoming payables: 8000.00" in drafts[0].message
    assert drafts[1].message.endswith("minimum of 10,000 EUR")


def test_working_capital_family_flags_negative_nwc_and_low_ratio():
    drafts = rules.evaluate(
        rules.FAMILY_WORKING_CAPITAL,
        {"net_working_capital": D("-20000"), "current_ratio": D("0.80")},
        {"currency": "USD"},
    )
    assert [d.trigger_metric for d in drafts] == ["Net Working Capital", "Current Ratio"]
    assert all(d.severity == AlertSeverity.CRITICAL for d in drafts)
    assert all(d.alert_type == AlertType.WORKING_CAPITAL_RATIO for d in drafts)


def test_unknown_family_is_rejected():
    with pytest.raises(ValueError):
        rules.evaluate("inventory", {})
