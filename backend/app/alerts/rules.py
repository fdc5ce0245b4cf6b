"""
Threshold rules for working-capital alerts.

Each rule is a row in ALERT_RULES; evaluate() walks the rows of one family
and returns a draft for every rule whose metric matches. All matching rules
fire, so one metric can produce several drafts. A metric that is absent
(None) never matches.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional

from backend.app.domain.enums import AlertSeverity, AlertType

Predicate = Callable[[Decimal], bool]


def below(limit: str) -> Predicate:
    bound = Decimal(limit)
    return lambda value: value < bound


def above(limit: str) -> Predicate:
    bound = Decimal(limit)
    return lambda value: value > bound


def within(lower: str, upper: str, *, lower_inclusive: bool) -> Predicate:
    lo = Decimal(lower)
    hi = Decimal(upper)
    if lower_inclusive:
        return lambda value: lo <= value < hi
    return lambda value: lo < value < hi


@dataclass(frozen=True)
class AlertRule:
    family: str
    metric: str
    matches: Predicate
    threshold: str
    severity: AlertSeverity
    alert_type: AlertType
    trigger_metric: str
    title: str
    message: str


@dataclass(frozen=True)
class AlertDraft:
    title: str
    message: str
    alert_type: AlertType
    severity: AlertSeverity
    trigger_metric: str
    trigger_threshold: str
    trigger_value: str


FAMILY_CASH_GAP = "cash_gap"
FAMILY_LIQUIDITY = "liquidity"
FAMILY_WORKING_CAPITAL = "working_capital"
FAMILY_CCC = "ccc"

FAMILIES = (FAMILY_CASH_GAP, FAMILY_LIQUIDITY, FAMILY_WORKING_CAPITAL, FAMILY_CCC)

_CRITICAL_CURRENT_RATIO_MESSAGE = (
    "Your current ratio is {value}, which is below 1.0. This indicates "
    "potential inability to meet short-term obligations."
)


ALERT_RULES: List[AlertRule] = [
    # cash gap
    AlertRule(
        family=FAMILY_CASH_GAP,
        metric="projected_cash",
        matches=below("0"),
        threshold="0",
        severity=AlertSeverity.HIGH,
        alert_type=AlertType.CASH_GAP,
        trigger_metric="Projected Cash Balance",
        title="Potential Cash Gap Detected",
        message=(
            "Your projected cash balance in 30 days is {value} {currency}. Current balance: {cash}, "
            "Upcoming payables: {upcoming_payables}, Expected receivables: {expected_receivables}"
        ),
    ),
    AlertRule(
        family=FAMILY_CASH_GAP,
        metric="cash",
        matches=below("10000"),
        threshold="10000",
        severity=AlertSeverity.MEDIUM,
        alert_type=AlertType.CASH_GAP,
        trigger_metric="Cash Balance",
        title="Low Cash Balance",
        message=(
            "Your current cash balance is {value} {currency}, which is below the recommended "
            "minimum of 10,000 {currency}"
        ),
    ),
    # liquidity
    AlertRule(
        family=FAMILY_LIQUIDITY,
        metric="current_ratio",
        matches=below("1.0"),
        threshold="1.0",
        severity=AlertSeverity.CRITICAL,
        alert_type=AlertType.LIQUIDITY_ISSUE,
        trigger_metric="Current Ratio",
        title="Critical Current Ratio",
        message=_CRITICAL_CURRENT_RATIO_MESSAGE,
    ),
    AlertRule(
        family=FAMILY_LIQUIDITY,
        metric="current_ratio",
        matches=within("1.0", "1.5", lower_inclusive=True),
        threshold="1.5",
        severity=AlertSeverity.MEDIUM,
        alert_type=AlertType.LIQUIDITY_ISSUE,
        trigger_metric="Current Ratio",
        title="Low Current Ratio",
        message="Your current ratio is {value}, which is below the recommended minimum of 1.5.",
    ),
    AlertRule(
        family=FAMILY_LIQUIDITY,
        metric="quick_ratio",
        matches=below("1.0"),
        threshold="1.0",
        severity=AlertSeverity.HIGH,
        alert_type=AlertType.LIQUIDITY_ISSUE,
        trigger_metric="Quick Ratio",
        title="Low Quick Ratio",
        message=(
            "Your quick ratio is {value}, which is below 1.0. This indicates potential "
            "liquidity issues without relying on inventory."
        ),
    ),
    AlertRule(
        family=FAMILY_LIQUIDITY,
        metric="cash_ratio",
        matches=below("0.2"),
        threshold="0.2",
        severity=AlertSeverity.MEDIUM,
        alert_type=AlertType.LIQUIDITY_ISSUE,
        trigger_metric="Cash Ratio",
        title="Low Cash Ratio",
        message=(
            "Your cash ratio is {value}, which is below 0.2. This indicates potential issues "
            "meeting immediate obligations with cash."
        ),
    ),
    # working capital (inventory excluded from assets)
    AlertRule(
        family=FAMILY_WORKING_CAPITAL,
        metric="net_working_capital",
        matches=below("0"),
        threshold="0",
        severity=AlertSeverity.CRITICAL,
        alert_type=AlertType.WORKING_CAPITAL_RATIO,
        trigger_metric="Net Working Capital",
        title="Negative Working Capital",
        message=(
            "Your net working capital is {value} {currency}. Negative working capital indicates "
            "potential financial distress."
        ),
    ),
    AlertRule(
        family=FAMILY_WORKING_CAPITAL,
        metric="current_ratio",
        matches=below("1.0"),
        threshold="1.0",
        severity=AlertSeverity.CRITICAL,
        alert_type=AlertType.WORKING_CAPITAL_RATIO,
        trigger_metric="Current Ratio",
        title="Critical Current Ratio",
        message=_CRITICAL_CURRENT_RATIO_MESSAGE,
    ),
    # cash conversion cycle
    AlertRule(
        family=FAMILY_CCC,
        metric="ccc",
        matches=above("90"),
        threshold="90",
        severity=AlertSeverity.HIGH,
        alert_type=AlertType.CCC_ISSUE,
        trigger_metric="Cash Conversion Cycle",
        title="High Cash Conversion Cycle",
        message=(
            "Your Cash Conversion Cycle is {value} days, which is above the recommended maximum "
            "of 90 days. DSO: {dso} days, DPO: {dpo} days, DIO: {dio} days."
        ),
    ),
    AlertRule(
        family=FAMILY_CCC,
        metric="dso",
        matches=above("45"),
        threshold="45",
        severity=AlertSeverity.MEDIUM,
        alert_type=AlertType.CCC_ISSUE,
        trigger_metric="Days Sales Outstanding",
        title="High Days Sales Outstanding",
        message=(
            "Your Days Sales Outstanding is {value} days, which is above the recommended maximum "
            "of 45 days. Consider reviewing your credit policies and collection processes."
        ),
    ),
    AlertRule(
        family=FAMILY_CCC,
        metric="dpo",
        matches=within("0", "30", lower_inclusive=False),
        threshold="30",
        severity=AlertSeverity.LOW,
        alert_type=AlertType.CCC_ISSUE,
        trigger_metric="Days Payable Outstanding",
        title="Low Days Payable Outstanding",
        message=(
            "Your Days Payable Outstanding is {value} days, which is below the recommended minimum "
            "of 30 days. Consider negotiating longer payment terms with suppliers."
        ),
    ),
    AlertRule(
        family=FAMILY_CCC,
        metric="dio",
        matches=above("60"),
        threshold="60",
        severity=AlertSeverity.MEDIUM,
        alert_type=AlertType.CCC_ISSUE,
        trigger_metric="Days Inventory Outstanding",
        title="High Days Inventory Outstanding",
        message=(
            "Your Days Inventory Outstanding is {value} days, which is above the recommended "
            "maximum of 60 days. Consider implementing just-in-time inventory management."
        ),
    ),
]


def format_amount(value: Optional[Decimal]) -> str:
    if value is None:
        return "n/a"
    return f"{value:.2f}"


def rules_for(family: str) -> List[AlertRule]:
    return [rule for rule in ALERT_RULES if rule.family == family]


def evaluate(
    family: str,
    metrics: Mapping[str, Optional[Decimal]],
    context: Optional[Mapping[str, Any]] = None,
) -> List[AlertDraft]:
    if family not in FAMILIES:
        raise ValueError(f"unknown alert family: {family}")

    fields: Dict[str, Any] = {key: format_amount(val) for key, val in metrics.items()}
    fields.update(context or {})

    drafts: List[AlertDraft] = []
    for rule in rules_for(family):
        value = metrics.get(rule.metric)
        if value is None or not rule.matches(value):
            continue
        rendered = format_amount(value)
        drafts.append(
            AlertDraft(
                title=rule.title,
                message=rule.message.format(**{**fields, "value": rendered}),
                alert_type=rule.alert_type,
                severity=rule.severity,
                trigger_metric=rule.trigger_metric,
                trigger_threshold=rule.threshold,
                trigger_value=rendered,
            )
        )
    return drafts
