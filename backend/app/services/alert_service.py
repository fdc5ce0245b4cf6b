from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.alerts import rules
from backend.app.alerts.rules import AlertDraft
from backend.app.analytics import ratios
from backend.app.domain.enums import AlertSeverity, AlertType, OPEN_PAYABLE_STATUSES
from backend.app.models import Alert, Company
from backend.app.services import ledger_aggregator, working_capital_service
from backend.app.services.company_service import parse_enum, require_company
from backend.app.services.errors import NotFoundError

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AlertSink(Protocol):
    def emit(self, db: Session, company: Company, draft: AlertDraft) -> Optional[Alert]:
        ...


class DbAlertSink:
    """Inserts one row per draft. Repeated runs over unchanged data add duplicates."""

    def emit(self, db: Session, company: Company, draft: AlertDraft) -> Optional[Alert]:
        row = Alert(
            company_id=company.id,
            title=draft.title,
            message=draft.message,
            alert_type=draft.alert_type.value,
            severity=draft.severity.value,
            trigger_metric=draft.trigger_metric,
            trigger_threshold=draft.trigger_threshold,
            trigger_value=draft.trigger_value,
        )
        db.add(row)
        db.flush()
        return row


DEFAULT_SINK = DbAlertSink()


def _emit_all(
    db: Session,
    company: Company,
    family: str,
    metrics: Dict[str, Optional[Decimal]],
    context: Dict[str, str],
    sink: AlertSink,
) -> int:
    created = 0
    for draft in rules.evaluate(family, metrics, context):
        row = sink.emit(db, company, draft)
        if row is None:
            continue
        created += 1
        logger.info(
            "alert generated company_id=%s type=%s severity=%s metric=%s value=%s",
            company.id,
            draft.alert_type.value,
            draft.severity.value,
            draft.trigger_metric,
            draft.trigger_value,
        )
    db.commit()
    return created


# -------------------------
# Families
# -------------------------

def generate_cash_gap_alerts(
    db: Session,
    company_id: str,
    *,
    today: Optional[date] = None,
    sink: AlertSink = DEFAULT_SINK,
) -> int:
    company = require_company(db, company_id)
    today = today or date.today()

    cash = ledger_aggregator.sum_cash(db, company.id)
    payables = working_capital_service.upcoming_payables(db, company.id, today, OPEN_PAYABLE_STATUSES)
    receivables = working_capital_service.upcoming_receivables(db, company.id, today)
    projected = cash + receivables - payables

    return _emit_all(
        db,
        company,
        rules.FAMILY_CASH_GAP,
        {"projected_cash": projected, "cash": cash},
        {
            "currency": company.currency_code,
            "upcoming_payables": rules.format_amount(payables),
            "expected_receivables": rules.format_amount(receivables),
        },
        sink,
    )


def generate_liquidity_alerts(db: Session, company_id: str, *, sink: AlertSink = DEFAULT_SINK) -> int:
    company = require_company(db, company_id)
    metrics = working_capital_service.calculate_liquidity_ratios(db, company.id)
    return _emit_all(db, company, rules.FAMILY_LIQUIDITY, dict(metrics), {"currency": company.currency_code}, sink)


def generate_working_capital_ratio_alerts(db: Session, company_id: str, *, sink: AlertSink = DEFAULT_SINK) -> int:
    """Evaluated on cash and receivables only; inventory is left out of current assets."""
    company = require_company(db, company_id)
    cash = ledger_aggregator.sum_cash(db, company.id)
    receivables = ledger_aggregator.sum_receivables(db, company.id)
    payables = ledger_aggregator.sum_payables(db, company.id)
    debt = ledger_aggregator.sum_short_term_liabilities(db, company.id)

    assets = cash + receivables
    liabilities = payables + debt
    metrics = {
        "net_working_capital": ratios.net_working_capital(assets, liabilities),
        "current_ratio": ratios.current_ratio(assets, liabilities),
    }
    return _emit_all(db, company, rules.FAMILY_WORKING_CAPITAL, metrics, {"currency": company.currency_code}, sink)


def generate_ccc_alerts(db: Session, company_id: str, *, sink: AlertSink = DEFAULT_SINK) -> int:
    company = require_company(db, company_id)
    dso = working_capital_service.calculate_dso(db, company.id)
    dpo = working_capital_service.calculate_dpo(db, company.id)
    dio = working_capital_service.calculate_dio(db, company.id)
    metrics = {
        "ccc": ratios.ccc(dso, dio, dpo),
        "dso": dso,
        "dpo": dpo,
        "dio": dio,
    }
    return _emit_all(db, company, rules.FAMILY_CCC, metrics, {"currency": company.currency_code}, sink)


def generate_alerts(
    db: Session,
    company_id: str,
    *,
    today: Optional[date] = None,
    sink: AlertSink = DEFAULT_SINK,
) -> int:
    require_company(db, company_id)
    total = 0
    total += generate_cash_gap_alerts(db, company_id, today=today, sink=sink)
    total += generate_liquidity_alerts(db, company_id, sink=sink)
    total += generate_working_capital_ratio_alerts(db, company_id, sink=sink)
    total += generate_ccc_alerts(db, company_id, sink=sink)
    return total


# -------------------------
# Lifecycle
# -------------------------

def _require_alert(db: Session, alert_id: str) -> Alert:
    alert = db.get(Alert, alert_id)
    if not alert:
        raise NotFoundError(f"Alert not found with id: {alert_id}")
    return alert


def mark_read(db: Session, alert_id: str) -> Alert:
    alert = _require_alert(db, alert_id)
    alert.read = True
    alert.read_at = utcnow()
    db.commit()
    db.refresh(alert)
    return alert


def dismiss(db: Session, alert_id: str) -> Alert:
    alert = _require_alert(db, alert_id)
    alert.dismissed = True
    alert.dismissed_at = utcnow()
    db.commit()
    db.refresh(alert)
    return alert


def list_alerts(
    db: Session,
    company_id: str,
    *,
    alert_type: Optional[str] = None,
    severity: Optional[str] = None,
    unread_only: bool = False,
    active_only: bool = False,
) -> List[Alert]:
    require_company(db, company_id)

    query = select(Alert).where(Alert.company_id == company_id)
    if alert_type is not None:
        query = query.where(Alert.alert_type == parse_enum(AlertType, alert_type, field="alert_type").value)
    if severity is not None:
        query = query.where(Alert.severity == parse_enum(AlertSeverity, severity, field="severity").value)
    if unread_only:
        query = query.where(Alert.read.is_(False))
    if active_only:
        query = query.where(Alert.dismissed.is_(False))

    return list(db.execute(query.order_by(Alert.created_at.desc(), Alert.id.desc())).scalars().all())
