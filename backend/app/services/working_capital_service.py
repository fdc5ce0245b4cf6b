from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from backend.app.analytics import ratios
from backend.app.analytics.snapshot import LedgerAggregates, TooManyPoints, WorkingCapitalSnapshot, expand_dates
from backend.app.api.config import point_in_time_aggregates_enabled
from backend.app.domain.enums import (
    AlertSeverity,
    HistoryInterval,
    PayableStatus,
    ReceivableStatus,
)
from backend.app.models import Alert, Company
from backend.app.services import ledger_aggregator
from backend.app.services.company_service import require_company
from backend.app.services.errors import InvalidArgument

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
UPCOMING_WINDOW_DAYS = 30
MAX_HISTORY_POINTS = 1000

UPCOMING_RECEIVABLE_STATUSES = (ReceivableStatus.OPEN, ReceivableStatus.PARTIALLY_PAID)
UPCOMING_PAYABLE_STATUSES = (
    PayableStatus.PENDING,
    PayableStatus.APPROVED,
    PayableStatus.PARTIALLY_PAID,
)


# -------------------------
# Aggregates
# -------------------------

def load_aggregates(db: Session, company: Company, as_of_date: Optional[date] = None) -> LedgerAggregates:
    """
    Pull the five ledger balances for a company.

    as_of_date only narrows the queries when point-in-time aggregation is
    switched on; otherwise every open document counts.
    """
    as_of = as_of_date if point_in_time_aggregates_enabled() else None
    return LedgerAggregates(
        cash=ledger_aggregator.sum_cash(db, company.id),
        receivables=ledger_aggregator.sum_receivables(db, company.id, as_of),
        payables=ledger_aggregator.sum_payables(db, company.id, as_of),
        inventory_value=ledger_aggregator.sum_inventory_value(db, company.id, company.currency_code, as_of),
        short_term_debt=ledger_aggregator.sum_short_term_liabilities(db, company.id),
    )


def _flows(db: Session, company: Company, as_of_date: Optional[date]) -> tuple[Decimal, Decimal]:
    as_of = as_of_date if point_in_time_aggregates_enabled() else None
    sales = ledger_aggregator.sum_open_sales_invoices(db, company.id, as_of)
    purchases = ledger_aggregator.sum_open_purchase_invoices(db, company.id, as_of)
    return sales, purchases


# -------------------------
# Snapshot
# -------------------------

def build_snapshot(db: Session, company_id: str, as_of_date: Optional[date] = None) -> WorkingCapitalSnapshot:
    company = require_company(db, company_id)
    as_of_date = as_of_date or date.today()

    agg = load_aggregates(db, company, as_of_date)
    sales, purchases = _flows(db, company, as_of_date)

    total_current_assets = agg.cash + agg.receivables + agg.inventory_value
    total_current_liabilities = agg.payables + agg.short_term_debt

    dso = ratios.dso(agg.receivables, sales, ratios.TRAILING_WINDOW_DAYS)
    dpo = ratios.dpo(agg.payables, purchases, ratios.TRAILING_WINDOW_DAYS)
    dio = ratios.dio(agg.inventory_value, purchases, ratios.TRAILING_WINDOW_DAYS)

    return WorkingCapitalSnapshot(
        company_id=company.id,
        as_of_date=as_of_date,
        cash_and_equivalents=agg.cash,
        accounts_receivable=agg.receivables,
        inventory=agg.inventory_value,
        other_current_assets=ZERO,
        total_current_assets=total_current_assets,
        accounts_payable=agg.payables,
        short_term_debt=agg.short_term_debt,
        other_current_liabilities=ZERO,
        total_current_liabilities=total_current_liabilities,
        net_working_capital=ratios.net_working_capital(total_current_assets, total_current_liabilities),
        current_ratio=ratios.current_ratio(total_current_assets, total_current_liabilities),
        quick_ratio=ratios.quick_ratio(total_current_assets, agg.inventory_value, total_current_liabilities),
        cash_ratio=ratios.cash_ratio(agg.cash, total_current_liabilities),
        dso=dso,
        dpo=dpo,
        dio=dio,
        ccc=ratios.ccc(dso, dio, dpo),
    )


def parse_interval(raw: str) -> HistoryInterval:
    try:
        return HistoryInterval((raw or "").strip().upper())
    except ValueError as exc:
        raise InvalidArgument(
            f"Invalid interval: {raw}. Valid values are DAILY, WEEKLY, MONTHLY"
        ) from exc


def get_historical_metrics(
    db: Session,
    company_id: str,
    start: date,
    end: date,
    interval: str,
) -> Dict[date, WorkingCapitalSnapshot]:
    parsed = parse_interval(interval)
    if start > end:
        raise InvalidArgument("start_date must not be after end_date")
    require_company(db, company_id)
    try:
        days = expand_dates(start, end, parsed, limit=MAX_HISTORY_POINTS)
    except TooManyPoints as exc:
        raise InvalidArgument(f"{exc}; narrow the date range or use a coarser interval") from exc
    return {day: build_snapshot(db, company_id, day) for day in days}


# -------------------------
# Single-metric reads
# -------------------------

def calculate_dso(db: Session, company_id: str) -> Optional[Decimal]:
    company = require_company(db, company_id)
    receivables = ledger_aggregator.sum_receivables(db, company.id)
    sales = ledger_aggregator.sum_open_sales_invoices(db, company.id)
    return ratios.dso(receivables, sales, ratios.TRAILING_WINDOW_DAYS)


def calculate_dpo(db: Session, company_id: str) -> Optional[Decimal]:
    company = require_company(db, company_id)
    payables = ledger_aggregator.sum_payables(db, company.id)
    purchases = ledger_aggregator.sum_open_purchase_invoices(db, company.id)
    return ratios.dpo(payables, purchases, ratios.TRAILING_WINDOW_DAYS)


def calculate_dio(db: Session, company_id: str) -> Optional[Decimal]:
    company = require_company(db, company_id)
    inventory = ledger_aggregator.sum_inventory_value(db, company.id, company.currency_code)
    purchases = ledger_aggregator.sum_open_purchase_invoices(db, company.id)
    return ratios.dio(inventory, purchases, ratios.TRAILING_WINDOW_DAYS)


def calculate_ccc(db: Session, company_id: str) -> Decimal:
    return ratios.ccc(
        calculate_dso(db, company_id),
        calculate_dio(db, company_id),
        calculate_dpo(db, company_id),
    )


def calculate_liquidity_ratios(db: Session, company_id: str) -> Dict[str, Optional[Decimal]]:
    company = require_company(db, company_id)
    agg = load_aggregates(db, company)
    assets = agg.cash + agg.receivables + agg.inventory_value
    liabilities = agg.payables + agg.short_term_debt
    return {
        "current_ratio": ratios.current_ratio(assets, liabilities),
        "quick_ratio": ratios.quick_ratio(assets, agg.inventory_value, liabilities),
        "cash_ratio": ratios.cash_ratio(agg.cash, liabilities),
    }


# -------------------------
# Projection
# -------------------------

def _sum_amounts(rows) -> Decimal:
    return sum((row.amount_base_currency for row in rows), ZERO)


def upcoming_receivables(db: Session, company_id: str, today: date) -> Decimal:
    horizon = today + timedelta(days=UPCOMING_WINDOW_DAYS)
    wanted = {s.value for s in UPCOMING_RECEIVABLE_STATUSES}
    rows = ledger_aggregator.find_receivables_due_before(db, company_id, horizon, ReceivableStatus.PAID)
    return _sum_amounts(r for r in rows if r.status in wanted)


def upcoming_payables(db: Session, company_id: str, today: date, statuses=UPCOMING_PAYABLE_STATUSES) -> Decimal:
    horizon = today + timedelta(days=UPCOMING_WINDOW_DAYS)
    rows = ledger_aggregator.find_payables_due_between(db, company_id, today, horizon, statuses)
    return _sum_amounts(rows)


def projected_cash_balance(db: Session, company_id: str, today: date, payable_statuses=UPCOMING_PAYABLE_STATUSES) -> Decimal:
    cash = ledger_aggregator.sum_cash(db, company_id)
    return cash + upcoming_receivables(db, company_id, today) - upcoming_payables(
        db, company_id, today, payable_statuses
    )


# -------------------------
# Dashboard
# -------------------------

def _recommendations(summary: Dict[str, Any]) -> List[Dict[str, str]]:
    out: List[Dict[str, str]] = []
    cash = summary["cash_balance"]
    dso = summary["dso"]
    dpo = summary["dpo"]
    dio = summary["dio"]
    ccc = summary["ccc"]
    current = summary["current_ratio"]

    if cash < Decimal("10000"):
        out.append({
            "type": "CASH_BALANCE",
            "title": "Improve Cash Balance",
            "description": "Your cash balance is low. Consider invoicing customers earlier or "
            "negotiating longer payment terms with suppliers.",
            "priority": AlertSeverity.HIGH.value,
        })
    if dso is not None and dso > Decimal("45"):
        out.append({
            "type": "DSO",
            "title": "Reduce Days Sales Outstanding",
            "description": f"Your DSO is high at {dso} days. Implement stricter credit policies "
            "and improve collections process.",
            "priority": AlertSeverity.MEDIUM.value,
        })
    if dpo is not None and ZERO < dpo < Decimal("20"):
        out.append({
            "type": "DPO",
            "title": "Optimize Days Payable Outstanding",
            "description": f"Your DPO is low at {dpo} days. Consider negotiating longer payment "
            "terms with suppliers.",
            "priority": AlertSeverity.MEDIUM.value,
        })
    if dio is not None and dio > Decimal("60"):
        out.append({
            "type": "DIO",
            "title": "Reduce Inventory Days",
            "description": f"Your inventory turnover is slow at {dio} days. Implement "
            "just-in-time inventory management.",
            "priority": AlertSeverity.MEDIUM.value,
        })
    if ccc > Decimal("75"):
        out.append({
            "type": "CCC",
            "title": "Improve Cash Conversion Cycle",
            "description": f"Your CCC is high at {ccc} days. Focus on reducing inventory and "
            "receivables while extending payables.",
            "priority": AlertSeverity.HIGH.value,
        })
    if current is not None and current < Decimal("1.2"):
        out.append({
            "type": "CURRENT_RATIO",
            "title": "Improve Current Ratio",
            "description": f"Your current ratio is low at {current}. This indicates potential "
            "liquidity issues.",
            "priority": AlertSeverity.HIGH.value,
        })
    return out


def _alert_counts(db: Session, company_id: str) -> Dict[str, int]:
    def _count(*conds) -> int:
        return int(
            db.execute(
                select(func.count(Alert.id)).where(Alert.company_id == company_id, *conds)
            ).scalar()
            or 0
        )

    return {
        "unread": _count(Alert.read.is_(False)),
        "critical": _count(Alert.severity == AlertSeverity.CRITICAL.value, Alert.dismissed.is_(False)),
        "high": _count(Alert.severity == AlertSeverity.HIGH.value, Alert.dismissed.is_(False)),
    }


def get_dashboard_summary(db: Session, company_id: str, today: Optional[date] = None) -> Dict[str, Any]:
    today = today or date.today()
    snapshot = build_snapshot(db, company_id, today)

    receivables_30 = upcoming_receivables(db, company_id, today)
    payables_30 = upcoming_payables(db, company_id, today)

    recent = (
        db.execute(
            select(Alert)
            .where(Alert.company_id == company_id, Alert.dismissed.is_(False))
            .order_by(Alert.created_at.desc(), Alert.id.desc())
            .limit(5)
        )
        .scalars()
        .all()
    )

    summary: Dict[str, Any] = {
        "company_id": company_id,
        "as_of_date": today,
        "cash_balance": snapshot.cash_and_equivalents,
        "accounts_receivable": snapshot.accounts_receivable,
        "accounts_payable": snapshot.accounts_payable,
        "inventory": snapshot.inventory,
        "net_working_capital": snapshot.net_working_capital,
        "current_ratio": snapshot.current_ratio,
        "quick_ratio": snapshot.quick_ratio,
        "dso": snapshot.dso,
        "dpo": snapshot.dpo,
        "dio": snapshot.dio,
        "ccc": snapshot.ccc,
        "alert_counts": _alert_counts(db, company_id),
        "recent_alerts": [
            {
                "id": a.id,
                "title": a.title,
                "message": a.message,
                "alert_type": a.alert_type,
                "severity": a.severity,
                "created_at": a.created_at,
            }
            for a in recent
        ],
        "upcoming_receivables_30_days": receivables_30,
        "upcoming_payables_30_days": payables_30,
        "projected_cash_balance_30_days": snapshot.cash_and_equivalents + receivables_30 - payables_30,
        "top_customers": [
            {"name": name, "amount": amount}
            for name, amount in ledger_aggregator.top_customers(db, company_id)
        ],
        "top_vendors": [
            {"name": name, "amount": amount}
            for name, amount in ledger_aggregator.top_vendors(db, company_id)
        ],
    }
    summary["recommendations"] = _recommendations(summary)
    return summary
