from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from backend.app.domain.enums import (
    OPEN_PAYABLE_STATUSES,
    OPEN_PURCHASE_INVOICE_STATUSES,
    OPEN_RECEIVABLE_STATUSES,
    OPEN_SALES_INVOICE_STATUSES,
    InvoiceType,
    LiabilityStatus,
    ReceivableStatus,
)
from backend.app.models import (
    AccountsPayable,
    AccountsReceivable,
    CashAccount,
    Inventory,
    Invoice,
    ShortTermLiability,
)
from backend.app.services.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _values(statuses: Iterable) -> List[str]:
    return [getattr(s, "value", s) for s in statuses]


def _as_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _sum(db: Session, stmt) -> Decimal:
    try:
        return _as_decimal(db.execute(stmt).scalar())
    except OperationalError as exc:
        logger.warning("ledger aggregate query failed: %s", exc)
        raise UpstreamUnavailable() from exc


def _rows(db: Session, stmt) -> list:
    try:
        return list(db.execute(stmt).scalars().all())
    except OperationalError as exc:
        logger.warning("ledger row query failed: %s", exc)
        raise UpstreamUnavailable() from exc


# -------------------------
# Balances
# -------------------------

def sum_cash(db: Session, company_id: str) -> Decimal:
    stmt = select(func.sum(CashAccount.balance_base_currency)).where(
        CashAccount.company_id == company_id,
        CashAccount.active.is_(True),
    )
    return _sum(db, stmt)


def sum_receivables(db: Session, company_id: str, as_of: Optional[date] = None) -> Decimal:
    stmt = select(func.sum(AccountsReceivable.amount_base_currency)).where(
        AccountsReceivable.company_id == company_id,
        AccountsReceivable.status.in_(_values(OPEN_RECEIVABLE_STATUSES)),
    )
    if as_of is not None:
        stmt = stmt.where(AccountsReceivable.invoice_date <= as_of)
    return _sum(db, stmt)


def sum_payables(db: Session, company_id: str, as_of: Optional[date] = None) -> Decimal:
    stmt = select(func.sum(AccountsPayable.amount_base_currency)).where(
        AccountsPayable.company_id == company_id,
        AccountsPayable.status.in_(_values(OPEN_PAYABLE_STATUSES)),
    )
    if as_of is not None:
        stmt = stmt.where(AccountsPayable.invoice_date <= as_of)
    return _sum(db, stmt)


def sum_inventory_value(
    db: Session,
    company_id: str,
    currency_code: str,
    as_of: Optional[date] = None,
) -> Decimal:
    """Inventory is stored in item currency; only base-currency items are counted."""
    stmt = select(func.sum(Inventory.total_value)).where(
        Inventory.company_id == company_id,
        Inventory.currency_code == currency_code,
    )
    if as_of is not None:
        stmt = stmt.where(
            (Inventory.acquisition_date.is_(None)) | (Inventory.acquisition_date <= as_of)
        )
    return _sum(db, stmt)


def sum_short_term_liabilities(db: Session, company_id: str) -> Decimal:
    stmt = select(func.sum(ShortTermLiability.amount_base_currency)).where(
        ShortTermLiability.company_id == company_id,
        ShortTermLiability.status == LiabilityStatus.ACTIVE.value,
    )
    return _sum(db, stmt)


# -------------------------
# Flows
# -------------------------

def _sum_open_invoices(
    db: Session,
    company_id: str,
    invoice_type: InvoiceType,
    statuses: Sequence,
    as_of: Optional[date],
) -> Decimal:
    stmt = select(func.sum(Invoice.total_amount_base_currency)).where(
        Invoice.company_id == company_id,
        Invoice.invoice_type == invoice_type.value,
        Invoice.status.in_(_values(statuses)),
    )
    if as_of is not None:
        stmt = stmt.where(Invoice.issue_date <= as_of)
    return _sum(db, stmt)


def sum_open_sales_invoices(db: Session, company_id: str, as_of: Optional[date] = None) -> Decimal:
    return _sum_open_invoices(db, company_id, InvoiceType.SALES, OPEN_SALES_INVOICE_STATUSES, as_of)


def sum_open_purchase_invoices(db: Session, company_id: str, as_of: Optional[date] = None) -> Decimal:
    return _sum_open_invoices(db, company_id, InvoiceType.PURCHASE, OPEN_PURCHASE_INVOICE_STATUSES, as_of)


# -------------------------
# Due-date windows
# -------------------------

def find_payables_due_between(
    db: Session,
    company_id: str,
    start: date,
    end: date,
    statuses: Sequence,
) -> List[AccountsPayable]:
    stmt = (
        select(AccountsPayable)
        .where(
            AccountsPayable.company_id == company_id,
            AccountsPayable.due_date >= start,
            AccountsPayable.due_date <= end,
            AccountsPayable.status.in_(_values(statuses)),
        )
        .order_by(AccountsPayable.due_date.asc(), AccountsPayable.id.asc())
    )
    return _rows(db, stmt)


def find_receivables_due_before(
    db: Session,
    company_id: str,
    before: date,
    excluded_status: ReceivableStatus = ReceivableStatus.PAID,
) -> List[AccountsReceivable]:
    stmt = (
        select(AccountsReceivable)
        .where(
            AccountsReceivable.company_id == company_id,
            AccountsReceivable.due_date < before,
            AccountsReceivable.status != excluded_status.value,
        )
        .order_by(AccountsReceivable.due_date.asc(), AccountsReceivable.id.asc())
    )
    return _rows(db, stmt)


# -------------------------
# Counterparties
# -------------------------

def _top(db: Session, name_col, amount_col, company_col, status_col, company_id: str, statuses, limit: int):
    stmt = (
        select(name_col, func.sum(amount_col).label("total"))
        .where(company_col == company_id, status_col.in_(_values(statuses)))
        .group_by(name_col)
        .order_by(func.sum(amount_col).desc(), name_col.asc())
        .limit(limit)
    )
    try:
        rows = db.execute(stmt).all()
    except OperationalError as exc:
        logger.warning("counterparty query failed: %s", exc)
        raise UpstreamUnavailable() from exc
    return [(name, _as_decimal(total)) for name, total in rows]


def top_customers(db: Session, company_id: str, limit: int = 5) -> List[Tuple[str, Decimal]]:
    return _top(
        db,
        AccountsReceivable.customer_name,
        AccountsReceivable.amount_base_currency,
        AccountsReceivable.company_id,
        AccountsReceivable.status,
        company_id,
        OPEN_RECEIVABLE_STATUSES,
        limit,
    )


def top_vendors(db: Session, company_id: str, limit: int = 5) -> List[Tuple[str, Decimal]]:
    return _top(
        db,
        AccountsPayable.vendor_name,
        AccountsPayable.amount_base_currency,
        AccountsPayable.company_id,
        AccountsPayable.status,
        company_id,
        OPEN_PAYABLE_STATUSES,
        limit,
    )
