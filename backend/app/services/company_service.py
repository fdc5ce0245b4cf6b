from __future__ import annotations

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from backend.app.domain.enums import CashAccountType, CompanyType, LiabilityStatus, LiabilityType
from backend.app.models import CashAccount, Company, ShortTermLiability
from backend.app.services.errors import InvalidArgument, NotFoundError, UpstreamUnavailable

logger = logging.getLogger(__name__)


def require_company(db: Session, company_id: str) -> Company:
    try:
        company = db.get(Company, company_id)
    except OperationalError as exc:
        logger.warning("company lookup failed: %s", exc)
        raise UpstreamUnavailable() from exc
    if not company:
        raise NotFoundError("company not found")
    return company


def parse_enum(enum_cls, raw: Optional[str], *, field: str):
    value = (raw or "").strip().upper()
    try:
        return enum_cls(value)
    except ValueError as exc:
        raise InvalidArgument(f"invalid {field}: {raw}") from exc


def create_company(
    db: Session,
    *,
    name: str,
    company_type: str = CompanyType.SME.value,
    industry: Optional[str] = None,
    currency_code: str = "USD",
) -> Company:
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidArgument("company name is required")
    company = Company(
        name=cleaned,
        company_type=parse_enum(CompanyType, company_type, field="company_type").value,
        industry=industry,
        currency_code=(currency_code or "USD").strip().upper(),
    )
    db.add(company)
    db.commit()
    db.refresh(company)
    return company


def list_companies(db: Session) -> List[Company]:
    return list(db.execute(select(Company).order_by(Company.created_at.asc(), Company.id.asc())).scalars().all())


def add_cash_account(
    db: Session,
    company_id: str,
    *,
    account_name: str,
    balance: Decimal,
    currency_code: Optional[str] = None,
    exchange_rate: Optional[Decimal] = None,
    account_type: str = CashAccountType.CHECKING.value,
    bank_name: Optional[str] = None,
    active: bool = True,
) -> CashAccount:
    company = require_company(db, company_id)
    currency = (currency_code or company.currency_code).strip().upper()
    base_balance = balance * exchange_rate if exchange_rate is not None else balance
    account = CashAccount(
        company_id=company.id,
        account_name=account_name,
        account_type=parse_enum(CashAccountType, account_type, field="account_type").value,
        bank_name=bank_name,
        balance=balance,
        currency_code=currency,
        exchange_rate=exchange_rate,
        balance_base_currency=base_balance,
        active=active,
    )
    db.add(account)
    db.commit()
    db.refresh(account)
    return account


def add_short_term_liability(
    db: Session,
    company_id: str,
    *,
    description: str,
    amount: Decimal,
    currency_code: Optional[str] = None,
    exchange_rate: Optional[Decimal] = None,
    liability_type: str = LiabilityType.OTHER.value,
    status: str = LiabilityStatus.ACTIVE.value,
    creditor: Optional[str] = None,
) -> ShortTermLiability:
    company = require_company(db, company_id)
    base_amount = amount * exchange_rate if exchange_rate is not None else amount
    row = ShortTermLiability(
        company_id=company.id,
        description=description,
        liability_type=parse_enum(LiabilityType, liability_type, field="liability_type").value,
        amount=amount,
        currency_code=(currency_code or company.currency_code).strip().upper(),
        exchange_rate=exchange_rate,
        amount_base_currency=base_amount,
        creditor=creditor,
        status=parse_enum(LiabilityStatus, status, field="status").value,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row
