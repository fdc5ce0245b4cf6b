from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from backend.app.api.deps import require_company_dep
from backend.app.db import get_db
from backend.app.models import Company
from backend.app.services import company_service

router = APIRouter(prefix="/api/companies", tags=["companies"])


class CompanyCreateIn(BaseModel):
    name: str
    company_type: str = "SME"
    industry: Optional[str] = None
    currency_code: str = "USD"


class CompanyOut(BaseModel):
    id: str
    name: str
    company_type: str
    industry: Optional[str] = None
    currency_code: str
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class CashAccountIn(BaseModel):
    account_name: str
    balance: Decimal
    currency_code: Optional[str] = None
    exchange_rate: Optional[Decimal] = None
    account_type: str = "CHECKING"
    bank_name: Optional[str] = None
    active: bool = True


class CashAccountOut(BaseModel):
    id: str
    company_id: str
    account_name: str
    account_type: str
    balance: Decimal
    currency_code: str
    balance_base_currency: Decimal
    active: bool

    class Config:
        from_attributes = True


class ShortTermLiabilityIn(BaseModel):
    description: str
    amount: Decimal
    currency_code: Optional[str] = None
    exchange_rate: Optional[Decimal] = None
    liability_type: str = "OTHER"
    status: str = "ACTIVE"
    creditor: Optional[str] = None


class ShortTermLiabilityOut(BaseModel):
    id: str
    company_id: str
    description: str
    liability_type: str
    amount: Decimal
    currency_code: str
    amount_base_currency: Decimal
    status: str

    class Config:
        from_attributes = True


@router.post("", response_model=CompanyOut)
def create_company(payload: CompanyCreateIn, db: Session = Depends(get_db)):
    return company_service.create_company(
        db,
        name=payload.name,
        company_type=payload.company_type,
        industry=payload.industry,
        currency_code=payload.currency_code,
    )


@router.get("", response_model=List[CompanyOut])
def list_companies(db: Session = Depends(get_db)):
    return company_service.list_companies(db)


@router.get("/{company_id}", response_model=CompanyOut)
def get_company(company: Company = Depends(require_company_dep)):
    return company


@router.post("/{company_id}/cash-accounts", response_model=CashAccountOut)
def add_cash_account(company_id: str, payload: CashAccountIn, db: Session = Depends(get_db)):
    return company_service.add_cash_account(db, company_id, **payload.model_dump())


@router.post("/{company_id}/short-term-liabilities", response_model=ShortTermLiabilityOut)
def add_short_term_liability(company_id: str, payload: ShortTermLiabilityIn, db: Session = Depends(get_db)):
    return company_service.add_short_term_liability(db, company_id, **payload.model_dump())
