from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from backend.app.db import get_db
from backend.app.domain.contracts import AlertOut, DashboardSummaryOut
from backend.app.services import alert_service, working_capital_service

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])

_GENERATORS = {
    "cash-gap": alert_service.generate_cash_gap_alerts,
    "liquidity": alert_service.generate_liquidity_alerts,
    "working-capital": alert_service.generate_working_capital_ratio_alerts,
    "ccc": alert_service.generate_ccc_alerts,
}


class GeneratedOut(BaseModel):
    company_id: str
    family: str
    alerts_generated: int


@router.get("/summary/{company_id}", response_model=DashboardSummaryOut)
def get_summary(
    company_id: str,
    today: Optional[date] = Query(default=None),
    db: Session = Depends(get_db),
):
    return working_capital_service.get_dashboard_summary(db, company_id, today)


@router.get("/alerts/{company_id}", response_model=List[AlertOut])
def list_alerts(
    company_id: str,
    active_only: bool = Query(default=False),
    db: Session = Depends(get_db),
):
    return alert_service.list_alerts(db, company_id, active_only=active_only)


@router.get("/alerts/{company_id}/unread", response_model=List[AlertOut])
def list_unread_alerts(company_id: str, db: Session = Depends(get_db)):
    return alert_service.list_alerts(db, company_id, unread_only=True)


@router.get("/alerts/{company_id}/type/{alert_type}", response_model=List[AlertOut])
def list_alerts_by_type(company_id: str, alert_type: str, db: Session = Depends(get_db)):
    return alert_service.list_alerts(db, company_id, alert_type=alert_type)


@router.get("/alerts/{company_id}/severity/{severity}", response_model=List[AlertOut])
def list_alerts_by_severity(company_id: str, severity: str, db: Session = Depends(get_db)):
    return alert_service.list_alerts(db, company_id, severity=severity)


@router.post("/alerts/{alert_id}/read", response_model=AlertOut)
def mark_alert_read(alert_id: str, db: Session = Depends(get_db)):
    return alert_service.mark_read(db, alert_id)


@router.post("/alerts/{alert_id}/dismiss", response_model=AlertOut)
def dismiss_alert(alert_id: str, db: Session = Depends(get_db)):
    return alert_service.dismiss(db, alert_id)


@router.post("/alerts/{company_id}/generate/{family}", response_model=GeneratedOut)
def generate_family(company_id: str, family: str, db: Session = Depends(get_db)):
    generator = _GENERATORS.get(family)
    if not generator:
        raise HTTPException(status_code=404, detail=f"unknown alert family: {family}")
    return GeneratedOut(company_id=company_id, family=family, alerts_generated=generator(db, company_id))
