from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from backend.app.db import get_db
from backend.app.domain.contracts import WorkingCapitalSnapshotOut
from backend.app.services import alert_service, working_capital_service

router = APIRouter(prefix="/api/working-capital", tags=["working-capital"])


class MetricOut(BaseModel):
    company_id: str
    metric: str
    value: Optional[Decimal] = None


class LiquidityRatiosOut(BaseModel):
    company_id: str
    current_ratio: Optional[Decimal] = None
    quick_ratio: Optional[Decimal] = None
    cash_ratio: Optional[Decimal] = None


class HistoricalPointOut(BaseModel):
    date: date
    metrics: WorkingCapitalSnapshotOut


class GenerateAlertsOut(BaseModel):
    company_id: str
    alerts_generated: int


@router.get("/metrics/{company_id}", response_model=WorkingCapitalSnapshotOut)
def get_metrics(
    company_id: str,
    as_of: Optional[date] = Query(default=None),
    db: Session = Depends(get_db),
):
    snapshot = working_capital_service.build_snapshot(db, company_id, as_of)
    return WorkingCapitalSnapshotOut(**snapshot.to_dict())


@router.get("/dso/{company_id}", response_model=MetricOut)
def get_dso(company_id: str, db: Session = Depends(get_db)):
    return MetricOut(company_id=company_id, metric="dso", value=working_capital_service.calculate_dso(db, company_id))


@router.get("/dpo/{company_id}", response_model=MetricOut)
def get_dpo(company_id: str, db: Session = Depends(get_db)):
    return MetricOut(company_id=company_id, metric="dpo", value=working_capital_service.calculate_dpo(db, company_id))


@router.get("/dio/{company_id}", response_model=MetricOut)
def get_dio(company_id: str, db: Session = Depends(get_db)):
    return MetricOut(company_id=company_id, metric="dio", value=working_capital_service.calculate_dio(db, company_id))


@router.get("/ccc/{company_id}", response_model=MetricOut)
def get_ccc(company_id: str, db: Session = Depends(get_db)):
    return MetricOut(company_id=company_id, metric="ccc", value=working_capital_service.calculate_ccc(db, company_id))


@router.get("/liquidity-ratios/{company_id}", response_model=LiquidityRatiosOut)
def get_liquidity_ratios(company_id: str, db: Session = Depends(get_db)):
    ratios: Dict[str, Optional[Decimal]] = working_capital_service.calculate_liquidity_ratios(db, company_id)
    return LiquidityRatiosOut(company_id=company_id, **ratios)


@router.get("/historical/{company_id}", response_model=List[HistoricalPointOut])
def get_historical(
    company_id: str,
    start_date: date = Query(...),
    end_date: date = Query(...),
    interval: str = Query(default="MONTHLY"),
    db: Session = Depends(get_db),
):
    history = working_capital_service.get_historical_metrics(db, company_id, start_date, end_date, interval)
    return [
        HistoricalPointOut(date=day, metrics=WorkingCapitalSnapshotOut(**snap.to_dict()))
        for day, snap in history.items()
    ]


@router.post("/generate-alerts/{company_id}", response_model=GenerateAlertsOut)
def generate_alerts(company_id: str, db: Session = Depends(get_db)):
    return GenerateAlertsOut(company_id=company_id, alerts_generated=alert_service.generate_alerts(db, company_id))
