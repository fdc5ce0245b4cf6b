from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel
from sqlalchemy.orm import Session

from backend.app.api.deps import get_job_registry, get_scheduler
from backend.app.db import get_db
from backend.app.domain.contracts import ImportReport
from backend.app.integrations import CONNECTORS
from backend.app.services import import_scheduler, import_service
from backend.app.services.import_scheduler import JobRegistry, Scheduler

router = APIRouter(prefix="/api/import", tags=["import"])


class ScheduleIn(BaseModel):
    source_type: str
    cron_expression: str


class ScheduleOut(BaseModel):
    job_id: str


class CancelOut(BaseModel):
    job_id: str
    cancelled: bool


class TickIn(BaseModel):
    now: Optional[datetime] = None


class TickOut(BaseModel):
    ran: int


def _csv(db: Session, company_id: str, kind: str, file: UploadFile) -> ImportReport:
    return import_service.run_import(db, company_id, kind, file.file, file.filename)


@router.post("/transactions/{company_id}", response_model=ImportReport)
def import_transactions(company_id: str, file: UploadFile = File(...), db: Session = Depends(get_db)):
    return _csv(db, company_id, "transactions", file)


@router.post("/invoices/{company_id}", response_model=ImportReport)
def import_invoices(company_id: str, file: UploadFile = File(...), db: Session = Depends(get_db)):
    return _csv(db, company_id, "invoices", file)


@router.post("/accounts-receivable/{company_id}", response_model=ImportReport)
def import_receivables(company_id: str, file: UploadFile = File(...), db: Session = Depends(get_db)):
    return _csv(db, company_id, "receivables", file)


@router.post("/accounts-payable/{company_id}", response_model=ImportReport)
def import_payables(company_id: str, file: UploadFile = File(...), db: Session = Depends(get_db)):
    return _csv(db, company_id, "payables", file)


@router.post("/inventory/{company_id}", response_model=ImportReport)
def import_inventory(company_id: str, file: UploadFile = File(...), db: Session = Depends(get_db)):
    return _csv(db, company_id, "inventory", file)


@router.post("/quickbooks/{company_id}", response_model=ImportReport)
def import_from_quickbooks(company_id: str, db: Session = Depends(get_db)):
    return CONNECTORS["quickbooks"].import_data(company_id=company_id, db=db)


@router.post("/xero/{company_id}", response_model=ImportReport)
def import_from_xero(company_id: str, db: Session = Depends(get_db)):
    return CONNECTORS["xero"].import_data(company_id=company_id, db=db)


@router.post("/schedule/{company_id}", response_model=ScheduleOut)
def schedule_import(
    company_id: str,
    payload: ScheduleIn,
    db: Session = Depends(get_db),
    scheduler: Scheduler = Depends(get_scheduler),
    registry: JobRegistry = Depends(get_job_registry),
):
    job_id = import_scheduler.schedule_import_job(
        db,
        company_id,
        payload.source_type,
        payload.cron_expression,
        scheduler=scheduler,
        registry=registry,
    )
    return ScheduleOut(job_id=job_id)


@router.delete("/schedule/{job_id}", response_model=CancelOut)
def cancel_schedule(
    job_id: str,
    db: Session = Depends(get_db),
    registry: JobRegistry = Depends(get_job_registry),
):
    return CancelOut(
        job_id=job_id,
        cancelled=import_scheduler.cancel_scheduled_import_job(db, job_id, registry=registry),
    )


@router.post("/scheduler/tick", response_model=TickOut)
def scheduler_tick(req: TickIn, scheduler: Scheduler = Depends(get_scheduler)):
    """Runs every scheduled import whose cron time has passed."""
    return TickOut(ran=scheduler.run_due(req.now))
