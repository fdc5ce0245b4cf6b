# backend/app/api/deps.py
from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from backend.app.db import get_db
from backend.app.models import Company
from backend.app.services.company_service import require_company
from backend.app.services.import_scheduler import JobRegistry, Scheduler


def require_company_dep(company_id: str, db: Session = Depends(get_db)) -> Company:
    """Path dependency: resolves {company_id} or answers 404."""
    return require_company(db, company_id)


def get_scheduler(request: Request) -> Scheduler:
    return request.app.state.import_scheduler


def get_job_registry(request: Request) -> JobRegistry:
    return request.app.state.import_job_registry
