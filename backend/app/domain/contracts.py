from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ImportReport(BaseModel):
    import_type: str
    source: str = "CSV"
    file_name: Optional[str] = None
    import_date: datetime
    total_records: int = 0
    successful_records: int = 0
    failed_records: int = 0
    status: str
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    summary: Optional[str] = None


class WorkingCapitalSnapshotOut(BaseModel):
    company_id: str
    as_of_date: date

    cash_and_equivalents: Decimal
    accounts_receivable: Decimal
    inventory: Decimal
    other_current_assets: Decimal
    total_current_assets: Decimal

    accounts_payable: Decimal
    short_term_debt: Decimal
    other_current_liabilities: Decimal
    total_current_liabilities: Decimal

    net_working_capital: Decimal
    current_ratio: Optional[Decimal] = None
    quick_ratio: Optional[Decimal] = None
    cash_ratio: Optional[Decimal] = None
    dso: Optional[Decimal] = None
    dpo: Optional[Decimal] = None
    dio: Optional[Decimal] = None
    ccc: Decimal

    class Config:
        from_attributes = True


class AlertOut(BaseModel):
    id: str
    company_id: str
    title: str
    message: str
    alert_type: str
    severity: str
    trigger_metric: Optional[str] = None
    trigger_threshold: Optional[str] = None
    trigger_value: Optional[str] = None
    read: bool
    dismissed: bool
    read_at: Optional[datetime] = None
    dismissed_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class DashboardSummaryOut(BaseModel):
    company_id: str
    as_of_date: date
    cash_balance: Decimal
    accounts_receivable: Decimal
    accounts_payable: Decimal
    inventory: Decimal
    net_working_capital: Decimal
    current_ratio: Optional[Decimal] = None
    quick_ratio: Optional[Decimal] = None
    dso: Optional[Decimal] = None
    dpo: Optional[Decimal] = None
    dio: Optional[Decimal] = None
    ccc: Decimal
    alert_counts: Dict[str, int]
    recent_alerts: List[Dict[str, Any]]
    upcoming_receivables_30_days: Decimal
    upcoming_payables_30_days: Decimal
    projected_cash_balance_30_days: Decimal
    top_customers: List[Dict[str, Any]]
    top_vendors: List[Dict[str, Any]]
    recommendations: List[Dict[str, str]]
