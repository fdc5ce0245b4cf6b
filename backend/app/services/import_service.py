from __future__ import annotations

import csv
import io
import logging
from datetime import datetime, timezone
from typing import Any, BinaryIO, Dict, List, Mapping, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.domain.contracts import ImportReport
from backend.app.domain.enums import ImportStatus
from backend.app.importing import schemas
from backend.app.importing.schemas import Column, LedgerSchema
from backend.app.models import CashAccount, Company
from backend.app.services.company_service import require_company
from backend.app.services.errors import RowFailure

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_report(schema: LedgerSchema, file_name: Optional[str]) -> ImportReport:
    return ImportReport(
        import_type=schema.import_type,
        source="CSV",
        file_name=file_name,
        import_date=utcnow(),
        status=ImportStatus.COMPLETED.value,
    )


def _fail(report: ImportReport, schema: LedgerSchema, message: str) -> ImportReport:
    report.status = ImportStatus.FAILED.value
    report.errors.append(message)
    report.summary = f"Imported 0 out of 0 {schema.label}."
    logger.warning("import failed import_type=%s file=%s: %s", report.import_type, report.file_name, message)
    return report


def _is_blank(record: Mapping[str, Optional[str]]) -> bool:
    return all((value or "").strip() == "" for value in record.values() if isinstance(value, str) or value is None)


def _cell(record: Mapping[str, Optional[str]], name: str) -> str:
    value = record.get(name)
    return value if isinstance(value, str) else ""


# -------------------------
# Row parsing
# -------------------------

def _parse_enum(col: Column, raw: str):
    try:
        return col.enum(raw.strip().upper()).value
    except ValueError as exc:
        raise RowFailure(f"Invalid {col.name.replace('_', ' ')}: {raw}") from exc


def _parse_required(col: Column, raw: str) -> Any:
    if col.enum is not None:
        return _parse_enum(col, raw)
    try:
        return col.parse(raw)
    except RowFailure as exc:
        raise RowFailure(f"{col.name}: {exc}") from exc


def _parse_optional(col: Column, raw: str, row_no: int, warnings: List[str]) -> Tuple[bool, Any]:
    """Returns (present, value). Blank optional cells are treated as absent."""
    if not raw.strip():
        return False, None
    if col.enum is not None:
        try:
            return True, col.enum(raw.strip().upper()).value
        except ValueError:
            if col.fallback is None:
                raise RowFailure(f"Invalid {col.name.replace('_', ' ')}: {raw}")
            warnings.append(
                f"row {row_no}: unknown {col.name} {raw!r}, defaulted to {col.fallback.value}"
            )
            return True, col.fallback.value
    try:
        return True, col.parse(raw)
    except RowFailure as exc:
        raise RowFailure(f"{col.name}: {exc}") from exc


def build_row_values(
    schema: LedgerSchema,
    record: Mapping[str, Optional[str]],
    row_no: int,
    warnings: List[str],
) -> Dict[str, Any]:
    values: Dict[str, Any] = dict(schema.defaults)
    for col in schema.required:
        values[col.name] = _parse_required(col, _cell(record, col.name))

    row_warnings: List[str] = []
    for col in schema.optional:
        present, value = _parse_optional(col, _cell(record, col.name), row_no, row_warnings)
        if present:
            values[col.name] = value

    if schema.base_amount_field and values.get(schema.base_amount_field) is None:
        amount = values[schema.amount_field]
        rate = values.get("exchange_rate")
        base = amount * rate if rate is not None else amount
        try:
            values[schema.base_amount_field] = schemas.check_range(base)
        except RowFailure as exc:
            raise RowFailure(f"{schema.base_amount_field}: {exc}") from exc

    # Warnings only surface once the row is known to be otherwise valid.
    warnings.extend(row_warnings)
    return values


def _resolve_cash_account(db: Session, company: Company, values: Dict[str, Any]) -> None:
    account_id = values.get("cash_account_id")
    if not account_id:
        return
    account = db.execute(
        select(CashAccount.id).where(CashAccount.id == account_id, CashAccount.company_id == company.id)
    ).scalar_one_or_none()
    if account is None:
        raise RowFailure(f"Cash account not found with id: {account_id}")


def _persist(db: Session, schema: LedgerSchema, company: Company, values: Dict[str, Any]) -> None:
    try:
        with db.begin_nested():
            db.add(schema.model(company_id=company.id, **values))
            db.flush()
    except SQLAlchemyError as exc:
        raise RowFailure(f"could not store record: {exc.__class__.__name__}") from exc


# -------------------------
# Pipeline
# -------------------------

def _open_reader(stream: BinaryIO) -> csv.DictReader:
    text = io.TextIOWrapper(stream, encoding="utf-8-sig", newline="")
    return csv.DictReader(text)


def _validate_file(stream: Optional[BinaryIO], file_name: Optional[str]) -> Optional[str]:
    if stream is None:
        return "File is empty"
    if not (file_name or "").lower().endswith(".csv"):
        return "Only CSV files are supported"
    return None


def run_import(
    db: Session,
    company_id: str,
    kind: str,
    stream: Optional[BinaryIO],
    file_name: Optional[str],
) -> ImportReport:
    """
    Load one CSV ledger file row by row.

    A row that cannot be parsed or stored is counted as failed and recorded
    as "row <n>: <reason>"; the remaining rows still load. Problems with the
    file as a whole produce a FAILED report with no rows persisted.
    """
    company = require_company(db, company_id)
    schema = schemas.get_schema(kind)
    report = _new_report(schema, file_name)

    problem = _validate_file(stream, file_name)
    if problem:
        return _fail(report, schema, problem)

    try:
        reader = _open_reader(stream)
        headers = tuple((h or "").strip() for h in (reader.fieldnames or []))
    except (UnicodeDecodeError, csv.Error) as exc:
        return _fail(report, schema, f"Failed to read CSV file: {exc}")

    if not headers:
        return _fail(report, schema, "File is empty")

    reader.fieldnames = list(headers)
    missing = [name for name in schema.required_names if name not in headers]
    if missing:
        return _fail(report, schema, f"CSV missing required columns {missing}. Found columns: {list(headers)}")

    rows = iter(reader)
    row_no = 0
    while True:
        try:
            record = next(rows)
        except StopIteration:
            break
        except (UnicodeDecodeError, csv.Error) as exc:
            if row_no == 0:
                return _fail(report, schema, f"Failed to read CSV file: {exc}")
            # The unreadable remainder counts as one failed record.
            report.total_records += 1
            report.failed_records += 1
            report.errors.append(f"Failed to read CSV file after row {row_no}: {exc}")
            logger.warning("import stream broke import_type=%s after row %s: %s", schema.import_type, row_no, exc)
            break

        if _is_blank(record):
            continue

        row_no += 1
        report.total_records += 1
        try:
            values = build_row_values(schema, record, row_no, report.warnings)
            _resolve_cash_account(db, company, values)
            _persist(db, schema, company, values)
        except RowFailure as exc:
            report.failed_records += 1
            report.errors.append(f"row {row_no}: {exc}")
            logger.warning("import row failed import_type=%s row=%s: %s", schema.import_type, row_no, exc)
            continue
        report.successful_records += 1

    db.commit()

    if report.failed_records > 0:
        report.status = ImportStatus.PARTIALLY_COMPLETED.value
    report.summary = (
        f"Imported {report.successful_records} out of {report.total_records} {schema.label}."
    )
    logger.info(
        "import finished import_type=%s file=%s total=%s ok=%s failed=%s",
        schema.import_type,
        file_name,
        report.total_records,
        report.successful_records,
        report.failed_records,
    )
    return report


def import_transactions(db: Session, company_id: str, stream: Optional[BinaryIO], file_name: Optional[str]) -> ImportReport:
    return run_import(db, company_id, schemas.TRANSACTIONS.kind, stream, file_name)


def import_invoices(db: Session, company_id: str, stream: Optional[BinaryIO], file_name: Optional[str]) -> ImportReport:
    return run_import(db, company_id, schemas.INVOICES.kind, stream, file_name)


def import_receivables(db: Session, company_id: str, stream: Optional[BinaryIO], file_name: Optional[str]) -> ImportReport:
    return run_import(db, company_id, schemas.RECEIVABLES.kind, stream, file_name)


def import_payables(db: Session, company_id: str, stream: Optional[BinaryIO], file_name: Optional[str]) -> ImportReport:
    return run_import(db, company_id, schemas.PAYABLES.kind, stream, file_name)


def import_inventory(db: Session, company_id: str, stream: Optional[BinaryIO], file_name: Optional[str]) -> ImportReport:
    return run_import(db, company_id, schemas.INVENTORY.kind, stream, file_name)


def not_implemented_report(import_type: str, source: str, message: str) -> ImportReport:
    report = ImportReport(
        import_type=import_type,
        source=source,
        import_date=utcnow(),
        status=ImportStatus.FAILED.value,
        summary=message,
    )
    report.errors.append(message)
    return report
