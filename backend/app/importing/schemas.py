"""
Column layouts for the CSV ledger imports.

One LedgerSchema per import kind describes which columns are required, which
are optional, how each cell is parsed, and which model the row becomes. The
generic import loop in services/import_service.py is driven entirely by these
descriptors.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Type

from backend.app.domain.enums import (
    InventoryItemType,
    InventoryStatus,
    InvoiceStatus,
    InvoiceType,
    PayableStatus,
    ReceivableStatus,
    TransactionType,
)
from backend.app.models import (
    AccountsPayable,
    AccountsReceivable,
    Inventory,
    Invoice,
    Transaction,
)
from backend.app.services.errors import RowFailure


# -------------------------
# Cell parsers
# -------------------------

def parse_text(value: str) -> str:
    return value.strip()


def parse_required_text(value: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise RowFailure("value is required")
    return cleaned


# Numeric(19,4) money columns hold 15 integer digits, Numeric(19,6) rates 13.
MONEY_LIMIT = Decimal(10) ** 15
RATE_LIMIT = Decimal(10) ** 13
INT_LIMIT = 2**31 - 1


def check_range(value: Decimal, limit: Decimal = MONEY_LIMIT) -> Decimal:
    if not value.is_finite():
        raise RowFailure(f"not a finite number: {value}")
    if abs(value) >= limit:
        raise RowFailure(f"value out of range: {value}")
    return value


def _to_decimal(value: str) -> Decimal:
    cleaned = value.strip().replace(",", "")
    try:
        return Decimal(cleaned)
    except InvalidOperation as exc:
        raise RowFailure(f"invalid number: {value!r}") from exc


def parse_decimal(value: str) -> Decimal:
    return check_range(_to_decimal(value))


def parse_rate(value: str) -> Decimal:
    return check_range(_to_decimal(value), RATE_LIMIT)


def parse_int(value: str) -> int:
    try:
        parsed = int(value.strip())
    except ValueError as exc:
        raise RowFailure(f"invalid integer: {value!r}") from exc
    if abs(parsed) > INT_LIMIT:
        raise RowFailure(f"value out of range: {parsed}")
    return parsed


def parse_date(value: str) -> date:
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError as exc:
        raise RowFailure(f"invalid date (expected yyyy-MM-dd): {value!r}") from exc


def parse_currency(value: str) -> str:
    cleaned = value.strip().upper()
    if len(cleaned) != 3:
        raise RowFailure(f"invalid currency code: {value!r}")
    return cleaned


# -------------------------
# Descriptors
# -------------------------

@dataclass(frozen=True)
class Column:
    name: str
    parse: Callable[[str], Any] = parse_text
    enum: Optional[Type[Enum]] = None
    # Optional enum columns fall back to this value (with a warning) when the
    # cell holds an unknown member.
    fallback: Optional[Enum] = None
    default: Any = None


@dataclass(frozen=True)
class LedgerSchema:
    kind: str
    import_type: str
    label: str
    model: type
    required: Tuple[Column, ...]
    optional: Tuple[Column, ...] = ()
    amount_field: Optional[str] = None
    base_amount_field: Optional[str] = None

    @property
    def required_names(self) -> Tuple[str, ...]:
        return tuple(col.name for col in self.required)

    @property
    def defaults(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for col in self.optional:
            if col.fallback is not None:
                out[col.name] = col.fallback.value
            elif col.default is not None:
                out[col.name] = col.default
        return out


TRANSACTIONS = LedgerSchema(
    kind="transactions",
    import_type="TRANSACTIONS",
    label="cash transactions",
    model=Transaction,
    required=(
        Column("transaction_date", parse_date),
        Column("amount", parse_decimal),
        Column("description", parse_required_text),
        Column("transaction_type", enum=TransactionType),
        Column("currency_code", parse_currency),
    ),
    optional=(
        Column("reference_number"),
        Column("category"),
        Column("notes"),
        Column("exchange_rate", parse_rate),
        Column("amount_base_currency", parse_decimal),
        Column("cash_account_id"),
    ),
    amount_field="amount",
    base_amount_field="amount_base_currency",
)

INVOICES = LedgerSchema(
    kind="invoices",
    import_type="INVOICES",
    label="invoices",
    model=Invoice,
    required=(
        Column("invoice_number", parse_required_text),
        Column("invoice_type", enum=InvoiceType),
        Column("contact_name", parse_required_text),
        Column("issue_date", parse_date),
        Column("due_date", parse_date),
        Column("subtotal", parse_decimal),
        Column("total_amount", parse_decimal),
        Column("currency_code", parse_currency),
    ),
    optional=(
        Column("tax_amount", parse_decimal, default=Decimal("0")),
        Column("contact_email"),
        Column("payment_terms"),
        Column("notes"),
        Column("status", enum=InvoiceStatus, fallback=InvoiceStatus.SENT),
        Column("exchange_rate", parse_rate),
        Column("total_amount_base_currency", parse_decimal),
    ),
    amount_field="total_amount",
    base_amount_field="total_amount_base_currency",
)

RECEIVABLES = LedgerSchema(
    kind="receivables",
    import_type="ACCOUNTS_RECEIVABLE",
    label="accounts receivable entries",
    model=AccountsReceivable,
    required=(
        Column("customer_name", parse_required_text),
        Column("amount", parse_decimal),
        Column("currency_code", parse_currency),
        Column("invoice_date", parse_date),
        Column("due_date", parse_date),
        Column("invoice_number", parse_required_text),
        Column("status", enum=ReceivableStatus),
    ),
    optional=(
        Column("notes"),
        Column("payment_terms"),
        Column("exchange_rate", parse_rate),
        Column("amount_base_currency", parse_decimal),
    ),
    amount_field="amount",
    base_amount_field="amount_base_currency",
)

PAYABLES = LedgerSchema(
    kind="payables",
    import_type="ACCOUNTS_PAYABLE",
    label="accounts payable entries",
    model=AccountsPayable,
    required=(
        Column("vendor_name", parse_required_text),
        Column("amount", parse_decimal),
        Column("currency_code", parse_currency),
        Column("invoice_date", parse_date),
        Column("due_date", parse_date),
        Column("invoice_number", parse_required_text),
        Column("status", enum=PayableStatus),
    ),
    optional=(
        Column("category"),
        Column("notes"),
        Column("payment_terms"),
        Column("exchange_rate", parse_rate),
        Column("amount_base_currency", parse_decimal),
    ),
    amount_field="amount",
    base_amount_field="amount_base_currency",
)

INVENTORY = LedgerSchema(
    kind="inventory",
    import_type="INVENTORY",
    label="inventory items",
    model=Inventory,
    required=(
        Column("item_name", parse_required_text),
        Column("quantity", parse_int),
        Column("unit_cost", parse_decimal),
        Column("total_value", parse_decimal),
        Column("currency_code", parse_currency),
        Column("item_type", enum=InventoryItemType),
    ),
    optional=(
        Column("item_code"),
        Column("acquisition_date", parse_date),
        Column("location"),
        Column("description"),
        Column("reorder_level", parse_int),
        Column("status", enum=InventoryStatus, fallback=InventoryStatus.IN_STOCK),
    ),
)

SCHEMAS: Dict[str, LedgerSchema] = {
    schema.kind: schema
    for schema in (TRANSACTIONS, INVOICES, RECEIVABLES, PAYABLES, INVENTORY)
}


def get_schema(kind: str) -> LedgerSchema:
    schema = SCHEMAS.get((kind or "").strip().lower())
    if not schema:
        raise ValueError(f"unsupported import kind: {kind}")
    return schema
