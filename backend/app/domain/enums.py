from __future__ import annotations

from enum import Enum


class CompanyType(str, Enum):
    SME = "SME"
    MNE = "MNE"


class CashAccountType(str, Enum):
    CHECKING = "CHECKING"
    SAVINGS = "SAVINGS"
    MONEY_MARKET = "MONEY_MARKET"
    CASH_MANAGEMENT = "CASH_MANAGEMENT"
    TERM_DEPOSIT = "TERM_DEPOSIT"
    OTHER = "OTHER"


class TransactionType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    TRANSFER = "TRANSFER"
    PAYMENT_RECEIVED = "PAYMENT_RECEIVED"
    PAYMENT_SENT = "PAYMENT_SENT"
    REFUND = "REFUND"
    OTHER = "OTHER"


class InvoiceType(str, Enum):
    SALES = "SALES"  # outgoing, feeds receivables
    PURCHASE = "PURCHASE"  # incoming, feeds payables


class InvoiceStatus(str, Enum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    OVERDUE = "OVERDUE"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"
    CANCELLED = "CANCELLED"
    DISPUTED = "DISPUTED"


class ReceivableStatus(str, Enum):
    OPEN = "OPEN"
    OVERDUE = "OVERDUE"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"
    DISPUTED = "DISPUTED"
    WRITTEN_OFF = "WRITTEN_OFF"


class PayableStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    DISPUTED = "DISPUTED"


class InventoryItemType(str, Enum):
    RAW_MATERIAL = "RAW_MATERIAL"
    WORK_IN_PROGRESS = "WORK_IN_PROGRESS"
    FINISHED_GOODS = "FINISHED_GOODS"
    SUPPLIES = "SUPPLIES"
    OTHER = "OTHER"


class InventoryStatus(str, Enum):
    IN_STOCK = "IN_STOCK"
    LOW_STOCK = "LOW_STOCK"
    OUT_OF_STOCK = "OUT_OF_STOCK"
    DISCONTINUED = "DISCONTINUED"
    ON_ORDER = "ON_ORDER"


class LiabilityType(str, Enum):
    SHORT_TERM_LOAN = "SHORT_TERM_LOAN"
    LINE_OF_CREDIT = "LINE_OF_CREDIT"
    CREDIT_CARD = "CREDIT_CARD"
    TAX_PAYABLE = "TAX_PAYABLE"
    WAGES_PAYABLE = "WAGES_PAYABLE"
    DEFERRED_REVENUE = "DEFERRED_REVENUE"
    INTEREST_PAYABLE = "INTEREST_PAYABLE"
    OTHER = "OTHER"


class LiabilityStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    DISPUTED = "DISPUTED"
    RESTRUCTURED = "RESTRUCTURED"


class AlertType(str, Enum):
    CASH_GAP = "CASH_GAP"
    LIQUIDITY_ISSUE = "LIQUIDITY_ISSUE"
    OVERDUE_RECEIVABLE = "OVERDUE_RECEIVABLE"
    OVERDUE_PAYABLE = "OVERDUE_PAYABLE"
    LOW_INVENTORY = "LOW_INVENTORY"
    CASH_FLOW_FORECAST = "CASH_FLOW_FORECAST"
    WORKING_CAPITAL_RATIO = "WORKING_CAPITAL_RATIO"
    QUICK_RATIO = "QUICK_RATIO"
    CCC_ISSUE = "CCC_ISSUE"
    SYSTEM_NOTIFICATION = "SYSTEM_NOTIFICATION"


class AlertSeverity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ImportStatus(str, Enum):
    COMPLETED = "COMPLETED"
    PARTIALLY_COMPLETED = "PARTIALLY_COMPLETED"
    FAILED = "FAILED"


class HistoryInterval(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


# Status sets the aggregate queries treat as "still open".
OPEN_RECEIVABLE_STATUSES = (
    ReceivableStatus.OPEN,
    ReceivableStatus.OVERDUE,
    ReceivableStatus.PARTIALLY_PAID,
    ReceivableStatus.DISPUTED,
)
OPEN_PAYABLE_STATUSES = (
    PayableStatus.PENDING,
    PayableStatus.APPROVED,
    PayableStatus.PARTIALLY_PAID,
    PayableStatus.OVERDUE,
)
OPEN_SALES_INVOICE_STATUSES = (
    InvoiceStatus.SENT,
    InvoiceStatus.OVERDUE,
    InvoiceStatus.PARTIALLY_PAID,
)
OPEN_PURCHASE_INVOICE_STATUSES = (
    InvoiceStatus.PENDING,
    InvoiceStatus.APPROVED,
    InvoiceStatus.PARTIALLY_PAID,
    InvoiceStatus.OVERDUE,
)
