"""create working capital tables

Revision ID: 4c2e7a91d0b3
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "4c2e7a91d0b3"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


MONEY = sa.Numeric(19, 4)
RATE = sa.Numeric(19, 6)


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def _company_fk():
    return sa.ForeignKeyConstraint(["company_id"], ["companies.id"], ondelete="CASCADE")


def upgrade() -> None:
    op.create_table(
        "companies",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("company_type", sa.String(length=10), nullable=False),
        sa.Column("industry", sa.String(length=120), nullable=True),
        sa.Column("currency_code", sa.String(length=3), server_default=sa.text("'USD'"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "cash_accounts",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("company_id", sa.String(length=36), nullable=False),
        sa.Column("account_name", sa.String(length=200), nullable=False),
        sa.Column("account_number", sa.String(length=60), nullable=True),
        sa.Column("account_type", sa.String(length=30), nullable=False),
        sa.Column("bank_name", sa.String(length=200), nullable=True),
        sa.Column("balance", MONEY, nullable=False),
        sa.Column("currency_code", sa.String(length=3), nullable=False),
        sa.Column("exchange_rate", RATE, nullable=True),
        sa.Column("balance_base_currency", MONEY, nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        _company_fk(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_cash_accounts_company_id", "cash_accounts", ["company_id"], unique=False)

    op.create_table(
        "transactions",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("company_id", sa.String(length=36), nullable=False),
        sa.Column("cash_account_id", sa.String(length=36), nullable=True),
        sa.Column("transaction_date", sa.Date(), nullable=False),
        sa.Column("transaction_type", sa.String(length=30), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("currency_code", sa.String(length=3), nullable=False),
        sa.Column("exchange_rate", RATE, nullable=True),
        sa.Column("amount_base_currency", MONEY, nullable=False),
        sa.Column("reference_number", sa.String(length=120), nullable=True),
        sa.Column("category", sa.String(length=120), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        _company_fk(),
        sa.ForeignKeyConstraint(["cash_account_id"], ["cash_accounts.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_transactions_company_date", "transactions", ["company_id", "transaction_date"], unique=False)

    op.create_table(
        "invoices",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("company_id", sa.String(length=36), nullable=False),
        sa.Column("invoice_number", sa.String(length=120), nullable=False),
        sa.Column("invoice_type", sa.String(length=20), nullable=False),
        sa.Column("contact_name", sa.String(length=200), nullable=False),
        sa.Column("contact_email", sa.String(length=320), nullable=True),
        sa.Column("issue_date", sa.Date(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("subtotal", MONEY, nullable=False),
        sa.Column("tax_amount", MONEY, nullable=False),
        sa.Column("total_amount", MONEY, nullable=False),
        sa.Column("currency_code", sa.String(length=3), nullable=False),
        sa.Column("exchange_rate", RATE, nullable=True),
        sa.Column("total_amount_base_currency", MONEY, nullable=False),
        sa.Column("payment_terms", sa.String(length=120), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=30), nullable=False),
        *_timestamps(),
        _company_fk(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_invoices_company_type_status", "invoices", ["company_id", "invoice_type", "status"], unique=False
    )

    op.create_table(
        "accounts_receivable",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("company_id", sa.String(length=36), nullable=False),
        sa.Column("customer_name", sa.String(length=200), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("currency_code", sa.String(length=3), nullable=False),
        sa.Column("exchange_rate", RATE, nullable=True),
        sa.Column("amount_base_currency", MONEY, nullable=False),
        sa.Column("invoice_number", sa.String(length=120), nullable=False),
        sa.Column("invoice_date", sa.Date(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=30), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("payment_terms", sa.String(length=120), nullable=True),
        *_timestamps(),
        _company_fk(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_accounts_receivable_company_status", "accounts_receivable", ["company_id", "status"], unique=False
    )

    op.create_table(
        "accounts_payable",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("company_id", sa.String(length=36), nullable=False),
        sa.Column("vendor_name", sa.String(length=200), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("currency_code", sa.String(length=3), nullable=False),
        sa.Column("exchange_rate", RATE, nullable=True),
        sa.Column("amount_base_currency", MONEY, nullable=False),
        sa.Column("invoice_number", sa.String(length=120), nullable=False),
        sa.Column("invoice_date", sa.Date(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=30), nullable=False),
        sa.Column("category", sa.String(length=120), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("payment_terms", sa.String(length=120), nullable=True),
        *_timestamps(),
        _company_fk(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_accounts_payable_company_status", "accounts_payable", ["company_id", "status"], unique=False)
    op.create_index(
        "ix_accounts_payable_company_due_date", "accounts_payable", ["company_id", "due_date"], unique=False
    )

    op.create_table(
        "inventory",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("company_id", sa.String(length=36), nullable=False),
        sa.Column("item_name", sa.String(length=200), nullable=False),
        sa.Column("item_code", sa.String(length=120), nullable=True),
        sa.Column("item_type", sa.String(length=30), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_cost", MONEY, nullable=False),
        sa.Column("total_value", MONEY, nullable=False),
        sa.Column("currency_code", sa.String(length=3), nullable=False),
        sa.Column("acquisition_date", sa.Date(), nullable=True),
        sa.Column("location", sa.String(length=200), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("reorder_level", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(length=30), nullable=False),
        *_timestamps(),
        _company_fk(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_inventory_company_id", "inventory", ["company_id"], unique=False)

    op.create_table(
        "short_term_liabilities",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("company_id", sa.String(length=36), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False),
        sa.Column("liability_type", sa.String(length=30), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("currency_code", sa.String(length=3), nullable=False),
        sa.Column("exchange_rate", RATE, nullable=True),
        sa.Column("amount_base_currency", MONEY, nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("interest_rate", RATE, nullable=True),
        sa.Column("creditor", sa.String(length=200), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=30), nullable=False),
        *_timestamps(),
        _company_fk(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_short_term_liabilities_company_id", "short_term_liabilities", ["company_id"], unique=False)

    op.create_table(
        "alerts",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("company_id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("alert_type", sa.String(length=40), nullable=False),
        sa.Column("severity", sa.String(length=20), nullable=False),
        sa.Column("trigger_metric", sa.String(length=120), nullable=True),
        sa.Column("trigger_threshold", sa.String(length=60), nullable=True),
        sa.Column("trigger_value", sa.String(length=60), nullable=True),
        sa.Column("read", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("dismissed", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("read_at", sa.DateTime(), nullable=True),
        sa.Column("dismissed_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        _company_fk(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_alerts_company_created_at", "alerts", ["company_id", "created_at"], unique=False)
    op.create_index("ix_alerts_company_severity", "alerts", ["company_id", "severity"], unique=False)

    op.create_table(
        "scheduled_import_jobs",
        sa.Column("job_id", sa.String(length=160), nullable=False),
        sa.Column("company_id", sa.String(length=36), nullable=False),
        sa.Column("source_type", sa.String(length=40), nullable=False),
        sa.Column("cron_expression", sa.String(length=120), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("cancelled_at", sa.DateTime(), nullable=True),
        _company_fk(),
        sa.PrimaryKeyConstraint("job_id"),
    )
    op.create_index("ix_scheduled_import_jobs_company_id", "scheduled_import_jobs", ["company_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_scheduled_import_jobs_company_id", table_name="scheduled_import_jobs")
    op.drop_table("scheduled_import_jobs")
    op.drop_index("ix_alerts_company_severity", table_name="alerts")
    op.drop_index("ix_alerts_company_created_at", table_name="alerts")
    op.drop_table("alerts")
    op.drop_index("ix_short_term_liabilities_company_id", table_name="short_term_liabilities")
    op.drop_table("short_term_liabilities")
    op.drop_index("ix_inventory_company_id", table_name="inventory")
    op.drop_table("inventory")
    op.drop_index("ix_accounts_payable_company_due_date", table_name="accounts_payable")
    op.drop_index("ix_accounts_payable_company_status", table_name="accounts_payable")
    op.drop_table("accounts_payable")
    op.drop_index("ix_accounts_receivable_company_status", table_name="accounts_receivable")
    op.drop_table("accounts_receivable")
    op.drop_index("ix_invoices_company_type_status", table_name="invoices")
    op.drop_table("invoices")
    op.drop_index("ix_transactions_company_date", table_name="transactions")
    op.drop_table("transactions")
    op.drop_index("ix_cash_accounts_company_id", table_name="cash_accounts")
    op.drop_table("cash_accounts")
    op.drop_table("companies")
