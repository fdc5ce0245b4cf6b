import io
from decimal import Decimal

import pytest
from sqlalchemy import select

from backend.app.models import AccountsReceivable, Invoice, Transaction
from backend.app.services import import_service
from backend.app.services.errors import NotFoundError


RECEIVABLE_HEADER = "customer_name,amount,currency_code,invoice_date,due_date,invoice_number,status"


def _csv(*lines):
    return io.BytesIO(("\n".join(lines) + "\n").encode("utf-8"))


def _receivable_rows(count, bad_rows=()):
    lines = [RECEIVABLE_HEADER]
    for n in range(1, count + 1):
        status = "NOT_A_STATUS" if n in bad_rows else "OPEN"
        lines.append(f"Customer {n},{n}00.00,USD,2023-01-01,2023-01-31,INV-{n:03d},{status}")
    return lines


def test_partial_failure_keeps_good_rows(sqlite_session, company):
    stream = _csv(*_receivable_rows(10, bad_rows=(3, 7)))

    report = import_service.import_receivables(sqlite_session, company.id, stream, "ar.csv")

    assert report.total_records == 10
    assert report.successful_records == 8
    assert report.failed_records == 2
    assert report.status == "PARTIALLY_COMPLETED"
    assert [e.split(":")[0] for e in report.errors] == ["row 3", "row 7"]
    assert "Invalid status: NOT_A_STATUS" in report.errors[0]
    assert report.summary == "Imported 8 out of 10 accounts receivable entries."
    assert report.import_type == "ACCOUNTS_RECEIVABLE"
    assert report.source == "CSV"
    assert report.file_name == "ar.csv"

    stored = sqlite_session.execute(
        select(AccountsReceivable.invoice_number).where(AccountsReceivable.company_id == company.id)
    ).scalars().all()
    assert len(stored) == 8
    assert "INV-003" not in stored


def test_clean_file_completes(sqlite_session, company):
    report = import_service.import_receivables(sqlite_session, company.id, _csv(*_receivable_rows(3)), "ar.csv")

    assert report.status == "COMPLETED"
    assert (report.total_records, report.successful_records, report.failed_records) == (3, 3, 0)
    assert report.errors == []


@pytest.mark.parametrize(
    "stream, file_name, message",
    [
        (None, "ar.csv", "File is empty"),
        (io.BytesIO(b""), "ar.csv", "File is empty"),
        (io.BytesIO(b"customer_name\n"), "ar.xlsx", "Only CSV files are supported"),
        (io.BytesIO(b"customer_name,amount\nAcme,10\n"), "ar.csv", "CSV missing required columns"),
        (io.BytesIO(b"\xff\xfe\xfacustomer_name\n"), "ar.csv", "Failed to read CSV file"),
    ],
)
def test_whole_file_problems_fail_without_rows(sqlite_session, company, stream, file_name, message):
    report = import_service.import_receivables(sqlite_session, company.id, stream, file_name)

    assert report.status == "FAILED"
    assert report.total_records == 0
    assert report.successful_records == 0
    assert report.errors and report.errors[0].startswith(message)

    count = sqlite_session.execute(
        select(AccountsReceivable.id).where(AccountsReceivable.company_id == company.id)
    ).all()
    assert count == []


def test_missing_columns_message_lists_found_columns(sqlite_session, company):
    stream = _csv("customer_name,amount", "Acme,10")

    report = import_service.import_receivables(sqlite_session, company.id, stream, "ar.csv")

    assert "currency_code" in report.errors[0]
    assert "Found columns: ['customer_name', 'amount']" in report.errors[0]


def test_blank_lines_are_skipped(sqlite_session, company):
    lines = _receivable_rows(2)
    stream = _csv(lines[0], lines[1], "", ",,,,,,", lines[2])

    report = import_service.import_receivables(sqlite_session, company.id, stream, "ar.csv")

    assert report.total_records == 2
    assert report.status == "COMPLETED"


def test_base_amount_defaults_from_exchange_rate(sqlite_session, company):
    stream = _csv(
        RECEIVABLE_HEADER + ",exchange_rate,amount_base_currency",
        "Euro Client,100.00,EUR,2023-01-01,2023-01-31,INV-EUR-1,OPEN,1.10,",
        "Plain Client,\"1,250.50\",USD,2023-01-01,2023-01-31,INV-USD-1,OPEN,,",
        "Explicit Client,200.00,GBP,2023-01-01,2023-01-31,INV-GBP-1,OPEN,1.25,260.00",
    )

    report = import_service.import_receivables(sqlite_session, company.id, stream, "ar.csv")
    assert report.status == "COMPLETED"

    rows = {
        r.invoice_number: r
        for r in sqlite_session.execute(
            select(AccountsReceivable).where(AccountsReceivable.company_id == company.id)
        ).scalars()
    }
    assert rows["INV-EUR-1"].amount_base_currency == Decimal("110.00")
    assert rows["INV-USD-1"].amount == Decimal("1250.50")
    assert rows["INV-USD-1"].amount_base_currency == Decimal("1250.50")
    assert rows["INV-GBP-1"].amount_base_currency == Decimal("260.00")


def test_invoice_unknown_status_falls_back_with_warning(sqlite_session, company):
    stream = _csv(
        "invoice_number,invoice_type,contact_name,issue_date,due_date,subtotal,total_amount,currency_code,status",
        "S-1,sales,Acme,2023-01-01,2023-01-31,100.00,110.00,usd,BOGUS",
        "S-2,SALES,Acme,2023-01-02,2023-02-01,50.00,55.00,USD,",
    )

    report = import_service.import_invoices(sqlite_session, company.id, stream, "invoices.csv")

    assert report.status == "COMPLETED"
    assert report.successful_records == 2
    assert report.warnings == ["row 1: unknown status 'BOGUS', defaulted to SENT"]

    invoices = sqlite_session.execute(
        select(Invoice).where(Invoice.company_id == company.id).order_by(Invoice.invoice_number)
    ).scalars().all()
    assert [i.status for i in invoices] == ["SENT", "SENT"]
    assert invoices[0].invoice_type == "SALES"
    assert invoices[0].currency_code == "USD"
    assert invoices[0].tax_amount == Decimal("0")
    assert invoices[0].total_amount_base_currency == Decimal("110.00")


def test_bad_cells_are_reported_per_row(sqlite_session, company):
    stream = _csv(
        RECEIVABLE_HEADER,
        "Acme,abc,USD,2023-01-01,2023-01-31,INV-1,OPEN",
        "Acme,10,USD,01/02/2023,2023-01-31,INV-2,OPEN",
        ",10,USD,2023-01-01,2023-01-31,INV-3,OPEN",
    )

    report = import_service.import_receivables(sqlite_session, company.id, stream, "ar.csv")

    assert report.failed_records == 3
    assert report.successful_records == 0
    assert report.errors[0].startswith("row 1: amount:")
    assert report.errors[1].startswith("row 2: invoice_date:")
    assert report.errors[2].startswith("row 3: customer_name:")


def test_transaction_with_unknown_cash_account_fails_row(sqlite_session, company):
    stream = _csv(
        "transaction_date,amount,description,transaction_type,currency_code,cash_account_id",
        "2023-01-05,500.00,Deposit,INCOME,USD,",
        "2023-01-06,75.00,Wire,PAYMENT_SENT,USD,missing-account",
    )

    report = import_service.import_transactions(sqlite_session, company.id, stream, "tx.csv")

    assert report.successful_records == 1
    assert report.errors == ["row 2: Cash account not found with id: missing-account"]
    assert report.summary == "Imported 1 out of 2 cash transactions."

    stored = sqlite_session.execute(select(Transaction).where(Transaction.company_id == company.id)).scalars().all()
    assert len(stored) == 1
    assert stored[0].amount_base_currency == Decimal("500.00")


def test_inventory_import(sqlite_session, company):
    stream = _csv(
        "item_name,quantity,unit_cost,total_value,currency_code,item_type,status,acquisition_date",
        "Steel,10,5.00,50.00,USD,RAW_MATERIAL,,2023-02-01",
        "Bolts,x,1.00,1.00,USD,SUPPLIES,,",
    )

    report = import_service.import_inventory(sqlite_session, company.id, stream, "inventory.csv")

    assert report.successful_records == 1
    assert report.errors[0].startswith("row 2: quantity:")
    assert report.summary == "Imported 1 out of 2 inventory items."


def test_unknown_company_is_not_found(sqlite_session):
    with pytest.raises(NotFoundError):
        import_service.import_payables(sqlite_session, "missing-company", _csv(RECEIVABLE_HEADER), "ap.csv")


def test_not_implemented_report():
    report = import_service.not_implemented_report(
        "QUICKBOOKS", "QUICKBOOKS", "QuickBooks integration is not implemented yet."
    )
    assert report.status == "FAILED"
    assert report.total_records == 0
    assert report.errors == ["QuickBooks integration is not implemented yet."]


@pytest.mark.parametrize("amount", ["Infinity", "-Infinity", "NaN", "sNaN", "1e40", "1000000000000000"])
def test_non_finite_and_oversized_amounts_fail_the_row(sqlite_session, company, amount):
    stream = _csv(
        RECEIVABLE_HEADER,
        f"Acme,{amount},USD,2023-01-01,2023-01-31,INV-1,OPEN",
        "Acme,999999999999999.99,USD,2023-01-01,2023-01-31,INV-2,OPEN",
    )

    report = import_service.import_receivables(sqlite_session, company.id, stream, "ar.csv")

    assert report.status == "PARTIALLY_COMPLETED"
    assert report.successful_records == 1
    assert report.errors[0].startswith("row 1: amount:")


def test_derived_base_amount_out_of_range_fails_the_row(sqlite_session, company):
    stream = _csv(
        RECEIVABLE_HEADER + ",exchange_rate",
        "Acme,900000000000000,EUR,2023-01-01,2023-01-31,INV-1,OPEN,2",
        "Acme,100,EUR,2023-01-01,2023-01-31,INV-2,OPEN,1e13",
    )

    report = import_service.import_receivables(sqlite_session, company.id, stream, "ar.csv")

    assert report.failed_records == 2
    assert report.errors[0].startswith("row 1: amount_base_currency: value out of range")
    assert report.errors[1].startswith("row 2: exchange_rate: value out of range")


def test_snapshot_still_builds_after_rejected_amounts(sqlite_session, company):
    from backend.app.services import working_capital_service
    from backend.tests.factories import add_debt

    add_debt(sqlite_session, company, "1000")
    sqlite_session.commit()
    stream = _csv(RECEIVABLE_HEADER, "Acme,Infinity,USD,2023-01-01,2023-01-31,INV-1,OPEN")
    import_service.import_receivables(sqlite_session, company.id, stream, "ar.csv")

    snap = working_capital_service.build_snapshot(sqlite_session, company.id)

    assert snap.accounts_receivable == Decimal("0")
    assert snap.current_ratio == Decimal("0.00")


def test_oversized_quantity_fails_the_row(sqlite_session, company):
    stream = _csv(
        "item_name,quantity,unit_cost,total_value,currency_code,item_type",
        "Steel,99999999999,5.00,50.00,USD,RAW_MATERIAL",
    )

    report = import_service.import_inventory(sqlite_session, company.id, stream, "inventory.csv")

    assert report.errors == ["row 1: quantity: value out of range: 99999999999"]


def test_byte_order_mark_is_ignored(sqlite_session, company):
    body = ("\n".join(_receivable_rows(2)) + "\n").encode("utf-8-sig")

    report = import_service.import_receivables(sqlite_session, company.id, io.BytesIO(body), "ar.csv")

    assert report.status == "COMPLETED"
    assert report.successful_records == 2


def test_unreadable_tail_keeps_rows_already_read(sqlite_session, company):
    # Enough rows to span several decoder chunks before the bad bytes.
    body = ("\n".join(_receivable_rows(400)) + "\n").encode("utf-8") + b"\xff\xfe broken\n"

    report = import_service.import_receivables(sqlite_session, company.id, io.BytesIO(body), "ar.csv")

    assert report.status == "PARTIALLY_COMPLETED"
    assert report.failed_records == 1
    assert 0 < report.successful_records < 400
    assert report.total_records == report.successful_records + 1
    assert report.errors[-1].startswith(f"Failed to read CSV file after row {report.successful_records}:")

    stored = sqlite_session.execute(
        select(AccountsReceivable.id).where(AccountsReceivable.company_id == company.id)
    ).all()
    assert len(stored) == report.successful_records
