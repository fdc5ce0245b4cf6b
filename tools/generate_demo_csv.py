# tools/generate_demo_csv.py
from __future__ import annotations

import csv
import random
from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path
from typing import Dict, List, Sequence


@dataclass(frozen=True)
class Counterparty:
    name: str
    min_amt: float
    max_amt: float
    terms_days: int


CUSTOMERS: List[Counterparty] = [
    Counterparty("Northwind Traders", 2500, 18000, 30),
    Counterparty("Contoso Retail", 1200, 9000, 45),
    Counterparty("Fabrikam Industrial", 4000, 26000, 60),
    Counterparty("Tailspin Outfitters", 600, 4200, 30),
]

VENDORS: List[Counterparty] = [
    Counterparty("Acme Components", 1500, 12000, 30),
    Counterparty("Globex Logistics", 400, 3800, 15),
    Counterparty("Initech Packaging", 250, 2600, 30),
    Counterparty("Umbrella Raw Materials", 3000, 21000, 45),
]

ITEMS = [
    ("Steel sheet", "RAW_MATERIAL", 12.5),
    ("Fastener kit", "SUPPLIES", 3.2),
    ("Sub-assembly A", "WORK_IN_PROGRESS", 48.0),
    ("Widget Pro", "FINISHED_GOODS", 129.0),
]

TRANSACTIONS_HEADER = ["transaction_date", "amount", "description", "transaction_type", "currency_code", "category"]
INVOICES_HEADER = [
    "invoice_number", "invoice_type", "contact_name", "issue_date", "due_date",
    "subtotal", "tax_amount", "total_amount", "currency_code", "status",
]
RECEIVABLES_HEADER = ["customer_name", "amount", "currency_code", "invoice_date", "due_date", "invoice_number", "status"]
PAYABLES_HEADER = ["vendor_name", "amount", "currency_code", "invoice_date", "due_date", "invoice_number", "status"]
INVENTORY_HEADER = ["item_name", "item_code", "quantity", "unit_cost", "total_value", "currency_code", "item_type", "status"]


def daterange(start: date, end: date):
    d = start
    while d <= end:
        yield d
        d += timedelta(days=1)


def money(rng: random.Random, party: Counterparty) -> str:
    return f"{rng.uniform(party.min_amt, party.max_amt):.2f}"


def write_csv(path: Path, header: Sequence[str], rows: List[Sequence[str]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(header)
        for r in rows:
            w.writerow(r)


def generate(start: date, end: date, seed: int = 7, currency: str = "USD") -> Dict[str, List[List[str]]]:
    """
    Build one demo file per import kind, keyed by kind.

    Documents issued in the last 30 days of the range stay open; older ones
    are mostly settled, so the generated ledgers have a realistic open book.
    """
    rng = random.Random(seed)
    out: Dict[str, List[List[str]]] = {
        "transactions": [],
        "invoices": [],
        "receivables": [],
        "payables": [],
        "inventory": [],
    }
    recent = end - timedelta(days=30)
    seq = 0

    for d in daterange(start, end):
        if d.weekday() >= 5:
            continue

        # Sales on most weekdays
        if rng.random() < 0.6:
            seq += 1
            cust = rng.choice(CUSTOMERS)
            amt = money(rng, cust)
            number = f"INV-{seq:05d}"
            due = d + timedelta(days=cust.terms_days)
            open_doc = d >= recent or rng.random() < 0.15
            out["invoices"].append([
                number, "SALES", cust.name, d.isoformat(), due.isoformat(),
                amt, "0.00", amt, currency, "SENT" if open_doc else "PAID",
            ])
            out["receivables"].append([
                cust.name, amt, currency, d.isoformat(), due.isoformat(), number,
                "OPEN" if open_doc else "PAID",
            ])
            if not open_doc:
                out["transactions"].append([due.isoformat(), amt, f"Payment {number}", "PAYMENT_RECEIVED", currency, "Sales"])

        # Purchases a few times a week
        if rng.random() < 0.4:
            seq += 1
            vend = rng.choice(VENDORS)
            amt = money(rng, vend)
            number = f"BILL-{seq:05d}"
            due = d + timedelta(days=vend.terms_days)
            open_doc = d >= recent or rng.random() < 0.1
            out["invoices"].append([
                number, "PURCHASE", vend.name, d.isoformat(), due.isoformat(),
                amt, "0.00", amt, currency, "PENDING" if open_doc else "PAID",
            ])
            out["payables"].append([
                vend.name, amt, currency, d.isoformat(), due.isoformat(), number,
                "PENDING" if open_doc else "PAID",
            ])
            if not open_doc:
                out["transactions"].append([due.isoformat(), f"-{amt}", f"Payment {number}", "PAYMENT_SENT", currency, "Purchases"])

    for idx, (name, item_type, unit_cost) in enumerate(ITEMS, start=1):
        qty = rng.randint(20, 400)
        total = f"{qty * unit_cost:.2f}"
        out["inventory"].append([name, f"SKU-{idx:03d}", str(qty), f"{unit_cost:.2f}", total, currency, item_type, "IN_STOCK"])

    return out


HEADERS = {
    "transactions": TRANSACTIONS_HEADER,
    "invoices": INVOICES_HEADER,
    "receivables": RECEIVABLES_HEADER,
    "payables": PAYABLES_HEADER,
    "inventory": INVENTORY_HEADER,
}


if __name__ == "__main__":
    out_dir = Path("demo_data")
    files = generate(start=date(2026, 1, 1), end=date(2026, 6, 30), seed=42)
    for kind, rows in files.items():
        path = out_dir / f"{kind}.csv"
        write_csv(path, HEADERS[kind], rows)
        print(f"Wrote {len(rows)} rows to {path}")
