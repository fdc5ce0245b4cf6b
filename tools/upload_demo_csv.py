# tools/upload_demo_csv.py
from __future__ import annotations

import csv
import io
import sys
from datetime import date
from typing import Dict, List

import requests

from tools.generate_demo_csv import HEADERS, generate

API = "http://127.0.0.1:8000"

ENDPOINTS = {
    "transactions": "transactions",
    "invoices": "invoices",
    "receivables": "accounts-receivable",
    "payables": "accounts-payable",
    "inventory": "inventory",
}


def to_csv_bytes(header: List[str], rows: List[List[str]]) -> bytes:
    buf = io.StringIO()
    w = csv.writer(buf)
    w.writerow(header)
    w.writerows(rows)
    return buf.getvalue().encode("utf-8")


def upload(company_id: str, files: Dict[str, List[List[str]]], api: str = API) -> Dict[str, dict]:
    reports: Dict[str, dict] = {}
    for kind, rows in files.items():
        body = to_csv_bytes(HEADERS[kind], rows)
        r = requests.post(
            f"{api}/api/import/{ENDPOINTS[kind]}/{company_id}",
            files={"file": (f"{kind}.csv", body, "text/csv")},
            timeout=30,
        )
        r.raise_for_status()
        reports[kind] = r.json()
    return reports


def main(company_id: str) -> None:
    files = generate(start=date(2026, 1, 1), end=date(2026, 6, 30), seed=42)
    for kind, report in upload(company_id, files).items():
        print(kind, report["status"], report["summary"])


if __name__ == "__main__":
    # python -m tools.upload_demo_csv <company_id>
    main(sys.argv[1])
