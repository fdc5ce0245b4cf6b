from __future__ import annotations

from sqlalchemy.orm import Session

from backend.app.domain.contracts import ImportReport
from backend.app.services.company_service import require_company
from backend.app.services.import_service import not_implemented_report


class QuickBooksStubAdapter:
    source_type = "QUICKBOOKS"

    def import_data(self, *, company_id: str, db: Session) -> ImportReport:
        # No live QuickBooks client yet; validate the company and report failure.
        require_company(db, company_id)
        return not_implemented_report(
            "QUICKBOOKS",
            "QUICKBOOKS",
            "QuickBooks integration is not implemented yet.",
        )
