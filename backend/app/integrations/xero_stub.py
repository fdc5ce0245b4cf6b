from __future__ import annotations

from sqlalchemy.orm import Session

from backend.app.domain.contracts import ImportReport
from backend.app.services.company_service import require_company
from backend.app.services.import_service import not_implemented_report


class XeroStubAdapter:
    source_type = "XERO"

    def import_data(self, *, company_id: str, db: Session) -> ImportReport:
        require_company(db, company_id)
        return not_implemented_report("XERO", "XERO", "Xero integration is not implemented yet.")
