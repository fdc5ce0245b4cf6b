from __future__ import annotations

from typing import Protocol

from sqlalchemy.orm import Session

from backend.app.domain.contracts import ImportReport


SourceType = str


class ImportConnector(Protocol):
    source_type: SourceType

    def import_data(self, *, company_id: str, db: Session) -> ImportReport:
        ...
