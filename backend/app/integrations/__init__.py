from __future__ import annotations

from typing import Optional

from backend.app.integrations.base import ImportConnector, SourceType
from backend.app.integrations.quickbooks_stub import QuickBooksStubAdapter
from backend.app.integrations.xero_stub import XeroStubAdapter


CONNECTORS = {
    "quickbooks": QuickBooksStubAdapter(),
    "xero": XeroStubAdapter(),
}


def get_connector(source_type: SourceType) -> Optional[ImportConnector]:
    key = (source_type or "").strip().lower()
    return CONNECTORS.get(key)


__all__ = [
    "CONNECTORS",
    "ImportConnector",
    "SourceType",
    "get_connector",
]
