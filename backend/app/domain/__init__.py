"""Domain contracts and shared types."""

from backend.app.domain.contracts import (  # noqa: F401
    AlertOut,
    DashboardSummaryOut,
    ImportReport,
    WorkingCapitalSnapshotOut,
)
