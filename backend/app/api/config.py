from __future__ import annotations

import os

_TRUTHY = {"1", "true", "yes", "on"}


def point_in_time_aggregates_enabled() -> bool:
    return os.getenv("WCM_POINT_IN_TIME_AGGREGATES", "").strip().lower() in _TRUTHY


def cors_allow_origins() -> list[str]:
    raw = os.getenv("CORS_ALLOW_ORIGINS")
    if raw is None:
        return ["http://localhost:5173", "http://127.0.0.1:5173"]
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def import_scheduler_poll_seconds() -> float:
    """Seconds between scheduler polls; 0 or less leaves the poller off."""
    raw = os.getenv("IMPORT_SCHEDULER_POLL_SECONDS", "30").strip()
    try:
        return float(raw)
    except ValueError as exc:
        raise RuntimeError(f"IMPORT_SCHEDULER_POLL_SECONDS must be a number, got {raw!r}") from exc
