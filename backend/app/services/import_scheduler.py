from __future__ import annotations

import logging
import re
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Protocol

from croniter import croniter
from sqlalchemy.orm import Session

from backend.app.db import SessionLocal
from backend.app.integrations import get_connector
from backend.app.models import ScheduledImportJob
from backend.app.services.company_service import require_company
from backend.app.services.errors import InvalidArgument, NotFoundError

logger = logging.getLogger(__name__)

_CRON_FIELD = re.compile(r"^[0-9A-Za-z*/,?#\-]+$")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# -------------------------
# Collaborator contracts
# -------------------------

class ScheduledHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    def schedule(self, job_id: str, cron_expression: str, callback: Callable[[], None]) -> ScheduledHandle:
        ...

    def run_due(self, now: Optional[datetime] = None) -> int:
        ...


class JobRegistry(Protocol):
    def put(self, job_id: str, handle: ScheduledHandle) -> None:
        ...

    def pop(self, job_id: str) -> Optional[ScheduledHandle]:
        ...

    def __contains__(self, job_id: object) -> bool:
        ...

    def job_ids(self) -> List[str]:
        ...


class InMemoryJobRegistry:
    """Live scheduler handles keyed by job id, safe to share across request threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handles: Dict[str, ScheduledHandle] = {}

    def put(self, job_id: str, handle: ScheduledHandle) -> None:
        with self._lock:
            self._handles[job_id] = handle

    def pop(self, job_id: str) -> Optional[ScheduledHandle]:
        with self._lock:
            return self._handles.pop(job_id, None)

    def __contains__(self, job_id: object) -> bool:
        with self._lock:
            return job_id in self._handles

    def job_ids(self) -> List[str]:
        with self._lock:
            return sorted(self._handles)


# -------------------------
# In-process scheduler
# -------------------------

def to_croniter_expression(cron_expression: str) -> str:
    """
    Six-field expressions lead with a seconds field, which is dropped: jobs
    run at minute resolution. '?' (no specific day) reads as '*'.
    """
    parts = cron_expression.split()
    if len(parts) == 6:
        parts = parts[1:]
    return " ".join(part.replace("?", "*") for part in parts).lower()


def next_run_after(cron_expression: str, after: datetime) -> datetime:
    return croniter(to_croniter_expression(cron_expression), after).get_next(datetime)



@dataclass
class _InProcessJob:
    job_id: str
    cron_expression: str
    callback: Callable[[], None]
    next_run: datetime
    cancelled: bool = False
    runs: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock)

    def cancel(self) -> None:
        with self.lock:
            self.cancelled = True


class InProcessScheduler:
    """
    Holds cron registrations in memory and runs the ones that are due.

    run_due() fires every live job whose next cron time has passed and moves
    it to the following one. start() polls run_due() from a daemon thread;
    the scheduler tick route calls it directly. fire() runs a job right away.
    Cancelled jobs are never run again.
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._jobs: Dict[str, _InProcessJob] = {}
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def schedule(self, job_id: str, cron_expression: str, callback: Callable[[], None]) -> _InProcessJob:
        job = _InProcessJob(
            job_id=job_id,
            cron_expression=cron_expression,
            callback=callback,
            next_run=next_run_after(cron_expression, self._clock()),
        )
        with self._lock:
            self._jobs[job_id] = job
        return job

    def fire(self, job_id: str) -> bool:
        with self._lock:
            job = self._jobs.get(job_id)
        if job is None:
            return False
        with job.lock:
            if job.cancelled:
                return False
            job.runs += 1
        job.callback()
        return True

    def run_due(self, now: Optional[datetime] = None) -> int:
        now = now or self._clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        with self._lock:
            jobs = list(self._jobs.values())

        ran = 0
        for job in jobs:
            with job.lock:
                if job.cancelled or job.next_run > now:
                    continue
                job.next_run = next_run_after(job.cron_expression, now)
            try:
                if self.fire(job.job_id):
                    ran += 1
            except Exception:
                logger.exception("scheduled job failed job_id=%s", job.job_id)
        return ran

    def runs(self, job_id: str) -> int:
        with self._lock:
            job = self._jobs.get(job_id)
        return job.runs if job else 0

    def next_run_at(self, job_id: str) -> Optional[datetime]:
        with self._lock:
            job = self._jobs.get(job_id)
        return job.next_run if job else None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self, poll_seconds: float) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._poll, args=(poll_seconds,), name="import-scheduler", daemon=True
        )
        self._thread.start()
        logger.info("import scheduler started poll_seconds=%s", poll_seconds)

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None

    def _poll(self, poll_seconds: float) -> None:
        while not self._stop.wait(poll_seconds):
            self.run_due()


# -------------------------
# Import jobs
# -------------------------

def validate_cron_expression(cron_expression: str) -> str:
    parts = (cron_expression or "").split()
    if len(parts) not in (5, 6) or not all(_CRON_FIELD.match(p) for p in parts):
        raise InvalidArgument(f"invalid cron expression: {cron_expression!r}")
    cron = " ".join(parts)
    if not croniter.is_valid(to_croniter_expression(cron)):
        raise InvalidArgument(f"invalid cron expression: {cron_expression!r}")
    return cron


def _new_job_id(company_id: str, source_type: str, registry: JobRegistry) -> str:
    millis = int(time.time() * 1000)
    job_id = f"import_{company_id}_{source_type}_{millis}"
    while job_id in registry:
        millis += 1
        job_id = f"import_{company_id}_{source_type}_{millis}"
    return job_id


def run_scheduled_import(
    job_id: str,
    company_id: str,
    source_type: str,
    session_factory: Callable[[], Session],
) -> None:
    logger.info(
        "Executing scheduled import job job_id=%s company_id=%s source_type=%s",
        job_id,
        company_id,
        source_type,
    )
    connector = get_connector(source_type)
    if connector is None:
        logger.info("no connector registered for source_type=%s; nothing to import", source_type)
        return

    db = session_factory()
    try:
        report = connector.import_data(company_id=company_id, db=db)
        logger.info(
            "scheduled import finished job_id=%s status=%s summary=%s",
            job_id,
            report.status,
            report.summary,
        )
    finally:
        db.close()


def schedule_import_job(
    db: Session,
    company_id: str,
    source_type: str,
    cron_expression: str,
    *,
    scheduler: Scheduler,
    registry: JobRegistry,
    session_factory: Optional[Callable[[], Session]] = None,
) -> str:
    company_key = require_company(db, company_id).id
    source = (source_type or "").strip().upper()
    if not source:
        raise InvalidArgument("source_type is required")
    cron = validate_cron_expression(cron_expression)

    session_factory = session_factory or SessionLocal

    job_id = _new_job_id(company_key, source, registry)
    handle = scheduler.schedule(
        job_id,
        cron,
        lambda: run_scheduled_import(job_id, company_key, source, session_factory),
    )
    registry.put(job_id, handle)

    db.add(
        ScheduledImportJob(
            job_id=job_id,
            company_id=company_key,
            source_type=source,
            cron_expression=cron,
        )
    )
    db.commit()
    logger.info("scheduled import job job_id=%s cron=%s", job_id, cron)
    return job_id


def cancel_scheduled_import_job(db: Session, job_id: str, *, registry: JobRegistry) -> bool:
    handle = registry.pop(job_id)
    if handle is None:
        raise NotFoundError(f"Scheduled job not found with id: {job_id}")
    handle.cancel()

    row = db.get(ScheduledImportJob, job_id)
    if row is not None and row.cancelled_at is None:
        row.cancelled_at = utcnow()
        db.commit()
    logger.info("cancelled scheduled import job job_id=%s", job_id)
    return True
