import os
import pathlib
import sys
import tempfile

import pytest


REPO_ROOT = pathlib.Path(__file__).resolve().parents[2]
sys.path.append(str(REPO_ROOT))


def pytest_configure():
    # The engine is built at import time, so the URL must exist before any app import.
    if os.getenv("DATABASE_URL") or os.getenv("SQLALCHEMY_DATABASE_URL"):
        return
    temp_dir = tempfile.mkdtemp(prefix="working-capital-tests-")
    os.environ["DATABASE_URL"] = f"sqlite:///{pathlib.Path(temp_dir) / 'pytest.db'}"


@pytest.fixture(autouse=True)
def _point_in_time_flag_off(monkeypatch):
    monkeypatch.delenv("WCM_POINT_IN_TIME_AGGREGATES", raising=False)


@pytest.fixture(scope="session")
def sqlite_engine():
    from backend.app import models  # noqa: F401
    from backend.app.db import Base, engine

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def sqlite_session(sqlite_engine):
    from backend.app.db import SessionLocal

    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture()
def company(sqlite_session):
    from backend.tests.factories import create_company

    row = create_company(sqlite_session, name="Fixture Co")
    sqlite_session.commit()
    return row


@pytest.fixture()
def scheduler():
    from backend.app.services.import_scheduler import InProcessScheduler

    return InProcessScheduler()


@pytest.fixture()
def registry():
    from backend.app.services.import_scheduler import InMemoryJobRegistry

    return InMemoryJobRegistry()


@pytest.fixture()
def api_client(sqlite_session, scheduler, registry):
    from backend.app.db import get_db
    from backend.app.main import app
    from fastapi.testclient import TestClient

    def _get_test_db():
        yield sqlite_session

    app.dependency_overrides[get_db] = _get_test_db
    previous = (app.state.import_scheduler, app.state.import_job_registry)
    app.state.import_scheduler, app.state.import_job_registry = scheduler, registry
    client = TestClient(app)
    try:
        yield client
    finally:
        app.dependency_overrides.pop(get_db, None)
        app.state.import_scheduler, app.state.import_job_registry = previous
