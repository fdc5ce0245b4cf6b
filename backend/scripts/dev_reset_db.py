"""
Recreate the development database at alembic head.

    python -m backend.scripts.dev_reset_db --yes [--seed-demo]
    python -m backend.scripts.dev_reset_db --check

--seed-demo creates one company and loads the generated demo ledgers through
the CSV import pipeline, so the dashboard has data right after a reset.
"""

from __future__ import annotations

import argparse
import io
import logging
import os
import sys
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional

from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker

logger = logging.getLogger(__name__)

ALEMBIC_INI = Path(__file__).resolve().parents[2] / "alembic.ini"


def resolve_database_url(cli_url: Optional[str] = None) -> str:
    url = cli_url or os.getenv("DATABASE_URL") or os.getenv("SQLALCHEMY_DATABASE_URL")
    if not url:
        raise RuntimeError("Set DATABASE_URL or pass --url.")
    return url


def alembic_config(database_url: str) -> Config:
    config = Config(str(ALEMBIC_INI))
    config.set_main_option("sqlalchemy.url", database_url)
    return config


def drop_sqlite_file(database_url: str) -> None:
    path = make_url(database_url).database
    if path and path != ":memory:":
        Path(path).unlink(missing_ok=True)


def recreate_postgres_database(database_url: str) -> None:
    url = make_url(database_url)
    if not url.database:
        raise RuntimeError("Postgres URL is missing a database name.")

    admin = create_engine(url.set(database="postgres"), future=True, isolation_level="AUTOCOMMIT")
    try:
        with admin.connect() as conn:
            conn.execute(
                text(
                    "SELECT pg_terminate_backend(pid) FROM pg_stat_activity "
                    "WHERE datname = :name AND pid <> pg_backend_pid()"
                ),
                {"name": url.database},
            )
            conn.execute(text(f'DROP DATABASE IF EXISTS "{url.database}"'))
            conn.execute(text(f'CREATE DATABASE "{url.database}"'))
    finally:
        admin.dispose()


def reset_database(database_url: str) -> None:
    backend_name = make_url(database_url).get_backend_name()
    if backend_name == "sqlite":
        drop_sqlite_file(database_url)
    elif backend_name.startswith("postgres"):
        recreate_postgres_database(database_url)
    else:
        raise RuntimeError(f"Unsupported database backend: {backend_name}")

    command.upgrade(alembic_config(database_url), "head")
    logger.info("database reset to alembic head url=%s", make_url(database_url).render_as_string(hide_password=True))


def revision_problems(database_url: str) -> List[str]:
    """Empty when the database carries the single repo head."""
    script = ScriptDirectory.from_config(alembic_config(database_url))
    heads = script.get_heads()
    problems: List[str] = []
    if len(heads) != 1:
        problems.append(f"expected one alembic head, found {heads}")

    engine = create_engine(database_url, future=True)
    try:
        if "alembic_version" not in inspect(engine).get_table_names():
            return problems + ["database has no alembic_version table"]
        with engine.connect() as conn:
            current = conn.execute(text("SELECT version_num FROM alembic_version")).scalar()
    finally:
        engine.dispose()

    if current not in heads:
        problems.append(f"database revision {current} is not the repo head {heads}")
    return problems


def seed_demo_company(database_url: str, *, seed: int = 42) -> Dict[str, str]:
    """Returns the new company id and the summary line of every import."""
    os.environ.setdefault("DATABASE_URL", database_url)
    from backend.app.db import build_engine
    from backend.app.services import company_service, import_service
    from tools.generate_demo_csv import HEADERS, generate
    from tools.upload_demo_csv import to_csv_bytes

    engine = build_engine(database_url)
    Session = sessionmaker(bind=engine, autoflush=False, future=True)
    db = Session()
    try:
        company = company_service.create_company(db, name="Demo Manufacturing Co", industry="Manufacturing")
        out = {"company_id": company.id}
        files = generate(start=date(2026, 1, 1), end=date(2026, 6, 30), seed=seed)
        for kind, rows in files.items():
            report = import_service.run_import(
                db, company.id, kind, io.BytesIO(to_csv_bytes(HEADERS[kind], rows)), f"{kind}.csv"
            )
            out[kind] = report.summary or report.status
        return out
    finally:
        db.close()
        engine.dispose()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Reset or check the development database.")
    parser.add_argument("--url", help="Database URL; defaults to DATABASE_URL.")
    parser.add_argument("--yes", action="store_true", help="Confirm the destructive reset.")
    parser.add_argument("--check", action="store_true", help="Only report whether the database is at head.")
    parser.add_argument("--seed-demo", action="store_true", help="Load a demo company after the reset.")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    database_url = resolve_database_url(args.url)

    if args.check:
        problems = revision_problems(database_url)
        for problem in problems:
            logger.error(problem)
        return 1 if problems else 0

    if not args.yes:
        logger.error("refusing to reset the database without --yes")
        return 1

    reset_database(database_url)
    if args.seed_demo:
        for key, value in seed_demo_company(database_url).items():
            logger.info("%s: %s", key, value)
    return 0


if __name__ == "__main__":
    sys.exit(main())
