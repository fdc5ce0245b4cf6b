from sqlalchemy import create_engine, func, select

from backend.app.models import AccountsReceivable, Company
from backend.scripts import dev_reset_db


def test_reset_brings_database_to_head(tmp_path):
    url = f"sqlite:///{tmp_path / 'dev.db'}"

    assert dev_reset_db.revision_problems(url) == ["database has no alembic_version table"]

    dev_reset_db.reset_database(url)

    assert dev_reset_db.revision_problems(url) == []
    assert dev_reset_db.main(["--url", url, "--check"]) == 0


def test_reset_requires_confirmation(tmp_path):
    url = f"sqlite:///{tmp_path / 'dev.db'}"
    assert dev_reset_db.main(["--url", url]) == 1


def test_seed_demo_company_loads_ledgers(tmp_path):
    url = f"sqlite:///{tmp_path / 'demo.db'}"
    dev_reset_db.reset_database(url)

    result = dev_reset_db.seed_demo_company(url, seed=3)

    assert result["receivables"].startswith("Imported ")
    engine = create_engine(url, future=True)
    with engine.connect() as conn:
        assert conn.execute(select(func.count(Company.id))).scalar() == 1
        receivables = conn.execute(
            select(func.count(AccountsReceivable.id)).where(AccountsReceivable.company_id == result["company_id"])
        ).scalar()
    engine.dispose()
    assert receivables > 0
