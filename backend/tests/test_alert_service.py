from datetime import date, timedelta

import pytest
from sqlalchemy import func, select

from backend.app.models import Alert
from backend.app.services import alert_service
from backend.app.services.errors import InvalidArgument, NotFoundError
from backend.tests.factories import add_cash, add_payable, create_company


def _count_alerts(db, company_id):
    return db.execute(select(func.count(Alert.id)).where(Alert.company_id == company_id)).scalar()


def _company_with_current_ratio(db, cash, payables="100000"):
    """Cash is the only asset and one open payable the only liability."""
    company = create_company(db, name=f"Ratio {cash}")
    add_cash(db, company, cash)
    add_payable(db, company, payables, due_date=date.today() + timedelta(days=10))
    db.commit()
    return company


def _current_ratio_alerts(db, company_id):
    return [
        a
        for a in alert_service.list_alerts(db, company_id, alert_type="LIQUIDITY_ISSUE")
        if a.trigger_metric == "Current Ratio"
    ]


def test_current_ratio_below_one_is_critical(sqlite_session):
    company = _company_with_current_ratio(sqlite_session, "80000")

    created = alert_service.generate_liquidity_alerts(sqlite_session, company.id)

    alerts = _current_ratio_alerts(sqlite_session, company.id)
    assert [a.severity for a in alerts] == ["CRITICAL"]
    assert alerts[0].title == "Critical Current Ratio"
    assert alerts[0].trigger_threshold == "1.0"
    assert alerts[0].trigger_value == "0.80"
    # quick ratio 0.80 also fires; cash ratio 0.80 does not
    assert created == 2


def test_current_ratio_between_one_and_one_and_a_half_is_medium(sqlite_session):
    company = _company_with_current_ratio(sqlite_session, "120000")

    alert_service.generate_liquidity_alerts(sqlite_session, company.id)

    alerts = _current_ratio_alerts(sqlite_session, company.id)
    assert [a.severity for a in alerts] == ["MEDIUM"]
    assert alerts[0].title == "Low Current Ratio"


def test_healthy_current_ratio_raises_no_current_ratio_alert(sqlite_session):
    company = _company_with_current_ratio(sqlite_session, "180000")

    alert_service.generate_liquidity_alerts(sqlite_session, company.id)

    assert _current_ratio_alerts(sqlite_session, company.id) == []


def test_zero_liabilities_raise_no_ratio_alerts(sqlite_session):
    company = create_company(sqlite_session, name="No Liabilities Co")
    add_cash(sqlite_session, company, "50000")
    sqlite_session.commit()

    assert alert_service.generate_liquidity_alerts(sqlite_session, company.id) == 0
    assert alert_service.generate_working_capital_ratio_alerts(sqlite_session, company.id) == 0


def test_generate_alerts_is_not_idempotent(sqlite_session):
    company = _company_with_current_ratio(sqlite_session, "80000")

    first = alert_service.generate_alerts(sqlite_session, company.id)
    # cash gap (projected < 0), critical current ratio, low quick ratio,
    # negative working capital, critical working-capital current ratio
    assert first == 5
    assert _count_alerts(sqlite_session, company.id) == 5

    second = alert_service.generate_alerts(sqlite_session, company.id)
    assert second == first
    assert _count_alerts(sqlite_session, company.id) == 2 * first


def test_cash_gap_alerts(sqlite_session):
    today = date(2023, 6, 1)
    company = create_company(sqlite_session, name="Cash Gap Co")
    add_cash(sqlite_session, company, "4000")
    add_payable(sqlite_session, company, "9000", status="OVERDUE", due_date=today + timedelta(days=3))
    sqlite_session.commit()

    created = alert_service.generate_cash_gap_alerts(sqlite_session, company.id, today=today)

    assert created == 2
    alerts = alert_service.list_alerts(sqlite_session, company.id, alert_type="cash_gap")
    by_metric = {a.trigger_metric: a for a in alerts}
    assert by_metric["Projected Cash Balance"].severity == "HIGH"
    assert by_metric["Projected Cash Balance"].trigger_value == "-5000.00"
    assert by_metric["Cash Balance"].severity == "MEDIUM"
    assert "USD" in by_metric["Cash Balance"].message


def test_custom_sink_receives_every_draft(sqlite_session):
    company = _company_with_current_ratio(sqlite_session, "80000")

    class RecordingSink:
        def __init__(self):
            self.drafts = []

        def emit(self, db, company, draft):
            self.drafts.append(draft)
            return None

    sink = RecordingSink()
    created = alert_service.generate_liquidity_alerts(sqlite_session, company.id, sink=sink)

    assert created == 0
    assert [d.title for d in sink.drafts] == ["Critical Current Ratio", "Low Quick Ratio"]
    assert _count_alerts(sqlite_session, company.id) == 0


def test_mark_read_and_dismiss(sqlite_session):
    company = _company_with_current_ratio(sqlite_session, "80000")
    alert_service.generate_liquidity_alerts(sqlite_session, company.id)
    alert = alert_service.list_alerts(sqlite_session, company.id)[0]

    read = alert_service.mark_read(sqlite_session, alert.id)
    assert read.read is True
    assert read.read_at is not None
    assert alert_service.list_alerts(sqlite_session, company.id, unread_only=True) != []
    assert alert.id not in {a.id for a in alert_service.list_alerts(sqlite_session, company.id, unread_only=True)}

    again = alert_service.mark_read(sqlite_session, alert.id)
    assert again.read is True

    dismissed = alert_service.dismiss(sqlite_session, alert.id)
    assert dismissed.dismissed is True
    assert dismissed.dismissed_at is not None
    assert alert.id not in {a.id for a in alert_service.list_alerts(sqlite_session, company.id, active_only=True)}


def test_lifecycle_unknown_alert(sqlite_session):
    with pytest.raises(NotFoundError):
        alert_service.mark_read(sqlite_session, "missing-alert")
    with pytest.raises(NotFoundError):
        alert_service.dismiss(sqlite_session, "missing-alert")


def test_list_alerts_filters(sqlite_session):
    company = _company_with_current_ratio(sqlite_session, "80000")
    alert_service.generate_alerts(sqlite_session, company.id)

    critical = alert_service.list_alerts(sqlite_session, company.id, severity="critical")
    assert critical
    assert {a.severity for a in critical} == {"CRITICAL"}

    wc = alert_service.list_alerts(sqlite_session, company.id, alert_type="WORKING_CAPITAL_RATIO")
    assert {a.trigger_metric for a in wc} == {"Net Working Capital", "Current Ratio"}

    with pytest.raises(InvalidArgument):
        alert_service.list_alerts(sqlite_session, company.id, severity="URGENT")
    with pytest.raises(NotFoundError):
        alert_service.list_alerts(sqlite_session, "missing-company")
