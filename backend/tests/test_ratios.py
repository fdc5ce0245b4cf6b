from datetime import date
from decimal import Decimal

from backend.app.analytics import ratios
from backend.app.analytics.snapshot import expand_dates
from backend.app.domain.enums import HistoryInterval


D = Decimal


def test_zero_liabilities_yield_absent_ratios():
    assert ratios.current_ratio(D("5000"), D("0")) is None
    assert ratios.quick_ratio(D("5000"), D("1000"), D("0")) is None
    assert ratios.cash_ratio(D("5000"), D("0")) is None


def test_current_and_quick_ratio_reference_values():
    assert ratios.current_ratio(D("225000.00"), D("100000.00")) == D("2.25")
    assert ratios.quick_ratio(D("225000.00"), D("100000.00"), D("100000.00")) == D("1.25")
    assert ratios.cash_ratio(D("20000"), D("100000")) == D("0.20")


def test_day_count_metrics_reference_values():
    assert ratios.dso(D("75000"), D("450000"), 90) == D("15.00")
    assert ratios.dpo(D("60000"), D("360000"), 90) == D("15.00")
    assert ratios.dio(D("100000"), D("360000"), 90) == D("25.00")


def test_day_count_metrics_absent_without_flow():
    assert ratios.dso(D("75000"), D("0"), 90) is None
    assert ratios.dpo(D("60000"), D("0")) is None
    assert ratios.dio(D("1"), D("0")) is None


def test_results_round_half_up_to_cents():
    # 1 / 8 = 0.125 -> 0.13 with half-up (banker's rounding would give 0.12)
    assert ratios.current_ratio(D("1"), D("8")) == D("0.13")
    assert ratios.percentage_change(D("8"), D("9")) == D("12.50")
    assert str(ratios.current_ratio(D("2"), D("3"))) == "0.67"


def test_daily_rate_is_quantized_before_division():
    # 100 / 90 = 1.111111 (6 dp); 1000 / 1.111111 = 900.0000810... -> 900.00
    assert ratios.dso(D("1000"), D("100"), 90) == D("900.00")


def test_ccc_is_dio_plus_dso_minus_dpo():
    dso = D("15.00")
    dio = D("25.00")
    dpo = D("15.00")
    assert ratios.ccc(dso, dio, dpo) == dio + dso - dpo == D("25.00")


def test_ccc_treats_missing_components_as_zero():
    assert ratios.ccc(None, D("40.00"), None) == D("40.00")
    assert ratios.ccc(D("10.00"), None, D("30.00")) == D("-20.00")
    assert ratios.ccc(None, None, None) == D("0")


def test_net_working_capital_can_be_negative():
    assert ratios.net_working_capital(D("80000"), D("100000")) == D("-20000")


def test_secondary_finance_helpers():
    assert ratios.working_capital_turnover(D("500000"), D("0")) is None
    assert ratios.working_capital_turnover(D("500000"), D("125000")) == D("4.00")
    assert ratios.percentage_change(D("0"), D("10")) is None
    assert ratios.percentage_change(D("200"), D("150")) == D("-25.00")
    assert ratios.future_value(D("1000"), D("0.05"), 2) == D("1102.50")
    assert ratios.break_even_point(D("10000"), D("0")) is None
    assert ratios.break_even_point(D("10000"), D("25")) == D("400.00")


def test_days_between_is_signed():
    assert ratios.days_between(date(2023, 1, 1), date(2023, 3, 1)) == 59
    assert ratios.days_between(date(2023, 3, 1), date(2023, 1, 1)) == -59


def test_expand_dates_monthly_keeps_firsts_inside_range():
    assert expand_dates(date(2023, 1, 1), date(2023, 1, 31), HistoryInterval.MONTHLY) == [date(2023, 1, 1)]
    assert expand_dates(date(2023, 1, 15), date(2023, 4, 1), HistoryInterval.MONTHLY) == [
        date(2023, 2, 1),
        date(2023, 3, 1),
        date(2023, 4, 1),
    ]
    assert expand_dates(date(2023, 12, 1), date(2024, 1, 10), HistoryInterval.MONTHLY) == [
        date(2023, 12, 1),
        date(2024, 1, 1),
    ]


def test_expand_dates_daily_and_weekly():
    daily = expand_dates(date(2023, 1, 1), date(2023, 1, 3), HistoryInterval.DAILY)
    assert daily == [date(2023, 1, 1), date(2023, 1, 2), date(2023, 1, 3)]

    weekly = expand_dates(date(2023, 1, 1), date(2023, 1, 31), HistoryInterval.WEEKLY)
    assert weekly == [date(2023, 1, d) for d in (1, 8, 15, 22, 29)]
