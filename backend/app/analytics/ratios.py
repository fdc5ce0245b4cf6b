"""
Working-capital ratio math.

Every function is pure and works on Decimal only. Results are quantized with
an explicit ROUND_HALF_UP so identical inputs always produce identical
outputs. A ratio whose denominator is zero is reported as None rather than
as a sentinel number.
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")

# Fixed trailing window every day-count metric is annualised against.
TRAILING_WINDOW_DAYS = 90

_CENTS = Decimal("0.01")
_DAILY_RATE = Decimal("0.000001")


def _q2(value: Decimal) -> Decimal:
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


def _q6(value: Decimal) -> Decimal:
    return value.quantize(_DAILY_RATE, rounding=ROUND_HALF_UP)


def _safe_div(numerator: Decimal, denominator: Decimal) -> Optional[Decimal]:
    if denominator == ZERO:
        return None
    return _q2(numerator / denominator)


def net_working_capital(assets: Decimal, liabilities: Decimal) -> Decimal:
    return assets - liabilities


def current_ratio(assets: Decimal, liabilities: Decimal) -> Optional[Decimal]:
    return _safe_div(assets, liabilities)


def quick_ratio(assets: Decimal, inventory: Decimal, liabilities: Decimal) -> Optional[Decimal]:
    return _safe_div(assets - inventory, liabilities)


def cash_ratio(cash: Decimal, liabilities: Decimal) -> Optional[Decimal]:
    return _safe_div(cash, liabilities)


def _days_outstanding(outstanding: Decimal, flow: Decimal, days: int) -> Optional[Decimal]:
    if flow == ZERO or days <= 0:
        return None
    daily = _q6(flow / Decimal(days))
    if daily == ZERO:
        return None
    return _q2(outstanding / daily)


def dso(receivables: Decimal, credit_sales: Decimal, days: int = TRAILING_WINDOW_DAYS) -> Optional[Decimal]:
    """Days sales outstanding: receivables over average daily credit sales."""
    return _days_outstanding(receivables, credit_sales, days)


def dpo(payables: Decimal, cogs: Decimal, days: int = TRAILING_WINDOW_DAYS) -> Optional[Decimal]:
    """Days payable outstanding: payables over average daily cost of goods sold."""
    return _days_outstanding(payables, cogs, days)


def dio(inventory: Decimal, cogs: Decimal, days: int = TRAILING_WINDOW_DAYS) -> Optional[Decimal]:
    """Days inventory outstanding: inventory over average daily cost of goods sold."""
    return _days_outstanding(inventory, cogs, days)


def ccc(
    dso_value: Optional[Decimal],
    dio_value: Optional[Decimal],
    dpo_value: Optional[Decimal],
) -> Decimal:
    """
    Cash conversion cycle, DIO + DSO - DPO.

    A missing component counts as zero, so the cycle is always present even
    when one of its inputs is not.
    """
    return (dio_value or ZERO) + (dso_value or ZERO) - (dpo_value or ZERO)


def working_capital_turnover(revenue: Decimal, avg_working_capital: Decimal) -> Optional[Decimal]:
    return _safe_div(revenue, avg_working_capital)


def percentage_change(old: Decimal, new: Decimal) -> Optional[Decimal]:
    if old == ZERO:
        return None
    return _q2((new - old) * HUNDRED / old)


def future_value(pv: Decimal, rate: Decimal, periods: int) -> Decimal:
    return _q2(pv * (ONE + rate) ** periods)


def break_even_point(fixed_costs: Decimal, contribution_margin: Decimal) -> Optional[Decimal]:
    return _safe_div(fixed_costs, contribution_margin)


def days_between(start: date, end: date) -> int:
    return (end - start).days
