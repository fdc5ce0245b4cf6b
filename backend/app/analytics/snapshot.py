from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from backend.app.domain.enums import HistoryInterval


@dataclass(frozen=True)
class LedgerAggregates:
    cash: Decimal
    receivables: Decimal
    payables: Decimal
    inventory_value: Decimal
    short_term_debt: Decimal


@dataclass(frozen=True)
class WorkingCapitalSnapshot:
    company_id: str
    as_of_date: date

    cash_and_equivalents: Decimal
    accounts_receivable: Decimal
    inventory: Decimal
    other_current_assets: Decimal
    total_current_assets: Decimal

    accounts_payable: Decimal
    short_term_debt: Decimal
    other_current_liabilities: Decimal
    total_current_liabilities: Decimal

    net_working_capital: Decimal
    current_ratio: Optional[Decimal]
    quick_ratio: Optional[Decimal]
    cash_ratio: Optional[Decimal]
    dso: Optional[Decimal]
    dpo: Optional[Decimal]
    dio: Optional[Decimal]
    ccc: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _first_of_next_month(day: date) -> date:
    if day.month == 12:
        return date(day.year + 1, 1, 1)
    return date(day.year, day.month + 1, 1)


class TooManyPoints(ValueError):
    pass


def _append(dates: List[date], day: date, limit: Optional[int]) -> None:
    if limit is not None and len(dates) >= limit:
        raise TooManyPoints(f"range yields more than {limit} points")
    dates.append(day)


def expand_dates(
    start: date,
    end: date,
    interval: HistoryInterval,
    limit: Optional[int] = None,
) -> List[date]:
    """
    Sample dates inside [start, end].

    DAILY and WEEKLY step from start; MONTHLY yields the first of every month
    that falls inside the range. Raises TooManyPoints once more than limit
    dates would be produced. Ranges ending at date.max stop without stepping
    past it.
    """
    dates: List[date] = []
    if start > end:
        return dates

    if interval == HistoryInterval.MONTHLY:
        cursor = start.replace(day=1)
        while cursor <= end:
            if cursor >= start:
                _append(dates, cursor, limit)
            if (cursor.year, cursor.month) == (date.max.year, date.max.month):
                break
            cursor = _first_of_next_month(cursor)
        return dates

    step = timedelta(days=7 if interval == HistoryInterval.WEEKLY else 1)
    cursor = start
    while True:
        _append(dates, cursor, limit)
        if end - cursor < step:
            break
        cursor += step
    return dates
