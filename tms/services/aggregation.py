from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List

from tms.models.time_entry import TimeEntry
from tms.models.timesheet import Timesheet


@dataclass(frozen=True)
class DailyTotal:
    date: date
    hours: Decimal


def sum_hours(entries: Iterable[TimeEntry]) -> Decimal:
    total = Decimal("0")
    for e in entries:
        total += Decimal(e.hours)
    return total


def total_hours(timesheet: Timesheet) -> Decimal:
    # Always walk the live collection: the bulk update path mutates entries in place.
    return sum_hours(timesheet.entries)


def daily_totals(entries: Iterable[TimeEntry]) -> List[DailyTotal]:
    by_date: Dict[date, Decimal] = {}
    for e in entries:
        by_date[e.entry_date] = by_date.get(e.entry_date, Decimal("0")) + Decimal(e.hours)

    return [DailyTotal(date=d, hours=h) for d, h in sorted(by_date.items())]
