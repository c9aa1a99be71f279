from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from tms.core.errors import ConflictError, ValidationError
from tms.models.timesheet import Timesheet, TimesheetStatus

MAX_HOURS_PER_ENTRY = Decimal("24")

# Matches the scale of the Numeric(.., 2) hours/rate/cost columns.
_CENTS = Decimal("0.01")


def quantize_amount(value: Optional[Decimal]) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(value).quantize(_CENTS, rounding=ROUND_HALF_UP)


def validate_entry(
    entry_date: date,
    hours: Optional[Decimal],
    period_start: date,
    period_end: date,
) -> None:
    if entry_date < period_start or entry_date > period_end:
        raise ValidationError("entryDate outside timesheet period")

    if hours is None or Decimal(hours) <= 0:
        raise ValidationError("hours must be > 0")

    if Decimal(hours) > MAX_HOURS_PER_ENTRY:
        raise ValidationError("hours must be <= 24")


def is_mutable(status: str) -> bool:
    return TimesheetStatus(status).is_mutable


def ensure_mutable(timesheet: Timesheet) -> None:
    if not is_mutable(timesheet.status):
        raise ConflictError("timesheet is LOCKED")


def cost_for(hours: Decimal, rate: Optional[Decimal]) -> Optional[Decimal]:
    if rate is None:
        return None
    return quantize_amount(Decimal(rate) * Decimal(hours))
