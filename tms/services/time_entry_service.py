from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from tms.core.errors import ConflictError, NotFoundError, ValidationError
from tms.core.logging import OperationLogger
from tms.models.time_entry import TimeEntry
from tms.services import timesheet_store
from tms.services.entry_rules import cost_for, ensure_mutable, quantize_amount, validate_entry
from tms.services.transaction import flush_versioned, resolve_logger, touch, unit_of_work


def create_entry(
    timesheet_id: str,
    entry_date: date,
    hours: Optional[Decimal],
    description: Optional[str] = None,
    rate_at_entry: Optional[Decimal] = None,
    *,
    db: Optional[Session] = None,
    log: Optional[OperationLogger] = None,
) -> TimeEntry:
    log = resolve_logger(log, __name__, "create_time_entry").bind(timesheet_id=str(timesheet_id))
    log.info("Create time entry requested", extra={"entry_date": entry_date, "hours": hours})

    with unit_of_work(db) as db:
        timesheet = timesheet_store.find_timesheet_by_id(db, timesheet_id)
        if timesheet is None:
            log.warning("Create time entry rejected: timesheet not found")
            raise NotFoundError("Timesheet not found")

        hours = quantize_amount(hours)
        rate_at_entry = quantize_amount(rate_at_entry)
        try:
            ensure_mutable(timesheet)
            validate_entry(entry_date, hours, timesheet.period_start, timesheet.period_end)
        except (ConflictError, ValidationError) as exc:
            log.warning("Create time entry rejected", extra={"reason": str(exc)})
            raise

        entry = TimeEntry(
            entry_date=entry_date,
            description=description,
            hours=hours,
            rate_at_entry=rate_at_entry,
            cost_at_entry=cost_for(hours, rate_at_entry),
        )
        timesheet.entries.append(entry)
        timesheet_store.save_entry(db, entry)

        touch(timesheet)
        flush_versioned(db)

        log.info("Time entry created", extra={"entry_id": entry.id})
        return entry


def delete_entry(
    entry_id: str,
    *,
    db: Optional[Session] = None,
    log: Optional[OperationLogger] = None,
) -> None:
    log = resolve_logger(log, __name__, "delete_time_entry").bind(entry_id=str(entry_id))
    log.info("Delete time entry requested")

    with unit_of_work(db) as db:
        entry = timesheet_store.find_entry_by_id(db, entry_id)
        if entry is None:
            log.warning("Delete time entry rejected: entry not found")
            raise NotFoundError("Time entry not found")

        timesheet = entry.timesheet
        try:
            ensure_mutable(timesheet)
        except ConflictError:
            log.warning("Delete time entry rejected: timesheet is LOCKED")
            raise

        if entry.is_invoiced:
            log.warning("Delete time entry rejected: entry already invoiced")
            raise ConflictError("Time entry already invoiced; cannot delete")

        timesheet.entries.remove(entry)
        db.delete(entry)

        touch(timesheet)
        flush_versioned(db)

        log.info("Time entry deleted", extra={"timesheet_id": timesheet.id})
