"""
Timesheet lifecycle and bulk entry reconciliation.

Every public function follows the same transaction convention:
  - If db is provided, the function will NOT commit/close. Caller owns the transaction.
  - If db is None, the function manages its own session + commit.

Any failure leaves the session dirty; the owner must roll back. Nothing a
failed call did is ever committed.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tms.core.errors import ConflictError, NotFoundError, ValidationError
from tms.core.logging import OperationLogger
from tms.models.time_entry import TimeEntry
from tms.models.timesheet import Timesheet, TimesheetStatus
from tms.services import aggregation, timesheet_store
from tms.services.entry_rules import cost_for, ensure_mutable, quantize_amount, validate_entry
from tms.services.transaction import flush_versioned, resolve_logger, touch, unit_of_work


@dataclass(frozen=True)
class EntryRow:
    entry_date: date
    hours: Optional[Decimal]
    description: Optional[str] = None
    rate_at_entry: Optional[Decimal] = None


@dataclass(frozen=True)
class BulkUpsertResult:
    inserted: int
    updated: int
    deleted: int
    total_hours: Decimal


def _load_or_404(db: Session, timesheet_id: str) -> Timesheet:
    timesheet = timesheet_store.find_timesheet_by_id(db, timesheet_id)
    if timesheet is None:
        raise NotFoundError("Timesheet not found")
    return timesheet


def _hydrate(timesheet: Timesheet) -> Timesheet:
    # Detached callers (db=None) still need entries and project after close.
    _ = timesheet.project
    _ = list(timesheet.entries)
    return timesheet


def create_timesheet(
    project_id: str,
    period_start: date,
    period_end: date,
    *,
    db: Optional[Session] = None,
    log: Optional[OperationLogger] = None,
) -> Timesheet:
    log = resolve_logger(log, __name__, "create_timesheet").bind(project_id=str(project_id))
    log.info(
        "Create timesheet requested",
        extra={"period_start": period_start, "period_end": period_end},
    )

    if period_end < period_start:
        log.warning("Create timesheet rejected: period end before start")
        raise ValidationError("periodEnd must be >= periodStart")

    with unit_of_work(db) as db:
        if timesheet_store.find_project_by_id(db, project_id) is None:
            log.warning("Create timesheet rejected: project not found")
            raise NotFoundError("Project not found")

        existing = timesheet_store.find_timesheet_by_project_and_period(db, project_id, period_start, period_end)
        if existing is not None:
            log.warning(
                "Create timesheet rejected: duplicate project period",
                extra={"existing_timesheet_id": existing.id},
            )
            raise ConflictError("Timesheet for project & period already exists")

        timesheet = Timesheet(
            project_id=str(project_id),
            period_start=period_start,
            period_end=period_end,
            status=TimesheetStatus.DRAFT.value,
        )
        try:
            timesheet_store.save_timesheet(db, timesheet)
        except IntegrityError as exc:
            # Lost a race against a concurrent create for the same period.
            raise ConflictError("Timesheet for project & period already exists") from exc

        log.info("Timesheet created", extra={"timesheet_id": timesheet.id})
        return _hydrate(timesheet)


def get_timesheet(timesheet_id: str, *, db: Optional[Session] = None) -> Timesheet:
    with unit_of_work(db) as db:
        return _hydrate(_load_or_404(db, timesheet_id))


def list_timesheets(
    *,
    project_id: Optional[str] = None,
    status: Optional[str] = None,
    period_from: Optional[date] = None,
    period_to: Optional[date] = None,
    limit: int = 50,
    offset: int = 0,
    db: Optional[Session] = None,
) -> List[Timesheet]:
    with unit_of_work(db) as db:
        q = db.query(Timesheet)

        if project_id is not None:
            q = q.filter(Timesheet.project_id == str(project_id))
        if status is not None:
            q = q.filter(Timesheet.status == TimesheetStatus(status).value)
        if period_from is not None:
            q = q.filter(Timesheet.period_start >= period_from)
        if period_to is not None:
            q = q.filter(Timesheet.period_end <= period_to)

        rows = (
            q.order_by(Timesheet.period_start.desc(), Timesheet.id.asc())
            .offset(int(offset))
            .limit(int(limit))
            .all()
        )
        return [_hydrate(r) for r in rows]


def submit(
    timesheet_id: str,
    *,
    db: Optional[Session] = None,
    log: Optional[OperationLogger] = None,
) -> Timesheet:
    """
    Move a timesheet to APPROVED.

    DRAFT and APPROVED both end up APPROVED (re-submitting is a no-op).
    LOCKED is terminal, so submitting a locked sheet is rejected.
    """
    log = resolve_logger(log, __name__, "submit_timesheet").bind(timesheet_id=str(timesheet_id))
    log.info("Submit timesheet requested")

    with unit_of_work(db) as db:
        timesheet = _load_or_404(db, timesheet_id)

        if timesheet.status == TimesheetStatus.LOCKED.value:
            log.warning("Submit rejected: timesheet is LOCKED")
            raise ConflictError("timesheet is LOCKED")

        timesheet.status = TimesheetStatus.APPROVED.value
        touch(timesheet)
        flush_versioned(db)

        log.info("Timesheet approved")
        return _hydrate(timesheet)


def lock(
    timesheet_id: str,
    *,
    db: Optional[Session] = None,
    log: Optional[OperationLogger] = None,
) -> Timesheet:
    log = resolve_logger(log, __name__, "lock_timesheet").bind(timesheet_id=str(timesheet_id))
    log.info("Lock timesheet requested")

    with unit_of_work(db) as db:
        timesheet = _load_or_404(db, timesheet_id)

        timesheet.status = TimesheetStatus.LOCKED.value
        touch(timesheet)
        flush_versioned(db)

        log.info("Timesheet locked")
        return _hydrate(timesheet)


def bulk_upsert(
    timesheet_id: str,
    rows: Sequence[EntryRow],
    *,
    db: Optional[Session] = None,
    log: Optional[OperationLogger] = None,
) -> BulkUpsertResult:
    """
    Insert or update entries of one timesheet, all-or-nothing.

    Rows are matched on (entry_date, description). A match gets its hours,
    rate and cost overwritten; anything else is inserted. The first invalid
    row aborts the whole batch.
    """
    log = resolve_logger(log, __name__, "bulk_upsert").bind(timesheet_id=str(timesheet_id))
    log.info("Bulk upsert requested", extra={"rows": len(rows)})

    with unit_of_work(db) as db:
        timesheet = _load_or_404(db, timesheet_id)

        try:
            ensure_mutable(timesheet)
        except ConflictError:
            log.warning("Bulk upsert rejected: timesheet is LOCKED")
            raise

        inserted = 0
        updated = 0

        for index, row in enumerate(rows):
            hours = quantize_amount(row.hours)
            rate = quantize_amount(row.rate_at_entry)
            try:
                validate_entry(row.entry_date, hours, timesheet.period_start, timesheet.period_end)
            except ValidationError as exc:
                log.warning(
                    "Bulk upsert rejected: invalid row",
                    extra={"row_index": index, "entry_date": row.entry_date, "reason": str(exc)},
                )
                raise

            existing = timesheet_store.find_entry_by_natural_key(db, timesheet, row.entry_date, row.description)

            if existing is None:
                entry = TimeEntry(
                    entry_date=row.entry_date,
                    description=row.description,
                    hours=hours,
                    rate_at_entry=rate,
                    cost_at_entry=cost_for(hours, rate),
                )
                timesheet.entries.append(entry)
                # Flushed per row so a later row with the same natural key matches it.
                timesheet_store.save_entry(db, entry)
                inserted += 1
            else:
                existing.hours = hours
                existing.rate_at_entry = rate
                existing.cost_at_entry = cost_for(hours, rate)
                updated += 1

        touch(timesheet)
        flush_versioned(db)

        total = aggregation.total_hours(timesheet)

        log.info(
            "Bulk upsert completed",
            extra={"inserted": inserted, "updated": updated, "total_hours": total},
        )
        return BulkUpsertResult(inserted=inserted, updated=updated, deleted=0, total_hours=total)
