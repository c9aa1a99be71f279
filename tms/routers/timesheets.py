from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from tms.core.logging import OperationLogger
from tms.database import SessionLocal
from tms.deps.observability import request_logger
from tms.models.timesheet import Timesheet, TimesheetStatus
from tms.schemas.time_entry import BulkUpsertRequest, BulkUpsertResponse
from tms.schemas.timesheet import (
    DailyTotalResponse,
    TimeEntryItem,
    TimesheetCreate,
    TimesheetDetail,
    TimesheetListResponse,
    TimesheetSummary,
)
from tms.services import aggregation, timesheet_engine
from tms.services.timesheet_engine import EntryRow

router = APIRouter(
    prefix="/timesheets",
    tags=["Timesheets"],
)


def _project_name(t: Timesheet) -> Optional[str]:
    return None if t.project is None else t.project.name


def _to_summary(t: Timesheet) -> TimesheetSummary:
    return TimesheetSummary(
        id=t.id,
        project_id=t.project_id,
        project_name=_project_name(t),
        period_start=t.period_start,
        period_end=t.period_end,
        status=TimesheetStatus(t.status),
        total_hours=aggregation.total_hours(t),
    )


def _to_detail(t: Timesheet) -> TimesheetDetail:
    entries = list(t.entries)
    return TimesheetDetail(
        id=t.id,
        project_id=t.project_id,
        project_name=_project_name(t),
        period_start=t.period_start,
        period_end=t.period_end,
        status=TimesheetStatus(t.status),
        created_at=t.created_at,
        updated_at=t.updated_at,
        entries=[TimeEntryItem.model_validate(e) for e in entries],
        daily_totals=[
            DailyTotalResponse(date=d.date, hours=d.hours)
            for d in aggregation.daily_totals(entries)
        ],
        total_hours=aggregation.sum_hours(entries),
    )


@router.get("", response_model=TimesheetListResponse)
def list_timesheets(
    project_id: Optional[str] = None,
    status: Optional[TimesheetStatus] = None,
    period_from: Optional[date] = Query(default=None, alias="from"),
    period_to: Optional[date] = Query(default=None, alias="to"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
):
    db = SessionLocal()
    try:
        rows = timesheet_engine.list_timesheets(
            project_id=project_id,
            status=None if status is None else status.value,
            period_from=period_from,
            period_to=period_to,
            limit=limit,
            offset=offset,
            db=db,
        )
        return TimesheetListResponse(
            limit=int(limit),
            offset=int(offset),
            rows=[_to_summary(r) for r in rows],
        )
    finally:
        db.close()


@router.post("", response_model=TimesheetDetail, status_code=201)
def create_timesheet(
    payload: TimesheetCreate,
    log: OperationLogger = Depends(request_logger("create_timesheet")),
):
    db = SessionLocal()
    try:
        timesheet = timesheet_engine.create_timesheet(
            project_id=payload.project_id,
            period_start=payload.period_start,
            period_end=payload.period_end,
            db=db,
            log=log,
        )
        db.commit()
        return _to_detail(timesheet)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@router.get("/{timesheet_id}", response_model=TimesheetDetail)
def get_timesheet(timesheet_id: str):
    db = SessionLocal()
    try:
        return _to_detail(timesheet_engine.get_timesheet(timesheet_id, db=db))
    finally:
        db.close()


@router.put("/{timesheet_id}/entries", response_model=BulkUpsertResponse)
def bulk_upsert_entries(
    timesheet_id: str,
    payload: BulkUpsertRequest,
    log: OperationLogger = Depends(request_logger("bulk_upsert")),
):
    rows = [
        EntryRow(
            entry_date=r.entry_date,
            hours=r.hours,
            description=r.description,
            rate_at_entry=r.rate_at_entry,
        )
        for r in payload.entries
    ]

    db = SessionLocal()
    try:
        result = timesheet_engine.bulk_upsert(timesheet_id, rows, db=db, log=log)
        db.commit()
        return BulkUpsertResponse(
            inserted=result.inserted,
            updated=result.updated,
            deleted=result.deleted,
            total_hours=result.total_hours,
        )
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@router.post("/{timesheet_id}/submit", response_model=TimesheetDetail)
def submit_timesheet(
    timesheet_id: str,
    log: OperationLogger = Depends(request_logger("submit_timesheet")),
):
    db = SessionLocal()
    try:
        timesheet = timesheet_engine.submit(timesheet_id, db=db, log=log)
        db.commit()
        return _to_detail(timesheet)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@router.patch("/{timesheet_id}/lock", response_model=TimesheetDetail)
def lock_timesheet(
    timesheet_id: str,
    log: OperationLogger = Depends(request_logger("lock_timesheet")),
):
    db = SessionLocal()
    try:
        timesheet = timesheet_engine.lock(timesheet_id, db=db, log=log)
        db.commit()
        return _to_detail(timesheet)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
