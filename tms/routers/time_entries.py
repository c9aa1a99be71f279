from fastapi import APIRouter, Depends, Response

from tms.core.logging import OperationLogger
from tms.database import SessionLocal
from tms.deps.observability import request_logger
from tms.models.time_entry import TimeEntry
from tms.schemas.time_entry import TimeEntryCreate, TimeEntryResponse
from tms.services import time_entry_service

router = APIRouter(
    prefix="/time-entries",
    tags=["Time Entries"],
)


def _to_response(entry: TimeEntry) -> TimeEntryResponse:
    return TimeEntryResponse(
        id=entry.id,
        timesheet_id=entry.timesheet_id,
        entry_date=entry.entry_date,
        description=entry.description,
        hours=entry.hours,
        rate_at_entry=entry.rate_at_entry,
        cost_at_entry=entry.cost_at_entry,
    )


@router.post("", response_model=TimeEntryResponse, status_code=201)
def create_time_entry(
    payload: TimeEntryCreate,
    log: OperationLogger = Depends(request_logger("create_time_entry")),
):
    db = SessionLocal()
    try:
        entry = time_entry_service.create_entry(
            timesheet_id=payload.timesheet_id,
            entry_date=payload.entry_date,
            hours=payload.hours,
            description=payload.description,
            rate_at_entry=payload.rate_at_entry,
            db=db,
            log=log,
        )
        db.commit()
        db.refresh(entry)
        return _to_response(entry)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@router.delete("/{entry_id}", status_code=204)
def delete_time_entry(
    entry_id: str,
    log: OperationLogger = Depends(request_logger("delete_time_entry")),
):
    db = SessionLocal()
    try:
        time_entry_service.delete_entry(entry_id, db=db, log=log)
        db.commit()
        return Response(status_code=204)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
