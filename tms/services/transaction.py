from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from tms.core.errors import ConflictError
from tms.core.logging import OperationLogger, operation_logger
from tms.database import SessionLocal
from tms.models.timesheet import Timesheet


@contextmanager
def unit_of_work(db: Optional[Session]) -> Iterator[Session]:
    """
    If db is provided, this will NOT commit/close. Caller owns the transaction.
    If db is None, this manages its own session + commit.
    """
    owns_db = db is None
    if owns_db:
        db = SessionLocal()

    try:
        yield db
        if owns_db:
            db.commit()
    except Exception:
        if owns_db:
            db.rollback()
        raise
    finally:
        if owns_db:
            db.close()


def resolve_logger(log: Optional[OperationLogger], name: str, operation: str) -> OperationLogger:
    if log is None:
        return operation_logger(name, operation)
    return log


def touch(timesheet: Timesheet) -> None:
    # Forces a version-checked UPDATE of the timesheet row in this transaction.
    timesheet.updated_at = datetime.utcnow()


def flush_versioned(db: Session) -> None:
    try:
        db.flush()
    except StaleDataError as exc:
        raise ConflictError("timesheet was modified concurrently") from exc
