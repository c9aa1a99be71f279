import asyncio
import logging
import os

from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.orm import Session

from tms.database import SessionLocal
from tms.models.timesheet import Timesheet, TimesheetStatus

logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    try:
        return float(v)
    except ValueError:
        return default


def report_worker_enabled() -> bool:
    # Disable by default under pytest to keep tests deterministic.
    if os.getenv("PYTEST_CURRENT_TEST"):
        return False
    v = os.getenv("TIMESHEET_REPORT_ENABLED")
    if v is None:
        return True
    return v.strip() not in {"0", "false", "False", "no", "NO"}


def report_approved_timesheets(db: Session) -> int:
    count = (
        db.query(Timesheet)
        .filter(Timesheet.status == TimesheetStatus.APPROVED.value)
        .count()
    )
    logger.info(
        "Approved timesheets report",
        extra={"component": "timesheet_report", "approved_count": int(count)},
    )
    return int(count)


async def timesheet_report_loop(*, interval_seconds: float = 3600.0) -> None:
    """
    Periodic approved-timesheet report.

    Read-only; a failed tick is logged and retried on the next interval so a
    database outage never takes the server down with it.
    """
    logger.info(
        "Timesheet report worker started",
        extra={"interval_seconds": float(interval_seconds)},
    )

    while True:
        db: Session = SessionLocal()
        try:
            report_approved_timesheets(db)
            db.rollback()

        except asyncio.CancelledError:
            logger.info("Timesheet report worker cancelled; shutting down")
            raise

        except (OperationalError, DBAPIError):
            db.rollback()
            # Drop pooled connections so the next tick reconnects.
            engine = db.get_bind()
            if engine is not None and hasattr(engine, "dispose"):
                engine.dispose()
            logger.exception(
                "Timesheet report tick failed",
                extra={"component": "timesheet_report", "reason": "dbapi_error"},
            )

        except Exception:
            db.rollback()
            logger.exception(
                "Timesheet report tick failed",
                extra={"component": "timesheet_report", "reason": "unexpected"},
            )

        finally:
            db.close()

        await asyncio.sleep(interval_seconds)


def start_timesheet_report_task() -> asyncio.Task | None:
    if not report_worker_enabled():
        logger.info("Timesheet report worker disabled")
        return None

    interval_seconds = _env_float("TIMESHEET_REPORT_INTERVAL_SECONDS", 3600.0)
    return asyncio.create_task(timesheet_report_loop(interval_seconds=interval_seconds))
