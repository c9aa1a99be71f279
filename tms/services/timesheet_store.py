from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from tms.models.project import Project
from tms.models.time_entry import TimeEntry
from tms.models.timesheet import Timesheet


def find_project_by_id(db: Session, project_id: str) -> Optional[Project]:
    return db.get(Project, str(project_id))


def find_timesheet_by_id(db: Session, timesheet_id: str) -> Optional[Timesheet]:
    return db.get(Timesheet, str(timesheet_id))


def find_timesheet_by_project_and_period(
    db: Session,
    project_id: str,
    period_start: date,
    period_end: date,
) -> Optional[Timesheet]:
    return (
        db.query(Timesheet)
        .filter(
            Timesheet.project_id == str(project_id),
            Timesheet.period_start == period_start,
            Timesheet.period_end == period_end,
        )
        .first()
    )


def find_entry_by_id(db: Session, entry_id: str) -> Optional[TimeEntry]:
    return db.get(TimeEntry, str(entry_id))


def find_entry_by_natural_key(
    db: Session,
    timesheet: Timesheet,
    entry_date: date,
    description: Optional[str],
) -> Optional[TimeEntry]:
    """
    Point lookup on (timesheet, entry_date, description).

    description is compared for exact equality; two NULL descriptions match.
    """
    q = db.query(TimeEntry).filter(
        TimeEntry.timesheet_id == timesheet.id,
        TimeEntry.entry_date == entry_date,
    )
    if description is None:
        q = q.filter(TimeEntry.description.is_(None))
    else:
        q = q.filter(TimeEntry.description == description)
    return q.first()


def save_timesheet(db: Session, timesheet: Timesheet) -> Timesheet:
    db.add(timesheet)
    db.flush()
    return timesheet


def save_entry(db: Session, entry: TimeEntry) -> TimeEntry:
    db.add(entry)
    db.flush()
    return entry
