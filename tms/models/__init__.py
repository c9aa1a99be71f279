from tms.models.project import Project
from tms.models.time_entry import TimeEntry
from tms.models.timesheet import Timesheet, TimesheetStatus

__all__ = [
    "Project",
    "TimeEntry",
    "Timesheet",
    "TimesheetStatus",
]
