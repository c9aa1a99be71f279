import datetime as dt
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from tms.models.timesheet import TimesheetStatus


class TimesheetCreate(BaseModel):
    project_id: str
    period_start: date
    period_end: date


class TimeEntryItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    entry_date: date
    description: Optional[str]
    hours: Decimal
    rate_at_entry: Optional[Decimal]
    cost_at_entry: Optional[Decimal]


class DailyTotalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: dt.date
    hours: Decimal


class TimesheetSummary(BaseModel):
    id: str
    project_id: str
    project_name: Optional[str]
    period_start: date
    period_end: date
    status: TimesheetStatus
    total_hours: Decimal


class TimesheetDetail(TimesheetSummary):
    created_at: datetime
    updated_at: datetime
    entries: list[TimeEntryItem]
    daily_totals: list[DailyTotalResponse]


class TimesheetListResponse(BaseModel):
    limit: int
    offset: int
    rows: list[TimesheetSummary]
