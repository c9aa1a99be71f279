from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TimeEntryRow(BaseModel):
    entry_date: date
    description: Optional[str] = Field(default=None, max_length=500)
    # Positivity is a business rule checked by the services layer.
    hours: Optional[Decimal] = Field(default=None, le=24, decimal_places=2)
    rate_at_entry: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)


class TimeEntryCreate(TimeEntryRow):
    timesheet_id: str


class BulkUpsertRequest(BaseModel):
    entries: list[TimeEntryRow]


class BulkUpsertResponse(BaseModel):
    inserted: int
    updated: int
    deleted: int
    total_hours: Decimal


class TimeEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    timesheet_id: str
    entry_date: date
    description: Optional[str]
    hours: Decimal
    rate_at_entry: Optional[Decimal]
    cost_at_entry: Optional[Decimal]
