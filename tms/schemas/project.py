from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    hourly_rate: Optional[Decimal] = Field(default=None, ge=0)


class ProjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    hourly_rate: Optional[Decimal]
    is_active: bool
    created_at: datetime
