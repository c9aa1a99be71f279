import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from tms.database import Base


class TimesheetStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    APPROVED = "APPROVED"
    LOCKED = "LOCKED"

    @property
    def is_mutable(self) -> bool:
        return self in (TimesheetStatus.DRAFT, TimesheetStatus.APPROVED)


class Timesheet(Base):
    __tablename__ = "timesheets"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(String, ForeignKey("projects.id"), nullable=False, index=True)
    period_start = Column(Date, nullable=False)
    period_end = Column(Date, nullable=False)
    status = Column(String, nullable=False, default=TimesheetStatus.DRAFT.value, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    version_id = Column(Integer, nullable=False)

    project = relationship("Project", lazy="joined")
    entries = relationship(
        "TimeEntry",
        back_populates="timesheet",
        cascade="all, delete-orphan",
        order_by="[TimeEntry.entry_date, TimeEntry.created_at]",
    )

    __table_args__ = (
        UniqueConstraint("project_id", "period_start", "period_end", name="uq_timesheet_project_period"),
        CheckConstraint("period_end >= period_start", name="ck_timesheets_period_end_after_start"),
        CheckConstraint("status in ('DRAFT','APPROVED','LOCKED')", name="ck_timesheets_status_valid"),
    )

    __mapper_args__ = {"version_id_col": version_id}
