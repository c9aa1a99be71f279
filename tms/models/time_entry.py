import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import relationship

from tms.database import Base

INVOICED_MARKER = "[invoiced]"


class TimeEntry(Base):
    __tablename__ = "time_entries"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    timesheet_id = Column(
        String,
        ForeignKey("timesheets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    entry_date = Column(Date, nullable=False)
    description = Column(String(500), nullable=True)

    hours = Column(Numeric(10, 2), nullable=False)
    rate_at_entry = Column(Numeric(10, 2), nullable=True)
    cost_at_entry = Column(Numeric(12, 2), nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    timesheet = relationship("Timesheet", back_populates="entries")

    __table_args__ = (
        CheckConstraint("hours > 0", name="ck_time_entries_hours_positive"),
        Index("ix_time_entries_natural_key", "timesheet_id", "entry_date", "description"),
    )

    @property
    def is_invoiced(self) -> bool:
        return self.description is not None and INVOICED_MARKER in self.description.lower()
