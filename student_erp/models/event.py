from datetime import datetime

from sqlalchemy import JSON, Column, Date, DateTime, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import relationship

from student_erp.models.base import Base

event_batches = Table(
    "event_batches",
    Base.metadata,
    Column("event_id", Integer, ForeignKey("events.id", ondelete="CASCADE"), primary_key=True),
    Column("batch_id", Integer, ForeignKey("batches.id", ondelete="CASCADE"), primary_key=True),
)


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    event_date = Column(Date, nullable=False, index=True)
    event_time = Column(String, nullable=False)  # e.g. "10:00 AM"
    venue = Column(String, nullable=False)
    banner = Column(String, nullable=True)
    registration_link = Column(String, nullable=True)
    resources = Column(JSON, nullable=False, default=list)  # list of links
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    batches = relationship("Batch", secondary=event_batches)

    @property
    def batch_ids(self) -> list[int]:
        return [batch.id for batch in self.batches]
