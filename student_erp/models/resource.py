from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from student_erp.models.base import Base
from student_erp.models.enums import Program, VisibilityType


class Resource(Base):
    __tablename__ = "resources"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    file_name = Column(String, nullable=False)
    stored_path = Column(String, nullable=False)
    file_size = Column(Integer, nullable=False)
    mime_type = Column(String, nullable=False)
    visibility_type = Column(Enum(VisibilityType), nullable=False, default=VisibilityType.ALL)
    program = Column(Enum(Program), nullable=True)
    batch_id = Column(Integer, ForeignKey("batches.id", ondelete="SET NULL"), nullable=True, index=True)
    uploaded_at = Column(DateTime, default=datetime.utcnow)

    batch = relationship("Batch")
