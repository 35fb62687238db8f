from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from student_erp.models.base import Base
from student_erp.models.enums import DocumentType


class Document(Base):
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(Enum(DocumentType), nullable=False)
    file_name = Column(String, nullable=False)
    stored_path = Column(String, nullable=False)
    file_size = Column(Integer, nullable=False)
    mime_type = Column(String, nullable=False)
    page_count = Column(Integer, nullable=True)
    other_source_index = Column(Integer, nullable=True)  # OTHER_SOURCE_* documents only
    uploaded_at = Column(DateTime, default=datetime.utcnow)

    student = relationship("Student", back_populates="documents")
    access_logs = relationship("DocumentAccessLog", back_populates="document", cascade="all, delete-orphan")
