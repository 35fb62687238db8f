from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from student_erp.models.base import Base
from student_erp.models.enums import Program

# Profile sections an admin can show or hide per batch, in tab order.
FORM_SECTIONS = (
    "personal_details",
    "education",
    "travel",
    "work_details",
    "financials",
    "documents",
    "course_details",
    "university",
    "post_admission",
)


class Batch(Base):
    __tablename__ = "batches"
    __table_args__ = (UniqueConstraint("program", "intake_year", name="uq_batches_program_intake_year"),)

    id = Column(Integer, primary_key=True, index=True)
    program = Column(Enum(Program), nullable=False)
    intake_year = Column(Integer, nullable=False)
    name = Column(String, nullable=False)
    # Short display code; (program, intake_year) is the identity
    code = Column(String, nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    students = relationship("Student", back_populates="batch")
    form_visibility = relationship(
        "FormVisibility", back_populates="batch", uselist=False, cascade="all, delete-orphan"
    )


class FormVisibility(Base):
    __tablename__ = "form_visibility"

    id = Column(Integer, primary_key=True, index=True)
    batch_id = Column(Integer, ForeignKey("batches.id", ondelete="CASCADE"), nullable=False, unique=True)
    personal_details = Column(Boolean, nullable=False, default=True)
    education = Column(Boolean, nullable=False, default=True)
    travel = Column(Boolean, nullable=False, default=True)
    work_details = Column(Boolean, nullable=False, default=True)
    financials = Column(Boolean, nullable=False, default=True)
    documents = Column(Boolean, nullable=False, default=True)
    course_details = Column(Boolean, nullable=False, default=True)
    university = Column(Boolean, nullable=False, default=True)
    post_admission = Column(Boolean, nullable=False, default=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    batch = relationship("Batch", back_populates="form_visibility")

    def as_mask(self) -> dict[str, bool]:
        return {section: bool(getattr(self, section)) for section in FORM_SECTIONS}
