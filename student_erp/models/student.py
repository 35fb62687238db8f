from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from student_erp.models.base import Base
from student_erp.models.enums import Program


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    batch_id = Column(Integer, ForeignKey("batches.id", ondelete="SET NULL"), nullable=True, index=True)

    # Personal
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    date_of_birth = Column(Date, nullable=True)
    gender = Column(String, nullable=True)
    nationality = Column(String, nullable=True)
    country_of_birth = Column(String, nullable=True)
    native_language = Column(String, nullable=True)
    parent_name = Column(String, nullable=True)
    parent_phone = Column(String, nullable=True)
    parent_email = Column(String, nullable=True)
    parent_relation = Column(String, nullable=True)
    address = Column(Text, nullable=True)
    postal_code = Column(String, nullable=True)

    # Passport
    passport_number = Column(String, nullable=True)
    name_as_per_passport = Column(String, nullable=True)
    passport_issue_location = Column(String, nullable=True)
    passport_issue_date = Column(Date, nullable=True)
    passport_expiry_date = Column(Date, nullable=True)
    passport_photo = Column(String, nullable=True)  # stored path

    # Education
    school = Column(String, nullable=True)
    school_country = Column(String, nullable=True)
    school_address = Column(String, nullable=True)
    school_board = Column(String, nullable=True)
    school_start_date = Column(Date, nullable=True)
    school_end_date = Column(Date, nullable=True)
    school_grade = Column(String, nullable=True)
    high_school = Column(String, nullable=True)
    high_school_country = Column(String, nullable=True)
    high_school_address = Column(String, nullable=True)
    high_school_board = Column(String, nullable=True)
    high_school_start_date = Column(Date, nullable=True)
    high_school_end_date = Column(Date, nullable=True)
    high_school_grade = Column(String, nullable=True)
    bachelors_in = Column(String, nullable=True)
    bachelors_from_institute = Column(String, nullable=True)
    bachelors_country = Column(String, nullable=True)
    bachelors_address = Column(String, nullable=True)
    bachelors_start_date = Column(Date, nullable=True)
    bachelors_end_date = Column(Date, nullable=True)
    bachelors_grade = Column(String, nullable=True)
    gre_taken = Column(Boolean, nullable=True)
    gre_score = Column(Integer, nullable=True)
    toefl_taken = Column(Boolean, nullable=True)
    toefl_score = Column(Integer, nullable=True)

    # Travel
    travel_history = Column(JSON, nullable=True)  # [{"country": ..., "year": ..., "purpose": ...}]
    visa_refused = Column(Boolean, nullable=True)

    # Work
    has_work_experience = Column(Boolean, nullable=True)

    # Financials
    personal_ever_employed = Column(String, nullable=True)
    mother_income_type = Column(String, nullable=True)
    father_income_type = Column(String, nullable=True)

    # Course
    program = Column(Enum(Program), nullable=False)
    intake_year = Column(Integer, nullable=False)

    profile_completion = Column(Integer, nullable=False, default=0)
    has_completed_onboarding = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="student")
    batch = relationship("Batch", back_populates="students")
    documents = relationship("Document", back_populates="student", cascade="all, delete-orphan")
    work_experiences = relationship("WorkExperience", back_populates="student", cascade="all, delete-orphan")
    references = relationship("Reference", back_populates="student", cascade="all, delete-orphan")

    @property
    def has_passport_photo(self) -> bool:
        return bool(self.passport_photo)
