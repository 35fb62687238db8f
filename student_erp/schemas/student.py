from datetime import date, datetime

from pydantic import BaseModel, EmailStr, Field

from student_erp.models.enums import Program


class TravelEntry(BaseModel):
    country: str = Field(..., min_length=1)
    year: int | None = Field(None, ge=1900, le=2100)
    purpose: str | None = None
    duration: str | None = None


class StudentProfileFields(BaseModel):
    """Optional profile fields shared by onboarding, profile edits and responses."""

    email: EmailStr | None = None
    phone: str | None = None
    date_of_birth: date | None = None
    gender: str | None = None
    nationality: str | None = None
    country_of_birth: str | None = None
    native_language: str | None = None
    parent_name: str | None = None
    parent_phone: str | None = None
    parent_email: EmailStr | None = None
    parent_relation: str | None = None
    address: str | None = None
    postal_code: str | None = None

    passport_number: str | None = None
    name_as_per_passport: str | None = None
    passport_issue_location: str | None = None
    passport_issue_date: date | None = None
    passport_expiry_date: date | None = None


class EducationFields(BaseModel):
    school: str | None = None
    school_country: str | None = None
    school_address: str | None = None
    school_board: str | None = None
    school_start_date: date | None = None
    school_end_date: date | None = None
    school_grade: str | None = None
    high_school: str | None = None
    high_school_country: str | None = None
    high_school_address: str | None = None
    high_school_board: str | None = None
    high_school_start_date: date | None = None
    high_school_end_date: date | None = None
    high_school_grade: str | None = None
    bachelors_in: str | None = None
    bachelors_from_institute: str | None = None
    bachelors_country: str | None = None
    bachelors_address: str | None = None
    bachelors_start_date: date | None = None
    bachelors_end_date: date | None = None
    bachelors_grade: str | None = None
    gre_taken: bool | None = None
    gre_score: int | None = Field(None, ge=260, le=340)
    toefl_taken: bool | None = None
    toefl_score: int | None = Field(None, ge=0, le=120)


class TravelWorkFinanceFields(BaseModel):
    travel_history: list[TravelEntry] | None = None
    visa_refused: bool | None = None
    has_work_experience: bool | None = None
    personal_ever_employed: str | None = None
    mother_income_type: str | None = None
    father_income_type: str | None = None


class OnboardingRequest(StudentProfileFields):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    program: Program
    intake_year: int


class ProfileUpdateRequest(StudentProfileFields, EducationFields, TravelWorkFinanceFields):
    """Only fields present in the request body are written."""

    first_name: str | None = Field(None, min_length=1)
    last_name: str | None = Field(None, min_length=1)


class AdminStudentUpdateRequest(ProfileUpdateRequest):
    program: Program | None = None
    intake_year: int | None = None
    batch_id: int | None = None
    is_active: bool | None = None


class StudentBatchOut(BaseModel):
    id: int
    name: str
    program: Program
    intake_year: int

    model_config = {"from_attributes": True}


class StudentResponse(StudentProfileFields, EducationFields, TravelWorkFinanceFields):
    id: int
    user_id: int
    first_name: str
    last_name: str
    program: Program
    intake_year: int
    batch_id: int | None = None
    batch: StudentBatchOut | None = None
    profile_completion: int
    has_completed_onboarding: bool
    has_passport_photo: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class OnboardingResponse(BaseModel):
    student: StudentResponse
    batch_id: int


class StudentListResponse(BaseModel):
    students: list[StudentResponse]
    page: int
    limit: int
    total: int
    total_pages: int


class AssignBatchRequest(BaseModel):
    student_id: int
    batch_id: int


class OnboardingStatusResponse(BaseModel):
    has_completed_onboarding: bool
    student: StudentResponse | None = None
