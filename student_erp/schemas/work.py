from datetime import date

from pydantic import BaseModel, EmailStr, Field


class WorkExperienceCreate(BaseModel):
    company_name: str = Field(..., min_length=1)
    designation: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    currently_working: bool = False
    description: str | None = None


class WorkExperienceResponse(WorkExperienceCreate):
    id: int
    student_id: int

    model_config = {"from_attributes": True}


class ReferenceCreate(BaseModel):
    name: str = Field(..., min_length=1)
    designation: str | None = None
    organization: str | None = None
    email: EmailStr | None = None
    phone: str | None = None
    relation: str | None = None


class ReferenceResponse(ReferenceCreate):
    id: int
    student_id: int

    model_config = {"from_attributes": True}
