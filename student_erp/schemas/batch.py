from datetime import date, datetime

from pydantic import BaseModel, field_validator

from student_erp.core.config import settings
from student_erp.models.enums import Program


class BatchCreateRequest(BaseModel):
    program: Program
    intake_year: int
    is_active: bool = True

    @field_validator("intake_year")
    @classmethod
    def _intake_year_in_range(cls, value: int) -> int:
        if not settings.admin_min_intake_year <= value <= settings.admin_max_intake_year:
            raise ValueError(
                f"intake_year must be between {settings.admin_min_intake_year} and {settings.admin_max_intake_year}"
            )
        return value


class BatchResponse(BaseModel):
    id: int
    program: Program
    intake_year: int
    name: str
    code: str | None = None
    is_active: bool
    created_at: datetime | None = None
    student_count: int = 0

    model_config = {"from_attributes": True}


class BatchListResponse(BaseModel):
    batches: list[BatchResponse]
    total: int
    page: int
    total_pages: int


class BatchStudentOut(BaseModel):
    id: int
    first_name: str
    last_name: str
    date_of_birth: date | None = None
    nationality: str | None = None
    profile_completion: int
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class BatchDetailResponse(BaseModel):
    id: int
    program: Program
    intake_year: int
    name: str
    code: str | None = None
    is_active: bool
    students: list[BatchStudentOut] = []

    model_config = {"from_attributes": True}
