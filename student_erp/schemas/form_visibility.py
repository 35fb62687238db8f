from pydantic import BaseModel

from student_erp.models.enums import Program


class FormVisibilityMask(BaseModel):
    """Which profile tabs a batch shows; every section defaults to visible."""

    personal_details: bool = True
    education: bool = True
    travel: bool = True
    work_details: bool = True
    financials: bool = True
    documents: bool = True
    course_details: bool = True
    university: bool = True
    post_admission: bool = True

    model_config = {"from_attributes": True}


class FormVisibilityUpdateRequest(BaseModel):
    batch_id: int
    form_visibility: FormVisibilityMask


class BatchFormVisibility(BaseModel):
    id: int
    name: str
    code: str | None = None
    program: Program
    intake_year: int
    student_count: int
    form_visibility: FormVisibilityMask


class StudentFormVisibilityResponse(BaseModel):
    form_visibility: FormVisibilityMask
    batch_name: str
