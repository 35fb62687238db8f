from datetime import datetime

from pydantic import BaseModel

from student_erp.models.enums import Program, VisibilityType


class ResourceResponse(BaseModel):
    id: int
    title: str
    description: str | None = None
    file_name: str
    file_size: int
    mime_type: str
    visibility_type: VisibilityType
    program: Program | None = None
    batch_id: int | None = None
    uploaded_at: datetime

    model_config = {"from_attributes": True}
