from datetime import datetime

from pydantic import BaseModel

from student_erp.models.enums import DocumentType


class DocumentResponse(BaseModel):
    id: int
    student_id: int
    type: DocumentType
    file_name: str
    file_size: int
    mime_type: str
    page_count: int | None = None
    other_source_index: int | None = None
    uploaded_at: datetime

    model_config = {"from_attributes": True}


class DocumentUploadResponse(BaseModel):
    document: DocumentResponse
    replaced_document_id: int | None = None
    profile_completion: int
