from pydantic import BaseModel, Field, model_validator

from student_erp.models.enums import Program


class BulkEmailRequest(BaseModel):
    recipient_type: str = Field(..., pattern="^(BATCH|PROGRAM|ALL)$")
    batch_id: int | None = None
    program: Program | None = None
    subject: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def _target_present(self):
        if self.recipient_type == "BATCH" and self.batch_id is None:
            raise ValueError("batch_id required for batch emails")
        if self.recipient_type == "PROGRAM" and self.program is None:
            raise ValueError("program required for program emails")
        return self


class BulkEmailResponse(BaseModel):
    recipient_count: int
