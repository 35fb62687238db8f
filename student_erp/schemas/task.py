from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from student_erp.models.enums import AssignmentType, Program, TaskStatus


class TaskCreateRequest(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = ""
    due_date: datetime | None = None
    assignment_type: AssignmentType
    student_id: int | None = None
    batch_id: int | None = None
    program: Program | None = None

    @model_validator(mode="after")
    def _target_present(self):
        if self.assignment_type == AssignmentType.INDIVIDUAL and self.student_id is None:
            raise ValueError("student_id required for individual assignment")
        if self.assignment_type == AssignmentType.BATCH and self.batch_id is None:
            raise ValueError("batch_id required for batch assignment")
        if self.assignment_type == AssignmentType.PROGRAM and self.program is None:
            raise ValueError("program required for program assignment")
        return self


class TaskAssignmentOut(BaseModel):
    id: int
    student_id: int | None = None
    batch_id: int | None = None
    status: TaskStatus
    completed_at: datetime | None = None

    model_config = {"from_attributes": True}


class TaskResponse(BaseModel):
    id: int
    title: str
    description: str
    due_date: datetime | None = None
    assignment_type: AssignmentType
    created_at: datetime | None = None
    assignments: list[TaskAssignmentOut] = []

    model_config = {"from_attributes": True}


class StudentTaskOut(BaseModel):
    assignment_id: int
    task_id: int
    title: str
    description: str
    due_date: datetime | None = None
    status: TaskStatus
    completed_at: datetime | None = None


class TaskStatusUpdateRequest(BaseModel):
    status: TaskStatus
