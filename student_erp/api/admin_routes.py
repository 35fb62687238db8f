from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from sqlalchemy.orm import Session

from student_erp.core.database import get_db
from student_erp.models.enums import Program
from student_erp.models.user import User
from student_erp.schemas.batch import BatchCreateRequest, BatchDetailResponse, BatchListResponse, BatchResponse
from student_erp.schemas.email import BulkEmailRequest, BulkEmailResponse
from student_erp.schemas.event import EventCreateRequest, EventResponse, EventUpdateRequest
from student_erp.schemas.form_visibility import BatchFormVisibility, FormVisibilityMask, FormVisibilityUpdateRequest
from student_erp.schemas.student import AdminStudentUpdateRequest, AssignBatchRequest, StudentListResponse, StudentResponse
from student_erp.schemas.task import TaskCreateRequest, TaskResponse
from student_erp.services import batches, events, form_visibility, students, tasks
from student_erp.services.auth import get_current_user, require_admin
from student_erp.services.email import queue_bulk_email

router = APIRouter(prefix="/api/admin")


# ── Students ──────────────────────────────────────────────────────────────────

@router.get("/students", response_model=StudentListResponse)
def list_students_endpoint(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    batch_id: int | None = None,
    program: Program | None = None,
    search: str | None = None,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return students.list_students(db, page, limit, batch_id, program, search)


@router.post("/students/assign-batch", response_model=StudentResponse)
def assign_batch_endpoint(
    payload: AssignBatchRequest,
    request: Request,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return students.assign_batch(db, admin, payload.student_id, payload.batch_id, request)


@router.get("/students/{student_id}", response_model=StudentResponse)
def get_student_endpoint(student_id: int, _: User = Depends(require_admin), db: Session = Depends(get_db)):
    return students.get_student(db, student_id)


@router.put("/students/{student_id}", response_model=StudentResponse)
def update_student_endpoint(
    student_id: int,
    payload: AdminStudentUpdateRequest,
    request: Request,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return students.admin_update_student(db, admin, student_id, payload, request)


@router.delete("/students/{student_id}", status_code=204)
def delete_student_endpoint(
    student_id: int,
    request: Request,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    students.delete_student(db, admin, student_id, request)


@router.post("/students/{student_id}/remove-batch", response_model=StudentResponse)
def remove_batch_endpoint(
    student_id: int,
    request: Request,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return students.remove_from_batch(db, admin, student_id, request)


# ── Batches ───────────────────────────────────────────────────────────────────

@router.get("/batches", response_model=BatchListResponse)
def list_batches_endpoint(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=200),
    program: Program | None = None,
    is_active: bool | None = None,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return batches.list_batches(db, page, limit, program, is_active)


@router.post("/batches", response_model=BatchResponse, status_code=201)
def create_batch_endpoint(
    payload: BatchCreateRequest,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return batches.create_batch(db, payload)


@router.get("/batches/{batch_id}", response_model=BatchDetailResponse)
def get_batch_endpoint(batch_id: int, _: User = Depends(require_admin), db: Session = Depends(get_db)):
    return batches.get_batch(db, batch_id)


# ── Events ────────────────────────────────────────────────────────────────────

@router.get("/events", response_model=list[EventResponse])
def list_events_endpoint(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Admins see every event; students only those of their batch."""
    return events.list_events(db, user)


@router.post("/events", response_model=EventResponse, status_code=201)
def create_event_endpoint(
    payload: EventCreateRequest,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return events.create_event(db, payload)


@router.get("/events/{event_id}", response_model=EventResponse)
def get_event_endpoint(event_id: int, _: User = Depends(require_admin), db: Session = Depends(get_db)):
    return events.get_event(db, event_id)


@router.put("/events/{event_id}", response_model=EventResponse)
def update_event_endpoint(
    event_id: int,
    payload: EventUpdateRequest,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return events.update_event(db, event_id, payload)


@router.delete("/events/{event_id}", status_code=204)
def delete_event_endpoint(event_id: int, _: User = Depends(require_admin), db: Session = Depends(get_db)):
    events.delete_event(db, event_id)


# ── Email ─────────────────────────────────────────────────────────────────────

@router.post("/emails/bulk", response_model=BulkEmailResponse, status_code=202)
def bulk_email_endpoint(
    payload: BulkEmailRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    count = queue_bulk_email(db, admin, payload, background_tasks, request)
    return {"recipient_count": count}


# ── Form visibility ───────────────────────────────────────────────────────────

@router.get("/form-visibility", response_model=list[BatchFormVisibility])
def list_form_visibility_endpoint(_: User = Depends(require_admin), db: Session = Depends(get_db)):
    return form_visibility.list_batch_visibility(db)


@router.post("/form-visibility", response_model=FormVisibilityMask)
def update_form_visibility_endpoint(
    payload: FormVisibilityUpdateRequest,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return form_visibility.set_batch_visibility(db, payload.batch_id, payload.form_visibility)


# ── Tasks ─────────────────────────────────────────────────────────────────────

@router.get("/tasks", response_model=list[TaskResponse])
def list_tasks_endpoint(_: User = Depends(require_admin), db: Session = Depends(get_db)):
    return tasks.list_tasks(db)


@router.post("/tasks", response_model=TaskResponse, status_code=201)
def create_task_endpoint(
    payload: TaskCreateRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return tasks.create_task(db, admin, payload, background_tasks, request)
