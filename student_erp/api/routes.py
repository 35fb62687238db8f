from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, Query, Request, Response, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from student_erp.core.config import settings
from student_erp.core.database import get_db
from student_erp.models.enums import DocumentType, Program, UserRole, VisibilityType
from student_erp.models.student import Student
from student_erp.models.user import User
from student_erp.schemas.auth import LoginRequest, RegisterRequest, TokenResponse, UserOut
from student_erp.schemas.document import DocumentResponse, DocumentUploadResponse
from student_erp.schemas.form_visibility import StudentFormVisibilityResponse
from student_erp.schemas.resource import ResourceResponse
from student_erp.schemas.student import (
    OnboardingRequest,
    OnboardingResponse,
    OnboardingStatusResponse,
    ProfileUpdateRequest,
    StudentResponse,
)
from student_erp.schemas.task import StudentTaskOut, TaskStatusUpdateRequest
from student_erp.schemas.work import (
    ReferenceCreate,
    ReferenceResponse,
    WorkExperienceCreate,
    WorkExperienceResponse,
)
from student_erp.services import documents, resources, storage, students, tasks
from student_erp.services.auth import (
    get_current_student,
    get_current_user,
    login_user,
    logout_user,
    register_user,
    require_admin,
    require_student,
)
from student_erp.services.form_visibility import student_visibility

router = APIRouter(prefix="/api")


def _read_upload(file: UploadFile, limit: int) -> bytes:
    # One byte past the limit is enough for the size check downstream
    return file.file.read(limit + 1)


# ── Auth ──────────────────────────────────────────────────────────────────────

@router.post("/auth/register", response_model=TokenResponse, status_code=201)
def register_endpoint(payload: RegisterRequest, response: Response, db: Session = Depends(get_db)):
    return register_user(db, payload, response)


@router.post("/auth/login", response_model=TokenResponse)
def login_endpoint(
    payload: LoginRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    return login_user(db, payload, response, request)


@router.post("/auth/admin/login", response_model=TokenResponse)
def admin_login_endpoint(
    payload: LoginRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    return login_user(db, payload, response, request, role=UserRole.ADMIN)


@router.post("/auth/logout")
def logout_endpoint(response: Response):
    logout_user(response)
    return {"message": "Logged out"}


@router.get("/me", response_model=UserOut)
def me_endpoint(current_user: User = Depends(get_current_user)):
    return current_user


# ── Onboarding ────────────────────────────────────────────────────────────────

@router.get("/student/onboarding", response_model=OnboardingStatusResponse)
def onboarding_status_endpoint(user: User = Depends(require_student), db: Session = Depends(get_db)):
    student = students.get_student_for_user(db, user)
    return {
        "has_completed_onboarding": bool(student and student.has_completed_onboarding),
        "student": student,
    }


@router.post("/student/onboarding", response_model=OnboardingResponse, status_code=201)
def onboarding_endpoint(
    payload: OnboardingRequest,
    request: Request,
    user: User = Depends(require_student),
    db: Session = Depends(get_db),
):
    student = students.complete_onboarding(db, user, payload, request)
    return {"student": student, "batch_id": student.batch_id}


# ── Profile ───────────────────────────────────────────────────────────────────

@router.get("/student/profile", response_model=StudentResponse)
def get_profile_endpoint(student: Student = Depends(get_current_student)):
    return student


@router.put("/student/profile", response_model=StudentResponse)
def update_profile_endpoint(
    payload: ProfileUpdateRequest,
    request: Request,
    student: Student = Depends(get_current_student),
    db: Session = Depends(get_db),
):
    return students.update_profile(db, student, payload, request)


@router.get("/student/form-visibility", response_model=StudentFormVisibilityResponse)
def student_form_visibility_endpoint(student: Student = Depends(get_current_student)):
    return student_visibility(student)


# ── Passport photo ────────────────────────────────────────────────────────────

@router.get("/student/passport-photo")
def get_passport_photo_endpoint(
    student_id: int | None = Query(None, description="Admins only: whose photo to fetch"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if user.role == UserRole.ADMIN:
        if student_id is None:
            raise HTTPException(status_code=400, detail="student_id is required.")
        student = students.get_student(db, student_id)
    else:
        student = students.get_student_for_user(db, user)
        if student is None:
            raise HTTPException(status_code=404, detail="Student profile not found.")
    if not student.passport_photo:
        raise HTTPException(status_code=404, detail="Passport photo not found.")
    return FileResponse(student.passport_photo)


@router.post("/student/passport-photo", response_model=StudentResponse)
def upload_passport_photo_endpoint(
    request: Request,
    file: UploadFile = File(...),
    student: Student = Depends(get_current_student),
    db: Session = Depends(get_db),
):
    data = _read_upload(file, settings.passport_photo_max_size)
    return students.upload_passport_photo(db, student, data, file.filename, file.content_type, request)


@router.delete("/student/passport-photo", response_model=StudentResponse)
def delete_passport_photo_endpoint(
    request: Request,
    student: Student = Depends(get_current_student),
    db: Session = Depends(get_db),
):
    return students.delete_passport_photo(db, student, request)


# ── Work experience & references ──────────────────────────────────────────────

@router.get("/student/work-experiences", response_model=list[WorkExperienceResponse])
def list_work_experiences_endpoint(student: Student = Depends(get_current_student)):
    return student.work_experiences


@router.post("/student/work-experiences", response_model=WorkExperienceResponse, status_code=201)
def add_work_experience_endpoint(
    payload: WorkExperienceCreate,
    student: Student = Depends(get_current_student),
    db: Session = Depends(get_db),
):
    return students.add_work_experience(db, student, payload)


@router.delete("/student/work-experiences/{work_id}", status_code=204)
def delete_work_experience_endpoint(
    work_id: int,
    student: Student = Depends(get_current_student),
    db: Session = Depends(get_db),
):
    students.delete_work_experience(db, student, work_id)


@router.get("/student/references", response_model=list[ReferenceResponse])
def list_references_endpoint(student: Student = Depends(get_current_student)):
    return student.references


@router.post("/student/references", response_model=ReferenceResponse, status_code=201)
def add_reference_endpoint(
    payload: ReferenceCreate,
    student: Student = Depends(get_current_student),
    db: Session = Depends(get_db),
):
    return students.add_reference(db, student, payload)


@router.delete("/student/references/{reference_id}", status_code=204)
def delete_reference_endpoint(
    reference_id: int,
    student: Student = Depends(get_current_student),
    db: Session = Depends(get_db),
):
    students.delete_reference(db, student, reference_id)


# ── Student resources & tasks ─────────────────────────────────────────────────

@router.get("/student/batch-resources", response_model=list[ResourceResponse])
def batch_resources_endpoint(student: Student = Depends(get_current_student), db: Session = Depends(get_db)):
    return resources.list_batch_resources(db, student)


@router.get("/student/tasks", response_model=list[StudentTaskOut])
def student_tasks_endpoint(student: Student = Depends(get_current_student), db: Session = Depends(get_db)):
    return tasks.list_student_tasks(db, student)


@router.patch("/student/tasks/{assignment_id}", response_model=StudentTaskOut)
def update_task_status_endpoint(
    assignment_id: int,
    payload: TaskStatusUpdateRequest,
    student: Student = Depends(get_current_student),
    db: Session = Depends(get_db),
):
    assignment = tasks.update_task_status(db, student, assignment_id, payload.status)
    return tasks.student_task_view(assignment)


# ── Documents ─────────────────────────────────────────────────────────────────

@router.get("/documents", response_model=list[DocumentResponse])
def list_documents_endpoint(
    student_id: int | None = Query(None, description="Admins only: filter by student"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return documents.list_documents(db, user, student_id)


@router.post("/documents", response_model=DocumentUploadResponse, status_code=201)
def upload_document_endpoint(
    request: Request,
    type: DocumentType = Form(...),
    other_source_index: int | None = Form(None),
    file: UploadFile = File(...),
    student: Student = Depends(get_current_student),
    db: Session = Depends(get_db),
):
    data = _read_upload(file, settings.max_file_size)
    document, replaced_id = documents.upload_document(
        db,
        student,
        type,
        data,
        file.filename,
        file.content_type,
        other_source_index=other_source_index,
        request=request,
    )
    return {
        "document": document,
        "replaced_document_id": replaced_id,
        "profile_completion": student.profile_completion,
    }


@router.get("/documents/{document_id}")
def download_document_endpoint(
    document_id: int,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    document = documents.download_document(db, user, document_id, request)
    return FileResponse(
        document.stored_path,
        media_type=document.mime_type,
        filename=storage.sanitize_filename(document.file_name),
    )


@router.delete("/documents/{document_id}", status_code=204)
def delete_document_endpoint(
    document_id: int,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    documents.delete_document(db, user, document_id, request)


# ── Resources ─────────────────────────────────────────────────────────────────

@router.get("/resources", response_model=list[ResourceResponse])
def list_resources_endpoint(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return resources.list_resources(db, user)


@router.post("/resources", response_model=ResourceResponse, status_code=201)
def upload_resource_endpoint(
    request: Request,
    background_tasks: BackgroundTasks,
    title: str = Form(..., min_length=1),
    description: str | None = Form(None),
    visibility_type: VisibilityType = Form(VisibilityType.ALL),
    program: Program | None = Form(None),
    batch_id: int | None = Form(None),
    file: UploadFile = File(...),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    data = _read_upload(file, settings.max_file_size)
    return resources.create_resource(
        db,
        admin,
        title,
        description,
        visibility_type,
        program,
        batch_id,
        data,
        file.filename,
        file.content_type,
        background_tasks=background_tasks,
        request=request,
    )


@router.get("/resources/{resource_id}")
def download_resource_endpoint(
    resource_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    resource = resources.get_resource_for_user(db, user, resource_id)
    return FileResponse(
        resource.stored_path,
        media_type=resource.mime_type,
        filename=storage.sanitize_filename(resource.file_name),
    )


@router.delete("/resources/{resource_id}", status_code=204)
def delete_resource_endpoint(
    resource_id: int,
    request: Request,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    resources.delete_resource(db, admin, resource_id, request)
