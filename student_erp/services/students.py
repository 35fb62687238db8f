import logging
import math
from datetime import datetime

from fastapi import HTTPException, Request
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from student_erp.core.config import settings
from student_erp.models.batch import Batch
from student_erp.models.enums import Program
from student_erp.models.student import Student
from student_erp.models.user import User
from student_erp.models.work import Reference, WorkExperience
from student_erp.schemas.student import (
    AdminStudentUpdateRequest,
    OnboardingRequest,
    ProfileUpdateRequest,
)
from student_erp.schemas.work import ReferenceCreate, WorkExperienceCreate
from student_erp.services import storage
from student_erp.services.audit import client_ip, record_audit
from student_erp.services.batches import BatchAssignmentError, assign_student_to_batch
from student_erp.services.profile_completion import calculate_profile_completion, profile_from_student

logger = logging.getLogger(__name__)

# NOT NULL columns that an update may not clear
_REQUIRED_FIELDS = {"first_name", "last_name", "program", "intake_year"}


def get_visibility_mask(student: Student) -> dict[str, bool] | None:
    if student.batch is None or student.batch.form_visibility is None:
        return None
    return student.batch.form_visibility.as_mask()


def refresh_profile_completion(db: Session, student: Student) -> int:
    """Recompute ``student.profile_completion`` from its current rows."""
    db.flush()
    db.expire(student, ["documents", "work_experiences", "batch"])
    student.profile_completion = calculate_profile_completion(
        profile_from_student(student),
        get_visibility_mask(student),
    )
    return student.profile_completion


def _apply_fields(student: Student, values: dict) -> None:
    for field, value in values.items():
        if value is None and field in _REQUIRED_FIELDS:
            continue
        setattr(student, field, value)
    student.updated_at = datetime.utcnow()


# ── Onboarding & self-service profile ─────────────────────────────────────────

def complete_onboarding(
    db: Session,
    user: User,
    payload: OnboardingRequest,
    request: Request | None = None,
) -> Student:
    if get_student_for_user(db, user) is not None:
        raise HTTPException(status_code=400, detail="Onboarding already completed.")

    try:
        batch_id = assign_student_to_batch(db, payload.program, payload.intake_year)
    except BatchAssignmentError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    values = payload.model_dump(exclude_none=True)
    values.setdefault("email", user.email)
    student = Student(
        user_id=user.id,
        batch_id=batch_id,
        has_completed_onboarding=True,
        **values,
    )
    # A concurrent submission for the same user may have inserted first
    try:
        with db.begin_nested():
            db.add(student)
    except IntegrityError:
        logger.info("Duplicate onboarding for user %s rejected", user.id)
        raise HTTPException(status_code=400, detail="Onboarding already completed.") from None
    refresh_profile_completion(db, student)
    record_audit(db, user.id, "COMPLETE_ONBOARDING", "Student", student.id, ip_address=client_ip(request))
    db.commit()
    db.refresh(student)
    logger.info("Student %s onboarded into batch %s", student.id, batch_id)
    return student


def get_student_for_user(db: Session, user: User) -> Student | None:
    return (
        db.query(Student)
        .options(joinedload(Student.batch))
        .filter(Student.user_id == user.id)
        .first()
    )


def update_profile(
    db: Session,
    student: Student,
    payload: ProfileUpdateRequest,
    request: Request | None = None,
) -> Student:
    values = payload.model_dump(mode="json", exclude_unset=True, include={"travel_history"})
    values.update(payload.model_dump(exclude_unset=True, exclude={"travel_history"}))
    _apply_fields(student, values)
    refresh_profile_completion(db, student)
    record_audit(db, student.user_id, "UPDATE_PROFILE", "Student", student.id, ip_address=client_ip(request))
    db.commit()
    db.refresh(student)
    return student


# ── Passport photo ────────────────────────────────────────────────────────────

def upload_passport_photo(
    db: Session,
    student: Student,
    data: bytes,
    filename: str | None,
    content_type: str | None,
    request: Request | None = None,
) -> Student:
    try:
        stored = storage.save_file(
            data,
            filename,
            content_type,
            allowed_types=storage.IMAGE_TYPES,
            max_size=settings.passport_photo_max_size,
            scope=f"students/{student.id}/photo",
        )
    except storage.StorageError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    previous = student.passport_photo
    student.passport_photo = stored.stored_path
    refresh_profile_completion(db, student)
    record_audit(db, student.user_id, "UPLOAD_PASSPORT_PHOTO", "Student", student.id, ip_address=client_ip(request))
    db.commit()
    if previous:
        storage.delete_file(previous)
    db.refresh(student)
    return student


def delete_passport_photo(db: Session, student: Student, request: Request | None = None) -> Student:
    if not student.passport_photo:
        raise HTTPException(status_code=404, detail="Passport photo not found.")
    previous = student.passport_photo
    student.passport_photo = None
    refresh_profile_completion(db, student)
    record_audit(db, student.user_id, "DELETE_PASSPORT_PHOTO", "Student", student.id, ip_address=client_ip(request))
    db.commit()
    storage.delete_file(previous)
    db.refresh(student)
    return student


# ── Work experience & references ──────────────────────────────────────────────

def add_work_experience(db: Session, student: Student, payload: WorkExperienceCreate) -> WorkExperience:
    work = WorkExperience(student_id=student.id, **payload.model_dump())
    db.add(work)
    if student.has_work_experience is None:
        student.has_work_experience = True
    refresh_profile_completion(db, student)
    db.commit()
    db.refresh(work)
    return work


def delete_work_experience(db: Session, student: Student, work_id: int) -> None:
    work = (
        db.query(WorkExperience)
        .filter(WorkExperience.id == work_id, WorkExperience.student_id == student.id)
        .first()
    )
    if work is None:
        raise HTTPException(status_code=404, detail="Work experience not found.")
    db.delete(work)
    refresh_profile_completion(db, student)
    db.commit()


def add_reference(db: Session, student: Student, payload: ReferenceCreate) -> Reference:
    reference = Reference(student_id=student.id, **payload.model_dump())
    db.add(reference)
    db.commit()
    db.refresh(reference)
    return reference


def delete_reference(db: Session, student: Student, reference_id: int) -> None:
    reference = (
        db.query(Reference)
        .filter(Reference.id == reference_id, Reference.student_id == student.id)
        .first()
    )
    if reference is None:
        raise HTTPException(status_code=404, detail="Reference not found.")
    db.delete(reference)
    db.commit()


# ── Admin ─────────────────────────────────────────────────────────────────────

def list_students(
    db: Session,
    page: int = 1,
    limit: int = 50,
    batch_id: int | None = None,
    program: Program | None = None,
    search: str | None = None,
) -> dict:
    query = db.query(Student).join(User, Student.user_id == User.id).options(joinedload(Student.batch))
    if batch_id is not None:
        query = query.filter(Student.batch_id == batch_id)
    if program is not None:
        query = query.filter(Student.program == program)
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Student.first_name.ilike(pattern),
                Student.last_name.ilike(pattern),
                User.email.ilike(pattern),
            )
        )

    total = query.count()
    students = (
        query.order_by(Student.created_at.desc(), Student.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "students": students,
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": math.ceil(total / limit) if limit else 0,
    }


def get_student(db: Session, student_id: int) -> Student:
    student = db.get(Student, student_id)
    if student is None:
        raise HTTPException(status_code=404, detail="Student not found.")
    return student


def _get_batch_or_404(db: Session, batch_id: int) -> Batch:
    batch = db.get(Batch, batch_id)
    if batch is None:
        raise HTTPException(status_code=404, detail="Batch not found.")
    return batch


def admin_update_student(
    db: Session,
    admin: User,
    student_id: int,
    payload: AdminStudentUpdateRequest,
    request: Request | None = None,
) -> Student:
    student = get_student(db, student_id)
    values = payload.model_dump(mode="json", exclude_unset=True, include={"travel_history"})
    values.update(payload.model_dump(exclude_unset=True, exclude={"travel_history"}))

    is_active = values.pop("is_active", None)
    if is_active is not None:
        student.user.is_active = is_active

    email = values.get("email")
    if email and email != student.user.email:
        taken = db.query(User).filter(User.email == email, User.id != student.user_id).first()
        if taken:
            raise HTTPException(status_code=400, detail="Email already in use.")
        student.user.email = email

    if values.get("batch_id") is not None:
        _get_batch_or_404(db, values["batch_id"])

    _apply_fields(student, values)
    refresh_profile_completion(db, student)
    record_audit(db, admin.id, "UPDATE", "Student", student.id, ip_address=client_ip(request))
    db.commit()
    db.refresh(student)
    return student


def delete_student(db: Session, admin: User, student_id: int, request: Request | None = None) -> None:
    student = get_student(db, student_id)
    paths = [doc.stored_path for doc in student.documents]
    if student.passport_photo:
        paths.append(student.passport_photo)

    record_audit(
        db,
        admin.id,
        "DELETE",
        "Student",
        student.id,
        details={"name": f"{student.first_name} {student.last_name}"},
        ip_address=client_ip(request),
    )
    # Deleting the user cascades to the student and its child rows
    db.delete(student.user)
    db.commit()
    for path in paths:
        storage.delete_file(path)
    logger.info("Admin %s deleted student %s", admin.id, student_id)


def assign_batch(
    db: Session,
    admin: User,
    student_id: int,
    batch_id: int,
    request: Request | None = None,
) -> Student:
    student = get_student(db, student_id)
    batch = _get_batch_or_404(db, batch_id)
    old_batch_id = student.batch_id
    student.batch_id = batch.id
    refresh_profile_completion(db, student)
    record_audit(
        db,
        admin.id,
        "ASSIGN_BATCH",
        "Student",
        student.id,
        details={"old_batch_id": old_batch_id, "new_batch_id": batch.id},
        ip_address=client_ip(request),
    )
    db.commit()
    db.refresh(student)
    return student


def remove_from_batch(db: Session, admin: User, student_id: int, request: Request | None = None) -> Student:
    student = get_student(db, student_id)
    if student.batch_id is None:
        raise HTTPException(status_code=400, detail="Student is not assigned to any batch.")
    old_batch = student.batch
    student.batch_id = None
    refresh_profile_completion(db, student)
    record_audit(
        db,
        admin.id,
        "REMOVE_FROM_BATCH",
        "Student",
        student.id,
        details={"old_batch_id": old_batch.id, "old_batch_name": old_batch.name},
        ip_address=client_ip(request),
    )
    db.commit()
    db.refresh(student)
    return student
