import logging

from fastapi import BackgroundTasks, HTTPException, Request
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from student_erp.models.batch import Batch
from student_erp.models.enums import Program, UserRole, VisibilityType
from student_erp.models.resource import Resource
from student_erp.models.student import Student
from student_erp.models.user import User
from student_erp.services import storage
from student_erp.services.audit import client_ip, record_audit
from student_erp.services.email import notify_students, resource_uploaded_template

logger = logging.getLogger(__name__)


def create_resource(
    db: Session,
    admin: User,
    title: str,
    description: str | None,
    visibility_type: VisibilityType,
    program: Program | None,
    batch_id: int | None,
    data: bytes,
    filename: str | None,
    content_type: str | None,
    background_tasks: BackgroundTasks | None = None,
    request: Request | None = None,
) -> Resource:
    if visibility_type == VisibilityType.BATCH:
        if batch_id is None:
            raise HTTPException(status_code=400, detail="batch_id required for batch visibility.")
        if db.get(Batch, batch_id) is None:
            raise HTTPException(status_code=404, detail="Batch not found.")
    if visibility_type == VisibilityType.PROGRAM and program is None:
        raise HTTPException(status_code=400, detail="program required for program visibility.")

    try:
        stored = storage.save_file(
            data,
            filename,
            content_type,
            allowed_types=storage.RESOURCE_TYPES,
            scope="resources",
        )
    except storage.StorageError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    resource = Resource(
        title=title,
        description=description,
        file_name=stored.file_name,
        stored_path=stored.stored_path,
        file_size=stored.file_size,
        mime_type=stored.mime_type,
        visibility_type=visibility_type,
        program=program if visibility_type == VisibilityType.PROGRAM else None,
        batch_id=batch_id if visibility_type == VisibilityType.BATCH else None,
    )
    db.add(resource)
    db.flush()
    record_audit(
        db,
        admin.id,
        "UPLOAD_RESOURCE",
        "Resource",
        resource.id,
        details={"visibility_type": visibility_type.value, "title": title},
        ip_address=client_ip(request),
    )
    db.commit()
    db.refresh(resource)
    logger.info("Resource %s uploaded (%s)", resource.id, visibility_type.value)

    if background_tasks is not None:
        recipients = [s for s in _audience(db, resource) if s.email]
        if recipients:
            background_tasks.add_task(
                notify_students,
                [(s.email, s.first_name) for s in recipients],
                resource_uploaded_template,
                resource.title,
            )
    return resource


def _audience(db: Session, resource: Resource) -> list[Student]:
    query = db.query(Student)
    if resource.visibility_type == VisibilityType.PROGRAM:
        query = query.filter(Student.program == resource.program)
    elif resource.visibility_type == VisibilityType.BATCH:
        query = query.filter(Student.batch_id == resource.batch_id)
    return query.all()


def _visible_to(student: Student):
    return or_(
        Resource.visibility_type == VisibilityType.ALL,
        and_(Resource.visibility_type == VisibilityType.PROGRAM, Resource.program == student.program),
        and_(
            Resource.visibility_type == VisibilityType.BATCH,
            Resource.batch_id.isnot(None),
            Resource.batch_id == student.batch_id,
        ),
    )


def can_access(resource: Resource, student: Student) -> bool:
    if resource.visibility_type == VisibilityType.ALL:
        return True
    if resource.visibility_type == VisibilityType.PROGRAM:
        return resource.program == student.program
    return resource.batch_id is not None and resource.batch_id == student.batch_id


def list_resources(db: Session, user: User) -> list[Resource]:
    query = db.query(Resource)
    if user.role != UserRole.ADMIN:
        student = db.query(Student).filter(Student.user_id == user.id).first()
        if student is None:
            return []
        query = query.filter(_visible_to(student))
    return query.order_by(Resource.uploaded_at.desc(), Resource.id.desc()).all()


def list_batch_resources(db: Session, student: Student) -> list[Resource]:
    if student.batch_id is None:
        return []
    return (
        db.query(Resource)
        .filter(Resource.batch_id == student.batch_id)
        .order_by(Resource.uploaded_at.desc(), Resource.id.desc())
        .all()
    )


def get_resource_for_user(db: Session, user: User, resource_id: int) -> Resource:
    resource = db.get(Resource, resource_id)
    if resource is None:
        raise HTTPException(status_code=404, detail="Resource not found.")
    if user.role != UserRole.ADMIN:
        student = db.query(Student).filter(Student.user_id == user.id).first()
        if student is None or not can_access(resource, student):
            raise HTTPException(status_code=403, detail="Forbidden.")
    return resource


def delete_resource(db: Session, admin: User, resource_id: int, request: Request | None = None) -> None:
    resource = db.get(Resource, resource_id)
    if resource is None:
        raise HTTPException(status_code=404, detail="Resource not found.")
    stored_path = resource.stored_path
    record_audit(db, admin.id, "DELETE_RESOURCE", "Resource", resource.id, ip_address=client_ip(request))
    db.delete(resource)
    db.commit()
    storage.delete_file(stored_path)
