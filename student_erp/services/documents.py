import logging

from fastapi import HTTPException, Request
from sqlalchemy.orm import Session

from student_erp.models.document import Document
from student_erp.models.enums import DocumentType, UserRole
from student_erp.models.student import Student
from student_erp.models.user import User
from student_erp.services import storage
from student_erp.services.audit import client_ip, record_audit, record_document_access
from student_erp.services.students import refresh_profile_completion

logger = logging.getLogger(__name__)


def upload_document(
    db: Session,
    student: Student,
    doc_type: DocumentType,
    data: bytes,
    filename: str | None,
    content_type: str | None,
    other_source_index: int | None = None,
    request: Request | None = None,
) -> tuple[Document, int | None]:
    """Store a document, replacing any existing one of the same type.

    Returns the new document and the id of the one it replaced, if any.
    """
    if other_source_index is not None and not doc_type.value.startswith("OTHER_SOURCE_"):
        raise HTTPException(
            status_code=400,
            detail="other_source_index only applies to OTHER_SOURCE_* documents.",
        )
    try:
        stored = storage.save_file(
            data,
            filename,
            content_type,
            allowed_types=storage.PDF_TYPES,
            scope=f"students/{student.id}",
        )
    except storage.StorageError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    existing = (
        db.query(Document)
        .filter(
            Document.student_id == student.id,
            Document.type == doc_type,
            Document.other_source_index.is_(None)
            if other_source_index is None
            else Document.other_source_index == other_source_index,
        )
        .all()
    )
    replaced_paths = [doc.stored_path for doc in existing]
    replaced_id = existing[0].id if existing else None
    for doc in existing:
        db.delete(doc)

    document = Document(
        student_id=student.id,
        type=doc_type,
        file_name=stored.file_name,
        stored_path=stored.stored_path,
        file_size=stored.file_size,
        mime_type=stored.mime_type,
        page_count=storage.count_pdf_pages(data),
        other_source_index=other_source_index,
    )
    db.add(document)
    refresh_profile_completion(db, student)
    record_audit(
        db,
        student.user_id,
        "UPLOAD_DOCUMENT",
        "Document",
        document.id,
        details={"type": doc_type.value, "file_name": stored.file_name, "replaced": replaced_id},
        ip_address=client_ip(request),
    )
    db.commit()
    db.refresh(document)

    for path in replaced_paths:
        storage.delete_file(path)
    if replaced_id:
        logger.info("Document %s replaced %s for student %s", document.id, replaced_id, student.id)
    return document, replaced_id


def list_documents(db: Session, user: User, student_id: int | None = None) -> list[Document]:
    query = db.query(Document)
    if user.role == UserRole.STUDENT:
        student = db.query(Student).filter(Student.user_id == user.id).first()
        if student is None:
            return []
        query = query.filter(Document.student_id == student.id)
    elif student_id is not None:
        query = query.filter(Document.student_id == student_id)
    return query.order_by(Document.uploaded_at.desc(), Document.id.desc()).all()


def get_document_for_user(db: Session, user: User, document_id: int) -> Document:
    document = db.get(Document, document_id)
    if document is None:
        raise HTTPException(status_code=404, detail="Document not found.")
    if user.role == UserRole.STUDENT and document.student.user_id != user.id:
        raise HTTPException(status_code=403, detail="Forbidden.")
    return document


def download_document(db: Session, user: User, document_id: int, request: Request | None = None) -> Document:
    document = get_document_for_user(db, user, document_id)
    record_document_access(db, document.id, user.email, "DOWNLOAD", ip_address=client_ip(request))
    db.commit()
    return document


def delete_document(db: Session, user: User, document_id: int, request: Request | None = None) -> None:
    document = get_document_for_user(db, user, document_id)
    student = document.student
    stored_path = document.stored_path
    record_audit(
        db,
        user.id,
        "DELETE_DOCUMENT",
        "Document",
        document.id,
        details={"type": document.type.value},
        ip_address=client_ip(request),
    )
    db.delete(document)
    refresh_profile_completion(db, student)
    db.commit()
    storage.delete_file(stored_path)
