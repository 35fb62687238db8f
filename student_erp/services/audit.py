from fastapi import Request
from sqlalchemy.orm import Session

from student_erp.models.log import AuditLog, DocumentAccessLog


def client_ip(request: Request | None) -> str | None:
    if request is None:
        return None
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def record_audit(
    db: Session,
    user_id: int | None,
    action: str,
    entity: str,
    entity_id: int | str | None = None,
    details: dict | None = None,
    ip_address: str | None = None,
) -> AuditLog:
    """Stage an audit row; it is committed with the caller's transaction."""
    entry = AuditLog(
        user_id=user_id,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        details=details,
        ip_address=ip_address,
    )
    db.add(entry)
    return entry


def record_document_access(
    db: Session,
    document_id: int,
    accessed_by: str,
    action: str = "DOWNLOAD",
    ip_address: str | None = None,
) -> DocumentAccessLog:
    entry = DocumentAccessLog(
        document_id=document_id,
        accessed_by=accessed_by,
        action=action,
        ip_address=ip_address,
    )
    db.add(entry)
    return entry
