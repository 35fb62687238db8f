import html
import logging
import re
import smtplib
from collections.abc import Callable
from datetime import datetime
from email.message import EmailMessage

from fastapi import BackgroundTasks, HTTPException, Request
from sqlalchemy.orm import Session

from student_erp.core.config import settings
from student_erp.core.database import SessionLocal
from student_erp.models.enums import EmailStatus
from student_erp.models.log import EmailLog
from student_erp.models.student import Student
from student_erp.models.user import User
from student_erp.schemas.email import BulkEmailRequest
from student_erp.services.audit import client_ip, record_audit

logger = logging.getLogger(__name__)

_SIGNATURE = "<p>Best regards,<br/>ERP Team</p>"


def _html_to_text(body: str) -> str:
    return re.sub(r"<[^>]*>", "", body).strip()


def _deliver(recipient: str, subject: str, body: str) -> None:
    if settings.email_backend == "console":
        logger.info("Email to %s | %s\n%s", recipient, subject, _html_to_text(body))
        return

    message = EmailMessage()
    message["From"] = settings.email_from
    message["To"] = recipient
    message["Subject"] = subject
    message.set_content(_html_to_text(body))
    message.add_alternative(body, subtype="html")

    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=30) as server:
        if settings.smtp_use_tls:
            server.starttls()
        if settings.smtp_user:
            server.login(settings.smtp_user, settings.smtp_password)
        server.send_message(message)


def send_email(recipients: list[str], subject: str, body: str) -> dict[str, int]:
    """Send one message per recipient, logging each attempt in ``email_logs``.

    Runs outside the request (as a background task) so it opens its own
    session. A failed delivery marks that log row FAILED and moves on.
    """
    sent = failed = 0
    db = SessionLocal()
    try:
        for recipient in recipients:
            log = EmailLog(recipient=recipient, subject=subject, body=body, status=EmailStatus.PENDING)
            db.add(log)
            db.commit()
            try:
                _deliver(recipient, subject, body)
            except (smtplib.SMTPException, OSError) as exc:
                logger.error("Email to %s failed: %s", recipient, exc)
                log.status = EmailStatus.FAILED
                log.error = str(exc)
                failed += 1
            else:
                log.status = EmailStatus.SENT
                log.sent_at = datetime.utcnow()
                sent += 1
            db.commit()
    finally:
        db.close()
    logger.info("Email '%s': %d sent, %d failed", subject, sent, failed)
    return {"sent": sent, "failed": failed}


# ── Templates ─────────────────────────────────────────────────────────────────

def bulk_announcement_template(subject: str, message: str) -> tuple[str, str]:
    body = f"<h2>{html.escape(subject)}</h2><div>{message}</div><br/>{_SIGNATURE}"
    return subject, body


def task_assigned_template(student_name: str, task_title: str, due_date: datetime | None = None) -> tuple[str, str]:
    due = f"<p>Due date: {due_date:%d %b %Y}</p>" if due_date else ""
    body = (
        f"<h2>Hello {html.escape(student_name)},</h2>"
        f"<p>A new task has been assigned to you: <strong>{html.escape(task_title)}</strong></p>"
        f"{due}<p>Please log in to your account to view task details.</p>{_SIGNATURE}"
    )
    return "New Task Assigned", body


def resource_uploaded_template(student_name: str, resource_title: str) -> tuple[str, str]:
    body = (
        f"<h2>Hello {html.escape(student_name)},</h2>"
        f"<p>A new resource has been uploaded: <strong>{html.escape(resource_title)}</strong></p>"
        f"<p>Please log in to your account to access the resource.</p>{_SIGNATURE}"
    )
    return "New Resource Available", body


def notify_students(
    recipients: list[tuple[str, str]],
    template: Callable[..., tuple[str, str]],
    *args,
) -> None:
    """Send a personalised template to each ``(email, first_name)`` pair."""
    for email, name in recipients:
        subject, body = template(name, *args)
        send_email([email], subject, body)


# ── Bulk email ────────────────────────────────────────────────────────────────

def bulk_email_recipients(db: Session, payload: BulkEmailRequest) -> list[str]:
    query = (
        db.query(User.email)
        .join(Student, Student.user_id == User.id)
        .filter(User.is_active.is_(True))
    )
    if payload.recipient_type == "BATCH":
        query = query.filter(Student.batch_id == payload.batch_id)
    elif payload.recipient_type == "PROGRAM":
        query = query.filter(Student.program == payload.program)
    return sorted({email for (email,) in query.all()})


def queue_bulk_email(
    db: Session,
    admin: User,
    payload: BulkEmailRequest,
    background_tasks: BackgroundTasks,
    request: Request | None = None,
) -> int:
    emails = bulk_email_recipients(db, payload)
    if not emails:
        raise HTTPException(status_code=400, detail="No recipients found.")

    subject, body = bulk_announcement_template(payload.subject, payload.message)
    background_tasks.add_task(send_email, emails, subject, body)
    record_audit(
        db,
        admin.id,
        "SEND_BULK_EMAIL",
        "Email",
        details={"recipient_type": payload.recipient_type, "recipient_count": len(emails)},
        ip_address=client_ip(request),
    )
    db.commit()
    logger.info("Queued bulk email '%s' for %d recipients", payload.subject, len(emails))
    return len(emails)
