import smtplib
from datetime import datetime

import pytest
from sqlalchemy.orm import sessionmaker

from student_erp.core.config import settings
from student_erp.models.enums import EmailStatus
from student_erp.models.log import EmailLog
from student_erp.services import email as email_service


@pytest.fixture
def email_db(engine, monkeypatch):
    monkeypatch.setattr(email_service, "SessionLocal", sessionmaker(bind=engine, autoflush=False))
    monkeypatch.setattr(settings, "email_backend", "console")


def test_console_backend_logs_and_records(email_db, db, caplog):
    caplog.set_level("INFO", logger="student_erp.services.email")
    result = email_service.send_email(["a@example.com", "b@example.com"], "Hello", "<p>Hi <b>there</b></p>")

    assert result == {"sent": 2, "failed": 0}
    logs = db.query(EmailLog).order_by(EmailLog.id).all()
    assert [log.recipient for log in logs] == ["a@example.com", "b@example.com"]
    assert all(log.status == EmailStatus.SENT and log.sent_at for log in logs)
    assert "Hi there" in caplog.text


def test_failed_delivery_is_recorded_not_raised(email_db, db, monkeypatch):
    def refuse(recipient, subject, body):
        if recipient == "bad@example.com":
            raise smtplib.SMTPRecipientsRefused({recipient: (550, b"no such user")})

    monkeypatch.setattr(email_service, "_deliver", refuse)
    result = email_service.send_email(["bad@example.com", "ok@example.com"], "Hello", "Hi")

    assert result == {"sent": 1, "failed": 1}
    failed = db.query(EmailLog).filter(EmailLog.status == EmailStatus.FAILED).one()
    assert failed.recipient == "bad@example.com"
    assert failed.error


def test_smtp_backend_sends_multipart_message(monkeypatch):
    sent = []

    class FakeSMTP:
        def __init__(self, host, port, timeout=None):
            sent.append(("connect", host, port))

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

        def starttls(self):
            sent.append(("starttls",))

        def login(self, user, password):
            sent.append(("login", user))

        def send_message(self, message):
            sent.append(("send", message["To"], message.get_body(("plain",)).get_content().strip()))

    monkeypatch.setattr(settings, "email_backend", "smtp")
    monkeypatch.setattr(settings, "smtp_host", "smtp.example.com")
    monkeypatch.setattr(settings, "smtp_user", "mailer")
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)

    email_service._deliver("a@example.com", "Subject", "<p>Body</p>")

    assert sent == [
        ("connect", "smtp.example.com", 587),
        ("starttls",),
        ("login", "mailer"),
        ("send", "a@example.com", "Body"),
    ]


def test_task_template_includes_due_date():
    subject, body = email_service.task_assigned_template("Asha", "Upload <SOP>", datetime(2025, 7, 1))
    assert subject == "New Task Assigned"
    assert "Upload &lt;SOP&gt;" in body
    assert "01 Jul 2025" in body


def test_notify_students_personalises(monkeypatch):
    calls = []
    monkeypatch.setattr(email_service, "send_email", lambda r, s, b: calls.append((r, s, b)))
    email_service.notify_students(
        [("a@example.com", "Asha"), ("b@example.com", "Bina")],
        email_service.resource_uploaded_template,
        "Visa guide",
    )
    assert [c[0] for c in calls] == [["a@example.com"], ["b@example.com"]]
    assert "Hello Bina" in calls[1][2]
