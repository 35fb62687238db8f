import os

# Must be set before student_erp.core.database builds its engine
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["EMAIL_BACKEND"] = "console"

from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from pypdf import PdfWriter
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from student_erp.core.config import settings
from student_erp.core.database import get_db
from student_erp.core.security import create_access_token, hash_password
from student_erp.main import app
from student_erp.models.base import Base
from student_erp.models.enums import Program, UserRole
from student_erp.models.student import Student
from student_erp.models.user import User
from student_erp.services import email as email_service

PDF_BYTES = b"%PDF-1.4\n%test document\n%%EOF\n"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def one_page_pdf() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=595, height=842)
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def make_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite defers BEGIN on its own, which breaks SAVEPOINT; issue it explicitly
    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def engine():
    engine = make_engine()
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "upload_dir", path)
    return path


@pytest.fixture
def sent_emails(monkeypatch):
    """Record outgoing mail instead of delivering it."""
    sent = []

    def _record(recipients, subject, body):
        sent.append({"recipients": list(recipients), "subject": subject, "body": body})
        return {"sent": len(recipients), "failed": 0}

    monkeypatch.setattr(email_service, "send_email", _record)
    return sent


@pytest.fixture
def client(db, sent_emails):
    def _get_db():
        try:
            yield db
        finally:
            db.rollback()

    app.dependency_overrides[get_db] = _get_db
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


def create_user(db, email, password="password123", role=UserRole.STUDENT):
    user = User(email=email, hashed_password=hash_password(password), role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role.value)}"}


@pytest.fixture
def admin_user(db):
    return create_user(db, "admin@example.com", role=UserRole.ADMIN)


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest.fixture
def student_user(db):
    return create_user(db, "student@example.com")


@pytest.fixture
def student_headers(student_user):
    return auth_headers(student_user)


@pytest.fixture
def onboarded(client, student_headers, db):
    """A student onboarded into BS-2025 through the API."""
    response = client.post(
        "/api/student/onboarding",
        json={"first_name": "Asha", "last_name": "Rao", "program": "BS", "intake_year": 2025},
        headers=student_headers,
    )
    assert response.status_code == 201, response.text
    return db.get(Student, response.json()["student"]["id"])


def onboard_student(client, db, email, program=Program.BS, intake_year=2025, first_name="Test"):
    user = create_user(db, email)
    headers = auth_headers(user)
    response = client.post(
        "/api/student/onboarding",
        json={"first_name": first_name, "last_name": "Student", "program": program.value, "intake_year": intake_year},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["student"], headers
