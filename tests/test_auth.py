from student_erp.services import batches
from tests.conftest import auth_headers, create_user


def test_register_sets_cookie_and_returns_token(client):
    response = client.post("/api/auth/register", json={"email": "new@example.com", "password": "password123"})

    assert response.status_code == 201
    body = response.json()
    assert body["role"] == "STUDENT"
    assert body["has_completed_onboarding"] is False
    assert "auth-token" in response.cookies


def test_register_duplicate_email(client):
    payload = {"email": "dup@example.com", "password": "password123"}
    assert client.post("/api/auth/register", json=payload).status_code == 201
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 400


def test_register_validation_error_shape(client):
    response = client.post("/api/auth/register", json={"email": "not-an-email", "password": "short"})

    assert response.status_code == 400
    body = response.json()
    assert body["detail"] == "Invalid input"
    assert {tuple(err["loc"]) for err in body["errors"]} >= {("body", "email"), ("body", "password")}


def test_login_and_cookie_session(client, student_user):
    response = client.post("/api/auth/login", json={"email": "student@example.com", "password": "password123"})
    assert response.status_code == 200

    # TestClient keeps the cookie for subsequent requests
    me = client.get("/api/me")
    assert me.status_code == 200
    assert me.json()["email"] == "student@example.com"


def test_login_wrong_password(client, student_user):
    response = client.post("/api/auth/login", json={"email": "student@example.com", "password": "wrong-password"})
    assert response.status_code == 401


def test_admin_login_rejects_students(client, student_user, admin_user):
    response = client.post(
        "/api/auth/admin/login", json={"email": "student@example.com", "password": "password123"}
    )
    assert response.status_code == 403

    response = client.post("/api/auth/admin/login", json={"email": "admin@example.com", "password": "password123"})
    assert response.status_code == 200
    assert response.json()["role"] == "ADMIN"


def test_disabled_account_cannot_log_in(client, db):
    user = create_user(db, "off@example.com")
    user.is_active = False
    db.commit()
    response = client.post("/api/auth/login", json={"email": "off@example.com", "password": "password123"})
    assert response.status_code == 403


def test_logout_clears_cookie(client, student_user):
    client.post("/api/auth/login", json={"email": "student@example.com", "password": "password123"})
    assert client.post("/api/auth/logout").status_code == 200
    assert client.get("/api/me").status_code == 401


def test_unauthenticated_and_wrong_role(client, student_headers, admin_headers):
    assert client.get("/api/admin/students").status_code == 401
    assert client.get("/api/admin/students", headers=student_headers).status_code == 403
    assert client.get("/api/student/profile", headers=admin_headers).status_code == 403


def test_invalid_token(client):
    response = client.get("/api/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_bearer_header_for_student(client, student_user):
    response = client.get("/api/me", headers=auth_headers(student_user))
    assert response.json()["role"] == "STUDENT"


def test_unexpected_error_returns_generic_500(client, admin_headers, monkeypatch, caplog):
    def broken(*args, **kwargs):
        raise RuntimeError("connection string leaked: postgres://secret")

    monkeypatch.setattr(batches, "list_batches", broken)
    caplog.set_level("ERROR", logger="student_erp.main")

    response = client.get("/api/admin/batches", headers=admin_headers)

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
    assert "secret" not in response.text
    record = next(r for r in caplog.records if r.name == "student_erp.main")
    assert "GET /api/admin/batches" in record.getMessage()
    assert record.exc_info[0] is RuntimeError
    assert "Traceback" in caplog.text
