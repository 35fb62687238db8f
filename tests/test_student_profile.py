from student_erp.models.batch import Batch
from student_erp.models.student import Student
from student_erp.services import students
from tests.conftest import PNG_BYTES, onboard_student


def test_onboarding_assigns_batch_and_scores(client, student_headers, db):
    response = client.post(
        "/api/student/onboarding",
        json={"first_name": "Asha", "last_name": "Rao", "program": "BS", "intake_year": 2025},
        headers=student_headers,
    )

    assert response.status_code == 201
    body = response.json()
    batch = db.get(Batch, body["batch_id"])
    assert batch.name == "BS-2025"
    student = body["student"]
    assert student["batch"]["name"] == "BS-2025"
    assert student["has_completed_onboarding"] is True
    assert student["email"] == "student@example.com"
    # names plus program and intake year: 6 of 58 points
    assert student["profile_completion"] == 10


def test_onboarding_twice_is_rejected(client, onboarded, student_headers):
    response = client.post(
        "/api/student/onboarding",
        json={"first_name": "Asha", "last_name": "Rao", "program": "BS", "intake_year": 2025},
        headers=student_headers,
    )
    assert response.status_code == 400


def test_onboarding_rejects_intake_year_out_of_range(client, student_headers, db):
    response = client.post(
        "/api/student/onboarding",
        json={"first_name": "Asha", "last_name": "Rao", "program": "BS", "intake_year": 1999},
        headers=student_headers,
    )
    assert response.status_code == 400
    assert db.query(Batch).count() == 0


def test_onboarding_requires_names(client, student_headers):
    response = client.post(
        "/api/student/onboarding",
        json={"first_name": "", "program": "BS", "intake_year": 2025},
        headers=student_headers,
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid input"


def test_students_with_same_intake_share_batch(client, db):
    first, _ = onboard_student(client, db, "one@example.com")
    second, _ = onboard_student(client, db, "two@example.com")
    assert first["batch_id"] == second["batch_id"]
    assert db.query(Batch).count() == 1


def test_onboarding_status(client, student_headers):
    response = client.get("/api/student/onboarding", headers=student_headers)
    assert response.json() == {"has_completed_onboarding": False, "student": None}


def test_profile_requires_onboarding(client, student_headers):
    assert client.get("/api/student/profile", headers=student_headers).status_code == 404


def test_profile_update_recomputes_completion(client, onboarded, student_headers):
    before = client.get("/api/student/profile", headers=student_headers).json()["profile_completion"]

    response = client.put(
        "/api/student/profile",
        json={
            "phone": "+91 90000 00000",
            "nationality": "Indian",
            "gre_taken": False,
            "travel_history": [{"country": "UK", "year": 2019, "purpose": "Tourism"}],
        },
        headers=student_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["phone"] == "+91 90000 00000"
    assert body["travel_history"][0]["country"] == "UK"
    assert body["profile_completion"] > before


def test_profile_update_cannot_clear_required_names(client, onboarded, student_headers):
    response = client.put("/api/student/profile", json={"first_name": None}, headers=student_headers)
    assert response.status_code == 200
    assert response.json()["first_name"] == "Asha"


def test_profile_update_validates_scores(client, onboarded, student_headers):
    response = client.put("/api/student/profile", json={"gre_score": 400}, headers=student_headers)
    assert response.status_code == 400


def test_student_form_visibility_defaults(client, onboarded, student_headers):
    body = client.get("/api/student/form-visibility", headers=student_headers).json()
    assert body["batch_name"] == "BS-2025"
    assert all(body["form_visibility"].values())


def test_passport_photo_lifecycle(client, onboarded, student_headers, db):
    before = onboarded.profile_completion
    files = {"file": ("me.png", PNG_BYTES, "image/png")}
    response = client.post("/api/student/passport-photo", files=files, headers=student_headers)

    assert response.status_code == 200
    assert response.json()["has_passport_photo"] is True
    assert response.json()["profile_completion"] > before

    photo = client.get("/api/student/passport-photo", headers=student_headers)
    assert photo.status_code == 200
    assert photo.content == PNG_BYTES

    assert client.delete("/api/student/passport-photo", headers=student_headers).status_code == 200
    assert client.get("/api/student/passport-photo", headers=student_headers).status_code == 404
    assert client.delete("/api/student/passport-photo", headers=student_headers).status_code == 404


def test_passport_photo_rejects_pdf(client, onboarded, student_headers):
    files = {"file": ("me.pdf", b"%PDF-1.4", "application/pdf")}
    response = client.post("/api/student/passport-photo", files=files, headers=student_headers)
    assert response.status_code == 400


def test_admin_reads_passport_photo_by_student_id(client, onboarded, student_headers, admin_headers):
    client.post(
        "/api/student/passport-photo",
        files={"file": ("me.png", PNG_BYTES, "image/png")},
        headers=student_headers,
    )
    assert client.get("/api/student/passport-photo", headers=admin_headers).status_code == 400
    response = client.get(f"/api/student/passport-photo?student_id={onboarded.id}", headers=admin_headers)
    assert response.status_code == 200


def test_work_experience_updates_flag_and_score(client, onboarded, student_headers, db):
    response = client.post(
        "/api/student/work-experiences",
        json={"company_name": "Acme", "designation": "Intern", "currently_working": False},
        headers=student_headers,
    )
    assert response.status_code == 201
    work_id = response.json()["id"]

    student = db.get(Student, onboarded.id)
    assert student.has_work_experience is True
    with_work = student.profile_completion

    listed = client.get("/api/student/work-experiences", headers=student_headers).json()
    assert [w["company_name"] for w in listed] == ["Acme"]

    assert client.delete(f"/api/student/work-experiences/{work_id}", headers=student_headers).status_code == 204
    db.expire_all()
    assert db.get(Student, onboarded.id).profile_completion < with_work
    assert client.delete(f"/api/student/work-experiences/{work_id}", headers=student_headers).status_code == 404


def test_references_crud(client, onboarded, student_headers):
    response = client.post(
        "/api/student/references",
        json={"name": "Dr. Mehta", "organization": "IIT", "email": "mehta@example.com"},
        headers=student_headers,
    )
    assert response.status_code == 201
    ref_id = response.json()["id"]
    assert len(client.get("/api/student/references", headers=student_headers).json()) == 1
    assert client.delete(f"/api/student/references/{ref_id}", headers=student_headers).status_code == 204
    assert client.get("/api/student/references", headers=student_headers).json() == []


def test_concurrent_double_onboarding_is_rejected(client, onboarded, student_headers, db, monkeypatch):
    # Both submissions passed the existence check before either inserted
    monkeypatch.setattr(students, "get_student_for_user", lambda session, user: None)
    response = client.post(
        "/api/student/onboarding",
        json={"first_name": "Asha", "last_name": "Rao", "program": "BS", "intake_year": 2025},
        headers=student_headers,
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Onboarding already completed."
    assert db.query(Student).count() == 1
