from pathlib import Path

from student_erp.models.document import Document
from student_erp.models.log import DocumentAccessLog
from tests.conftest import PDF_BYTES, auth_headers, create_user, one_page_pdf, onboard_student


def _upload(client, headers, doc_type="PASSPORT", content=PDF_BYTES, content_type="application/pdf", **extra):
    return client.post(
        "/api/documents",
        data={"type": doc_type, **extra},
        files={"file": ("passport.pdf", content, content_type)},
        headers=headers,
    )


def test_upload_document_raises_completion(client, onboarded, student_headers):
    before = onboarded.profile_completion
    response = _upload(client, student_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["document"]["type"] == "PASSPORT"
    assert body["document"]["file_name"] == "passport.pdf"
    assert body["replaced_document_id"] is None
    assert body["profile_completion"] > before


def test_reupload_replaces_instead_of_duplicating(client, onboarded, student_headers, db):
    first = _upload(client, student_headers).json()["document"]
    first_path = db.get(Document, first["id"]).stored_path

    response = _upload(client, student_headers)
    assert response.json()["replaced_document_id"] == first["id"]

    docs = db.query(Document).filter(Document.student_id == onboarded.id).all()
    assert len(docs) == 1
    assert not Path(first_path).exists()


def test_delete_then_reupload_leaves_one_record(client, onboarded, student_headers, db):
    doc_id = _upload(client, student_headers).json()["document"]["id"]
    assert client.delete(f"/api/documents/{doc_id}", headers=student_headers).status_code == 204
    assert db.query(Document).count() == 0

    response = _upload(client, student_headers)
    assert response.json()["replaced_document_id"] is None
    assert db.query(Document).filter(Document.student_id == onboarded.id).count() == 1


def test_delete_lowers_completion(client, onboarded, student_headers, db):
    uploaded = _upload(client, student_headers).json()
    client.delete(f"/api/documents/{uploaded['document']['id']}", headers=student_headers)
    db.expire_all()
    assert onboarded.profile_completion < uploaded["profile_completion"]


def test_other_source_documents_are_indexed(client, onboarded, student_headers, db):
    first = _upload(client, student_headers, "OTHER_SOURCE_ITR", other_source_index="1")
    second = _upload(client, student_headers, "OTHER_SOURCE_ITR", other_source_index="2")
    assert first.status_code == second.status_code == 201
    assert second.json()["replaced_document_id"] is None
    assert db.query(Document).count() == 2


def test_other_source_index_rejected_for_other_types(client, onboarded, student_headers):
    response = _upload(client, student_headers, "PASSPORT", other_source_index="1")
    assert response.status_code == 400


def test_rejects_non_pdf(client, onboarded, student_headers):
    response = _upload(client, student_headers, content=b"hello", content_type="text/plain")
    assert response.status_code == 400


def test_rejects_unknown_type(client, onboarded, student_headers):
    assert _upload(client, student_headers, "HOROSCOPE").status_code == 400


def test_download_logs_access(client, onboarded, student_headers, db):
    doc_id = _upload(client, student_headers).json()["document"]["id"]
    response = client.get(f"/api/documents/{doc_id}", headers=student_headers)

    assert response.status_code == 200
    assert response.content == PDF_BYTES
    log = db.query(DocumentAccessLog).one()
    assert log.document_id == doc_id
    assert log.accessed_by == "student@example.com"


def test_students_cannot_see_each_others_documents(client, onboarded, student_headers, db, admin_headers):
    doc_id = _upload(client, student_headers).json()["document"]["id"]
    _, other_headers = onboard_student(client, db, "other@example.com")

    assert client.get(f"/api/documents/{doc_id}", headers=other_headers).status_code == 403
    assert client.delete(f"/api/documents/{doc_id}", headers=other_headers).status_code == 403
    assert client.get("/api/documents", headers=other_headers).json() == []

    admin_list = client.get(f"/api/documents?student_id={onboarded.id}", headers=admin_headers).json()
    assert [d["id"] for d in admin_list] == [doc_id]


def test_missing_document(client, onboarded, student_headers):
    assert client.get("/api/documents/999", headers=student_headers).status_code == 404


def test_user_without_profile_cannot_upload(client, db):
    headers = auth_headers(create_user(db, "fresh@example.com"))
    assert _upload(client, headers).status_code == 404


def test_upload_records_page_count(client, onboarded, student_headers, db):
    response = _upload(client, student_headers, "SOP", content=one_page_pdf())

    assert response.json()["document"]["page_count"] == 1
    assert db.get(Document, response.json()["document"]["id"]).page_count == 1


def test_download_uses_sanitized_file_name(client, onboarded, student_headers):
    response = client.post(
        "/api/documents",
        data={"type": "CV_RESUME"},
        files={"file": ("My CV (final).pdf", PDF_BYTES, "application/pdf")},
        headers=student_headers,
    )
    doc_id = response.json()["document"]["id"]
    assert response.json()["document"]["file_name"] == "My CV (final).pdf"

    download = client.get(f"/api/documents/{doc_id}", headers=student_headers)
    assert 'filename="my_cv__final_.pdf"' in download.headers["content-disposition"]
