from pathlib import Path

import pytest

from student_erp.services import storage
from tests.conftest import PDF_BYTES, one_page_pdf


def test_save_file_writes_under_scope(upload_dir):
    stored = storage.save_file(PDF_BYTES, "Offer Letter.PDF", "application/pdf", scope="students/1")

    path = Path(stored.stored_path)
    assert path.parent == upload_dir / "students" / "1"
    assert path.suffix == ".pdf"
    assert path.read_bytes() == PDF_BYTES
    assert stored.file_name == "Offer Letter.PDF"
    assert stored.file_size == len(PDF_BYTES)
    assert stored.mime_type == "application/pdf"


def test_save_file_names_are_unique():
    first = storage.save_file(PDF_BYTES, "a.pdf", "application/pdf")
    second = storage.save_file(PDF_BYTES, "a.pdf", "application/pdf")
    assert first.stored_path != second.stored_path


def test_rejects_disallowed_type(upload_dir):
    with pytest.raises(storage.StorageError):
        storage.save_file(b"hello", "notes.txt", "text/plain")
    assert not upload_dir.exists() or not any(upload_dir.rglob("*.txt"))


def test_rejects_oversized_file():
    with pytest.raises(storage.StorageError):
        storage.save_file(b"x" * 11, "big.png", "image/png", allowed_types=storage.IMAGE_TYPES, max_size=10)


def test_delete_file(upload_dir):
    stored = storage.save_file(PDF_BYTES, "a.pdf", "application/pdf")
    assert storage.delete_file(stored.stored_path)
    assert not Path(stored.stored_path).exists()


def test_delete_missing_file_is_tolerated(upload_dir):
    assert storage.delete_file(str(upload_dir / "gone.pdf")) is False
    assert storage.delete_file(None) is False


def test_sanitize_filename():
    assert storage.sanitize_filename("My CV (final).PDF") == "my_cv__final_.pdf"


def test_count_pdf_pages_handles_garbage():
    assert storage.count_pdf_pages(b"not a pdf") is None


def test_count_pdf_pages_reads_real_pdf():
    assert storage.count_pdf_pages(one_page_pdf()) == 1
