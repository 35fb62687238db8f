import logging
import re
import uuid
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path

from pypdf import PdfReader
from pypdf.errors import DependencyError, PdfReadError

from student_erp.core.config import settings

logger = logging.getLogger(__name__)

PDF_TYPES = ["application/pdf"]
IMAGE_TYPES = ["image/png", "image/jpg", "image/jpeg"]
RESOURCE_TYPES = [
    "application/pdf",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
]


class StorageError(ValueError):
    """Raised when an upload fails type or size validation."""


@dataclass
class StoredFile:
    stored_path: str
    file_name: str
    file_size: int
    mime_type: str


def sanitize_filename(filename: str) -> str:
    return re.sub(r"[^a-z0-9._-]", "_", filename, flags=re.IGNORECASE).lower()


def save_file(
    data: bytes,
    filename: str | None,
    content_type: str | None,
    allowed_types: list[str] | None = None,
    max_size: int | None = None,
    scope: str | None = None,
) -> StoredFile:
    """Validate an upload and write it under ``upload_dir/<scope>/<uuid><ext>``."""
    allowed_types = allowed_types or PDF_TYPES
    max_size = max_size or settings.max_file_size

    if content_type not in allowed_types:
        raise StorageError(f"File type not allowed. Allowed: {', '.join(allowed_types)}")
    if len(data) > max_size:
        raise StorageError(f"File too large. Max size: {max_size} bytes")

    directory = Path(settings.upload_dir)
    if scope:
        directory = directory / scope
    directory.mkdir(parents=True, exist_ok=True)

    original = filename or "upload"
    stored_path = directory / f"{uuid.uuid4()}{Path(original).suffix.lower()}"
    stored_path.write_bytes(data)
    logger.info("Stored %s (%d bytes) at %s", original, len(data), stored_path)

    return StoredFile(
        stored_path=str(stored_path),
        file_name=original,
        file_size=len(data),
        mime_type=content_type,
    )


def delete_file(stored_path: str | None) -> bool:
    """Remove a stored file; a missing file is logged and otherwise ignored."""
    if not stored_path:
        return False
    try:
        Path(stored_path).unlink()
    except FileNotFoundError:
        logger.warning("File already missing on delete: %s", stored_path)
        return False
    except OSError:
        logger.exception("Failed to delete file %s", stored_path)
        return False
    logger.info("Deleted %s", stored_path)
    return True


def count_pdf_pages(data: bytes) -> int | None:
    try:
        reader = PdfReader(BytesIO(data))
        return len(reader.pages)
    except (PdfReadError, DependencyError):
        return None
    except Exception:
        logger.warning("Could not read PDF page count", exc_info=True)
        return None
