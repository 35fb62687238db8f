import logging
import math

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from student_erp.core.config import settings
from student_erp.models.batch import Batch
from student_erp.models.enums import Program
from student_erp.models.student import Student
from student_erp.schemas.batch import BatchCreateRequest

logger = logging.getLogger(__name__)


class BatchAssignmentError(ValueError):
    """Raised when a (program, intake year) pair cannot be mapped to a batch."""


def generate_batch_name(program: Program | str, intake_year: int) -> str:
    return f"{Program(program).value}-{intake_year}"


def generate_batch_code(program: Program | str, intake_year: int) -> str:
    return f"{Program(program).value}{intake_year % 100:02d}"


def _find_batch(db: Session, program: Program, intake_year: int) -> Batch | None:
    return (
        db.query(Batch)
        .filter(Batch.program == program, Batch.intake_year == intake_year)
        .first()
    )


def assign_student_to_batch(db: Session, program: Program | str, intake_year: int) -> int:
    """Return the id of the batch for ``(program, intake_year)``, creating it if needed.

    The insert runs in a savepoint so a concurrent onboarding that created the
    same batch first (unique constraint on program + intake year) is resolved by
    re-reading the winner instead of failing. The caller owns the outer commit.
    """
    try:
        program = Program(program)
    except ValueError:
        raise BatchAssignmentError(f"Unknown program '{program}'.") from None
    if not settings.min_intake_year <= intake_year <= settings.max_intake_year:
        raise BatchAssignmentError(
            f"Intake year must be between {settings.min_intake_year} and {settings.max_intake_year}."
        )

    batch = _find_batch(db, program, intake_year)
    if batch is not None:
        if not batch.is_active:
            batch.is_active = True
            logger.info("Reactivated batch %s for onboarding", batch.name)
        return batch.id

    try:
        with db.begin_nested():
            batch = Batch(
                program=program,
                intake_year=intake_year,
                name=generate_batch_name(program, intake_year),
                code=generate_batch_code(program, intake_year),
                is_active=True,
            )
            db.add(batch)
        logger.info("Created batch %s", batch.name)
    except IntegrityError:
        batch = _find_batch(db, program, intake_year)
        if batch is None:
            raise
        logger.info("Batch %s created concurrently, reusing it", batch.name)
    return batch.id


def _student_counts(db: Session, batch_ids: list[int]) -> dict[int, int]:
    if not batch_ids:
        return {}
    rows = (
        db.query(Student.batch_id, func.count(Student.id))
        .filter(Student.batch_id.in_(batch_ids))
        .group_by(Student.batch_id)
        .all()
    )
    return {batch_id: count for batch_id, count in rows}


def list_batches(
    db: Session,
    page: int = 1,
    limit: int = 20,
    program: Program | None = None,
    is_active: bool | None = None,
) -> dict:
    query = db.query(Batch)
    if program is not None:
        query = query.filter(Batch.program == program)
    if is_active is not None:
        query = query.filter(Batch.is_active == is_active)

    total = query.count()
    batches = (
        query.order_by(Batch.intake_year.desc(), Batch.program)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    counts = _student_counts(db, [b.id for b in batches])
    return {
        "batches": [_with_count(b, counts.get(b.id, 0)) for b in batches],
        "total": total,
        "page": page,
        "total_pages": math.ceil(total / limit) if limit else 0,
    }


def _with_count(batch: Batch, count: int) -> dict:
    return {
        "id": batch.id,
        "program": batch.program,
        "intake_year": batch.intake_year,
        "name": batch.name,
        "code": batch.code,
        "is_active": batch.is_active,
        "created_at": batch.created_at,
        "student_count": count,
    }


def create_batch(db: Session, payload: BatchCreateRequest) -> dict:
    if _find_batch(db, payload.program, payload.intake_year) is not None:
        raise HTTPException(
            status_code=400,
            detail="A batch with this program and intake year already exists.",
        )
    batch = Batch(
        program=payload.program,
        intake_year=payload.intake_year,
        name=generate_batch_name(payload.program, payload.intake_year),
        code=generate_batch_code(payload.program, payload.intake_year),
        is_active=payload.is_active,
    )
    db.add(batch)
    db.commit()
    db.refresh(batch)
    logger.info("Admin created batch %s", batch.name)
    return _with_count(batch, 0)


def get_batch(db: Session, batch_id: int) -> Batch:
    batch = (
        db.query(Batch)
        .options(selectinload(Batch.students))
        .filter(Batch.id == batch_id)
        .first()
    )
    if batch is None:
        raise HTTPException(status_code=404, detail="Batch not found.")
    return batch
