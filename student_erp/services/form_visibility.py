import logging

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from student_erp.models.batch import FORM_SECTIONS, Batch, FormVisibility
from student_erp.models.student import Student
from student_erp.schemas.form_visibility import FormVisibilityMask
from student_erp.services.students import refresh_profile_completion

logger = logging.getLogger(__name__)


def _mask_for(batch: Batch | None) -> FormVisibilityMask:
    if batch is None or batch.form_visibility is None:
        return FormVisibilityMask()
    return FormVisibilityMask.model_validate(batch.form_visibility)


def list_batch_visibility(db: Session) -> list[dict]:
    batches = (
        db.query(Batch)
        .options(selectinload(Batch.form_visibility))
        .filter(Batch.is_active.is_(True))
        .order_by(Batch.program.asc(), Batch.intake_year.desc())
        .all()
    )
    counts = dict(
        db.query(Student.batch_id, func.count(Student.id))
        .filter(Student.batch_id.isnot(None))
        .group_by(Student.batch_id)
        .all()
    )
    return [
        {
            "id": batch.id,
            "name": batch.name,
            "code": batch.code,
            "program": batch.program,
            "intake_year": batch.intake_year,
            "student_count": counts.get(batch.id, 0),
            "form_visibility": _mask_for(batch),
        }
        for batch in batches
    ]


def set_batch_visibility(db: Session, batch_id: int, mask: FormVisibilityMask) -> FormVisibility:
    """Upsert a batch's mask and rescore its students against it."""
    batch = db.get(Batch, batch_id)
    if batch is None:
        raise HTTPException(status_code=404, detail="Batch not found.")

    visibility = batch.form_visibility
    if visibility is None:
        visibility = FormVisibility(batch_id=batch.id)
        db.add(visibility)
        batch.form_visibility = visibility
    for section in FORM_SECTIONS:
        setattr(visibility, section, getattr(mask, section))
    db.flush()

    students = db.query(Student).filter(Student.batch_id == batch.id).all()
    for student in students:
        refresh_profile_completion(db, student)
    db.commit()
    db.refresh(visibility)
    logger.info("Updated form visibility for batch %s; rescored %d students", batch.name, len(students))
    return visibility


def student_visibility(student: Student) -> dict:
    return {
        "form_visibility": _mask_for(student.batch),
        "batch_name": student.batch.name if student.batch else "No batch assigned",
    }


def initialize_missing(db: Session) -> int:
    """Create an all-visible mask for every batch that lacks one."""
    batches = db.query(Batch).filter(~Batch.form_visibility.has()).all()
    for batch in batches:
        db.add(FormVisibility(batch_id=batch.id))
    db.commit()
    return len(batches)
