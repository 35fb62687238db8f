from fastapi import HTTPException
from sqlalchemy.orm import Session, selectinload

from student_erp.models.batch import Batch
from student_erp.models.enums import UserRole
from student_erp.models.event import Event, event_batches
from student_erp.models.student import Student
from student_erp.models.user import User
from student_erp.schemas.event import EventCreateRequest, EventUpdateRequest


def _load_batches(db: Session, batch_ids: list[int]) -> list[Batch]:
    if not batch_ids:
        return []
    batches = db.query(Batch).filter(Batch.id.in_(batch_ids)).all()
    missing = set(batch_ids) - {b.id for b in batches}
    if missing:
        raise HTTPException(status_code=404, detail=f"Batch not found: {sorted(missing)}")
    return batches


def list_events(db: Session, user: User) -> list[Event]:
    query = db.query(Event).options(selectinload(Event.batches))
    if user.role == UserRole.STUDENT:
        student = db.query(Student).filter(Student.user_id == user.id).first()
        if student is None or student.batch_id is None:
            return []
        query = query.join(event_batches, event_batches.c.event_id == Event.id).filter(
            event_batches.c.batch_id == student.batch_id
        )
    return query.order_by(Event.event_date.asc(), Event.id.asc()).all()


def get_event(db: Session, event_id: int) -> Event:
    event = db.get(Event, event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found.")
    return event


def create_event(db: Session, payload: EventCreateRequest) -> Event:
    values = payload.model_dump(exclude={"batch_ids"})
    event = Event(**values)
    event.batches = _load_batches(db, payload.batch_ids)
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def update_event(db: Session, event_id: int, payload: EventUpdateRequest) -> Event:
    event = get_event(db, event_id)
    values = payload.model_dump(exclude_unset=True)
    batch_ids = values.pop("batch_ids", None)
    for field, value in values.items():
        if value is None and field not in {"banner", "registration_link"}:
            continue
        setattr(event, field, value)
    if batch_ids is not None:
        event.batches = _load_batches(db, batch_ids)
    db.commit()
    db.refresh(event)
    return event


def delete_event(db: Session, event_id: int) -> None:
    event = get_event(db, event_id)
    db.delete(event)
    db.commit()
