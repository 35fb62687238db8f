import logging
from datetime import datetime

from fastapi import BackgroundTasks, HTTPException, Request
from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from student_erp.models.batch import Batch
from student_erp.models.enums import AssignmentType, TaskStatus
from student_erp.models.student import Student
from student_erp.models.task import Task, TaskAssignment
from student_erp.models.user import User
from student_erp.schemas.task import TaskCreateRequest
from student_erp.services.audit import client_ip, record_audit
from student_erp.services.email import notify_students, task_assigned_template

logger = logging.getLogger(__name__)


def create_task(
    db: Session,
    admin: User,
    payload: TaskCreateRequest,
    background_tasks: BackgroundTasks | None = None,
    request: Request | None = None,
) -> Task:
    task = Task(
        title=payload.title,
        description=payload.description,
        due_date=payload.due_date,
        assignment_type=payload.assignment_type,
        created_by_id=admin.id,
    )
    db.add(task)

    if payload.assignment_type == AssignmentType.INDIVIDUAL:
        if db.get(Student, payload.student_id) is None:
            raise HTTPException(status_code=404, detail="Student not found.")
        task.assignments.append(TaskAssignment(student_id=payload.student_id))
        audience = db.query(Student).filter(Student.id == payload.student_id)
    elif payload.assignment_type == AssignmentType.BATCH:
        if db.get(Batch, payload.batch_id) is None:
            raise HTTPException(status_code=404, detail="Batch not found.")
        task.assignments.append(TaskAssignment(batch_id=payload.batch_id))
        audience = db.query(Student).filter(Student.batch_id == payload.batch_id)
    else:
        batches = (
            db.query(Batch)
            .filter(Batch.program == payload.program, Batch.is_active.is_(True))
            .all()
        )
        for batch in batches:
            task.assignments.append(TaskAssignment(batch_id=batch.id))
        audience = db.query(Student).filter(Student.batch_id.in_([b.id for b in batches]))

    db.flush()
    record_audit(
        db,
        admin.id,
        "CREATE_TASK",
        "Task",
        task.id,
        details={"assignment_type": payload.assignment_type.value, "assignments": len(task.assignments)},
        ip_address=client_ip(request),
    )
    db.commit()
    db.refresh(task)
    logger.info("Task %s created with %d assignments", task.id, len(task.assignments))

    if background_tasks is not None:
        recipients = [(s.email, s.first_name) for s in audience.all() if s.email]
        if recipients:
            background_tasks.add_task(
                notify_students, recipients, task_assigned_template, task.title, task.due_date
            )
    return task


def list_tasks(db: Session) -> list[Task]:
    return (
        db.query(Task)
        .options(selectinload(Task.assignments))
        .order_by(Task.created_at.desc(), Task.id.desc())
        .all()
    )


def _student_assignments(db: Session, student: Student):
    conditions = [TaskAssignment.student_id == student.id]
    if student.batch_id is not None:
        conditions.append(TaskAssignment.batch_id == student.batch_id)
    return db.query(TaskAssignment).filter(or_(*conditions))


def student_task_view(assignment: TaskAssignment) -> dict:
    task = assignment.task
    return {
        "assignment_id": assignment.id,
        "task_id": task.id,
        "title": task.title,
        "description": task.description,
        "due_date": task.due_date,
        "status": assignment.status,
        "completed_at": assignment.completed_at,
    }


def list_student_tasks(db: Session, student: Student) -> list[dict]:
    assignments = (
        _student_assignments(db, student)
        .options(selectinload(TaskAssignment.task))
        .order_by(TaskAssignment.id.desc())
        .all()
    )
    return [student_task_view(a) for a in assignments]


def update_task_status(db: Session, student: Student, assignment_id: int, status: TaskStatus) -> TaskAssignment:
    assignment = _student_assignments(db, student).filter(TaskAssignment.id == assignment_id).first()
    if assignment is None:
        raise HTTPException(status_code=404, detail="Task assignment not found.")
    assignment.status = status
    assignment.completed_at = datetime.utcnow() if status == TaskStatus.COMPLETED else None
    db.commit()
    db.refresh(assignment)
    return assignment
