from student_erp.models.batch import Batch, FormVisibility
from student_erp.models.document import Document
from student_erp.models.event import Event
from student_erp.models.log import AuditLog, DocumentAccessLog, EmailLog
from student_erp.models.resource import Resource
from student_erp.models.student import Student
from student_erp.models.task import Task, TaskAssignment
from student_erp.models.user import User
from student_erp.models.work import Reference, WorkExperience

__all__ = [
    "AuditLog",
    "Batch",
    "Document",
    "DocumentAccessLog",
    "EmailLog",
    "Event",
    "FormVisibility",
    "Reference",
    "Resource",
    "Student",
    "Task",
    "TaskAssignment",
    "User",
    "WorkExperience",
]
