"""
Give every batch without a form visibility row the default all-visible mask.
Safe to re-run; batches that already have a mask are left alone.
"""
from student_erp.core.database import SessionLocal
from student_erp.services.form_visibility import initialize_missing
import student_erp.models  # noqa: F401

db = SessionLocal()
created = initialize_missing(db)
db.close()
print(f"Initialized form visibility for {created} batch(es).")
