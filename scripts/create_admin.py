"""
Create an admin user, or promote an existing user to admin.

Usage: python scripts/create_admin.py <email> <password>
"""
import sys

from student_erp.core.database import SessionLocal, engine
from student_erp.core.security import hash_password
from student_erp.models.base import Base
from student_erp.models.enums import UserRole
from student_erp.models.user import User
import student_erp.models  # noqa: F401

if len(sys.argv) != 3:
    print("Usage: python scripts/create_admin.py <email> <password>")
    sys.exit(1)

email, password = sys.argv[1].strip().lower(), sys.argv[2]
if len(password) < 8:
    print("Password must be at least 8 characters.")
    sys.exit(1)

Base.metadata.create_all(bind=engine)
db = SessionLocal()

user = db.query(User).filter(User.email == email).first()
if user:
    user.role = UserRole.ADMIN
    user.hashed_password = hash_password(password)
    user.is_active = True
    print(f"Promoted existing user {email} to admin")
else:
    user = User(email=email, hashed_password=hash_password(password), role=UserRole.ADMIN)
    db.add(user)
    print(f"Created admin {email}")

db.commit()
db.close()
print("Done.")
