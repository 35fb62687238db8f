import logging

from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from student_erp.core.config import settings
from student_erp.core.database import get_db
from student_erp.core.security import create_access_token, decode_access_token, hash_password, verify_password
from student_erp.models.enums import UserRole
from student_erp.models.student import Student
from student_erp.models.user import User
from student_erp.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from student_erp.services.audit import client_ip, record_audit

logger = logging.getLogger(__name__)

_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def _issue_token(response: Response, user: User) -> TokenResponse:
    token = create_access_token(user.id, user.role.value)
    response.set_cookie(
        settings.auth_cookie_name,
        token,
        httponly=True,
        secure=settings.environment == "production",
        samesite="lax",
        max_age=settings.token_expire_minutes * 60,
        path="/",
    )
    return TokenResponse(
        access_token=token,
        user_id=user.id,
        role=user.role,
        has_completed_onboarding=bool(user.student and user.student.has_completed_onboarding),
    )


def register_user(db: Session, payload: RegisterRequest, response: Response) -> TokenResponse:
    if db.query(User).filter(User.email == payload.email).first():
        raise HTTPException(status_code=400, detail="Email already registered.")
    user = User(
        email=payload.email,
        hashed_password=hash_password(payload.password),
        role=UserRole.STUDENT,
    )
    db.add(user)
    db.flush()
    record_audit(db, user.id, "REGISTER", "User", user.id)
    db.commit()
    db.refresh(user)
    logger.info("Registered student user %s", user.id)
    return _issue_token(response, user)


def login_user(
    db: Session,
    payload: LoginRequest,
    response: Response,
    request: Request | None = None,
    role: UserRole | None = None,
) -> TokenResponse:
    user = db.query(User).filter(User.email == payload.email).first()
    if not user or not verify_password(payload.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid email or password.")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account is disabled.")
    if role is not None and user.role != role:
        raise HTTPException(status_code=403, detail="Admin access required.")
    record_audit(db, user.id, "LOGIN", "User", user.id, ip_address=client_ip(request))
    db.commit()
    return _issue_token(response, user)


def logout_user(response: Response) -> None:
    response.delete_cookie(settings.auth_cookie_name, path="/")


def get_current_user(
    request: Request,
    token: str | None = Depends(_oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    token = token or request.cookies.get(settings.auth_cookie_name)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated.")
    decoded = decode_access_token(token)
    if decoded is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token.")
    user = db.get(User, decoded[0])
    if user is None or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found.")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != UserRole.ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required.")
    return user


def require_student(user: User = Depends(get_current_user)) -> User:
    if user.role != UserRole.STUDENT:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Student access required.")
    return user


def get_current_student(
    user: User = Depends(require_student),
    db: Session = Depends(get_db),
) -> Student:
    student = db.query(Student).filter(Student.user_id == user.id).first()
    if student is None:
        raise HTTPException(status_code=404, detail="Student profile not found.")
    return student
