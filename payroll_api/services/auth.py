"""
Authentication Service

Password hashing, JWT issuance/verification and account operations.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from email_validator import EmailNotValidError, validate_email
from jose import jwt, JWTError, ExpiredSignatureError
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from payroll_api.core.config import settings
from payroll_api.core.exceptions import AuthenticationError, ConflictError, ValidationFailedError
from payroll_api.models.employee import Employee
from payroll_api.models.user import User, UserRole
from payroll_api.schemas.auth import UserSettings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Returns the claims, {"error": "TOKEN_EXPIRED"} for an expired token,
    or None for anything that does not verify.
    """
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except ExpiredSignatureError:
        return {"error": "TOKEN_EXPIRED"}
    except JWTError:
        return None


def token_for_user(user: User) -> str:
    return create_access_token(data={
        "sub": user.email,
        "user_id": user.id,
        "role": user.role.value,
    })


def user_to_dict(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "employee_id": user.employee_profile.id if user.employee_profile else None,
        "created_at": user.created_at,
    }


def normalize_email(email: str) -> str:
    """
    Validate an address the way request bodies are validated and lower-case it.
    Used by account-creation paths that bypass the HTTP schemas.
    """
    try:
        validate_email(email.strip(), check_deliverability=False)
    except EmailNotValidError as e:
        raise ValidationFailedError(errors=[{"field": "email", "msg": f"value is not a valid email address: {e}"}])
    return email.strip().lower()


def register_user(db: Session, name: str, email: str, password: str, role: UserRole = UserRole.EMPLOYEE) -> User:
    email = email.strip().lower()
    if db.query(User).filter(User.email == email).first():
        raise ConflictError("User with this email already exists")

    user = User(
        name=name,
        email=email,
        hashed_password=get_password_hash(password),
        role=role,
    )
    db.add(user)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(user)
    logger.info(f"Registered user {user.email} ({user.role.value})")
    return user


def authenticate_user(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if not user or not verify_password(password, user.hashed_password):
        logger.warning(f"Failed login for {email}")
        raise AuthenticationError("Invalid email or password")
    return user


def update_profile(db: Session, user: User, name: str) -> User:
    user.name = name
    db.commit()
    db.refresh(user)
    return user


def change_password(db: Session, user: User, current_password: str, new_password: str) -> None:
    if not verify_password(current_password, user.hashed_password):
        raise ValidationFailedError("Current password is incorrect")
    user.hashed_password = get_password_hash(new_password)
    db.commit()
    logger.info(f"Password changed for user {user.id}")


def list_employee_users(db: Session) -> List[Dict[str, Any]]:
    """Employee-role users, flagged with whether an employee record exists yet."""
    users = db.query(User).filter(User.role == UserRole.EMPLOYEE).order_by(User.name).all()
    linked = {row.user_id for row in db.query(Employee.user_id).all()}
    return [
        {
            "id": u.id,
            "name": u.name,
            "email": u.email,
            "has_employee_record": u.id in linked,
        }
        for u in users
    ]


def get_user_settings(user: User) -> Dict[str, Any]:
    return UserSettings.model_validate(user.preferences or {}).model_dump()


def update_user_settings(db: Session, user: User, changes: Dict[str, Any]) -> Dict[str, Any]:
    merged = get_user_settings(user)
    merged.update(changes)
    # Re-validate the merged result so stored preferences are always well-formed
    user.preferences = UserSettings.model_validate(merged).model_dump()
    db.commit()
    db.refresh(user)
    return user.preferences
