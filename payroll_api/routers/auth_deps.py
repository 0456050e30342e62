"""
RBAC Dependencies.
Provides authentication and role-based access control for FastAPI endpoints.
"""
import logging
from typing import Callable, List, Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from payroll_api.core.exceptions import AccessDeniedError, AuthenticationError
from payroll_api.database import get_db
from payroll_api.models.employee import Employee
from payroll_api.models.user import User, UserRole
from payroll_api.schemas.auth import TokenData
from payroll_api.services import auth as auth_service

logger = logging.getLogger(__name__)

# auto_error=False so a missing header gets our own 401 message and envelope
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_current_user(token: Optional[str] = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    """
    Extracts and validates the current user from the JWT token.
    """
    if not token:
        raise AuthenticationError("Access token is required")

    payload = auth_service.decode_access_token(token)

    if payload is None:
        logger.warning("Authentication failed: Invalid token")
        raise AuthenticationError("Invalid token")

    if payload.get("error") == "TOKEN_EXPIRED":
        logger.info("Authentication failed: Token expired")
        raise AuthenticationError("Token expired")

    if payload.get("type") != "access":
        logger.warning("Authentication failed: Invalid token type")
        raise AuthenticationError("Invalid token type")

    token_data = TokenData(email=payload.get("sub"), user_id=payload.get("user_id"), role=payload.get("role"))
    if token_data.email is None:
        logger.warning("Authentication failed: Missing subject (email) in token")
        raise AuthenticationError("Invalid token")

    user = db.query(User).filter(User.email == token_data.email).first()
    if user is None:
        logger.warning(f"Authentication failed: User {token_data.email} not found in database")
        raise AuthenticationError("Invalid token - user not found")
    return user


def require_role(allowed_roles: List[UserRole]) -> Callable:
    """
    Dependency factory that checks if the user has one of the allowed roles.

    Usage:
        @router.get("/admin-only")
        def admin_endpoint(user: User = Depends(require_role([UserRole.ADMIN]))):
            ...
    """
    def role_checker(current_user: User = Depends(get_current_user)):
        if current_user.role not in allowed_roles:
            raise AccessDeniedError(
                f"Insufficient permissions - {' or '.join(r.value for r in allowed_roles)} access required"
            )
        return current_user
    return role_checker


def require_admin():
    """Shorthand for requiring the admin role."""
    return require_role([UserRole.ADMIN])


def check_employee_access(user: User, employee: Employee):
    """
    Admins can read any employee's data; everyone else only their own.
    Raises AccessDeniedError otherwise.
    """
    if user.is_admin:
        return
    if employee.user_id != user.id:
        raise AccessDeniedError("Access denied. You can only view your own payroll data")
