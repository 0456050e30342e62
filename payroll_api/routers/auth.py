import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from payroll_api.core.config import settings
from payroll_api.core.limiter import limiter
from payroll_api.core.schemas import ApiResponse
from payroll_api.database import get_db
from payroll_api.models.user import User
from payroll_api.routers.auth_deps import get_current_user, require_admin
from payroll_api.schemas.auth import (
    LoginRequest, PasswordChange, ProfileUpdate, RegisterRequest, TokenResponse,
    UserListResponse, UserResponse, UserSettings, UserSettingsUpdate,
)
from payroll_api.services import auth as auth_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


@router.post("/register", response_model=ApiResponse[UserResponse], status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    user = auth_service.register_user(db, payload.name, payload.email, payload.password, payload.role)
    return ApiResponse.ok(auth_service.user_to_dict(user), "User registered successfully")


@router.post("/login", response_model=ApiResponse[TokenResponse])
@limiter.limit(settings.login_rate_limit)
def login(request: Request, login_data: LoginRequest, db: Session = Depends(get_db)):
    # JSON body instead of OAuth2 form-data for frontend compatibility
    user = auth_service.authenticate_user(db, login_data.email, login_data.password)
    logger.info(f"User {user.id} logged in")
    return ApiResponse.ok({
        "token": auth_service.token_for_user(user),
        "token_type": "bearer",
        "user": auth_service.user_to_dict(user),
    }, "Login successful")


@router.get("/me", response_model=ApiResponse[UserResponse])
def get_me(current_user: User = Depends(get_current_user)):
    return ApiResponse.ok(auth_service.user_to_dict(current_user))


@router.get("/users", response_model=ApiResponse[UserListResponse])
def list_users(db: Session = Depends(get_db), _admin: User = Depends(require_admin())):
    """Employee accounts, for picking the user behind a new employee record."""
    users = auth_service.list_employee_users(db)
    return ApiResponse.ok({"users": users, "count": len(users)})


@router.put("/profile", response_model=ApiResponse[UserResponse])
def update_profile(
    update_data: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    user = auth_service.update_profile(db, current_user, update_data.name)
    return ApiResponse.ok(auth_service.user_to_dict(user), "Profile updated successfully")


@router.put("/change-password", response_model=ApiResponse[None])
def change_password(
    data: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    auth_service.change_password(db, current_user, data.current_password, data.new_password)
    return ApiResponse.ok(message="Password changed successfully")


@router.get("/settings", response_model=ApiResponse[UserSettings])
def get_settings(current_user: User = Depends(get_current_user)):
    return ApiResponse.ok(auth_service.get_user_settings(current_user))


@router.put("/settings", response_model=ApiResponse[UserSettings])
def update_settings(
    changes: UserSettingsUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    stored = auth_service.update_user_settings(db, current_user, changes.model_dump(exclude_none=True))
    return ApiResponse.ok(stored, "Settings updated successfully")
