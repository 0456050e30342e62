from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Literal, Optional
from datetime import datetime

from payroll_api.core.schemas import CamelModel
from payroll_api.models.user import UserRole

class RegisterRequest(BaseModel):
    name: str = Field(..., max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: UserRole = UserRole.EMPLOYEE

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value

class LoginRequest(BaseModel):
    # Lookup only; accounts created by scripts or bootstrap may predate stricter checks
    email: str = Field(..., min_length=1)
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

class UserResponse(CamelModel):
    id: int
    name: str
    email: str
    role: UserRole
    employee_id: Optional[int] = None
    created_at: Optional[datetime] = None

class TokenResponse(CamelModel):
    token: str
    token_type: str = "bearer"
    user: UserResponse

class TokenData(BaseModel):
    email: Optional[str] = None
    user_id: Optional[int] = None
    role: Optional[str] = None

class ProfileUpdate(BaseModel):
    name: str = Field(..., max_length=100)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value

class PasswordChange(CamelModel):
    current_password: str
    new_password: str = Field(..., min_length=6)

class UserListItem(CamelModel):
    id: int
    name: str
    email: str
    has_employee_record: bool

class UserListResponse(CamelModel):
    users: list[UserListItem]
    count: int


Currency = Literal["USD", "EUR", "GBP", "JPY", "INR", "CAD", "AUD", "CHF"]
Theme = Literal["dark", "light", "auto"]
Language = Literal["en", "es", "fr", "de", "ja", "hi"]

class NotificationPreferences(CamelModel):
    email: bool = True
    payroll: bool = True
    system: bool = False

class UserSettings(CamelModel):
    currency: Currency = "USD"
    theme: Theme = "dark"
    language: Language = "en"
    timezone: str = "UTC"
    notifications: NotificationPreferences = Field(default_factory=NotificationPreferences)

class UserSettingsUpdate(CamelModel):
    currency: Optional[Currency] = None
    theme: Optional[Theme] = None
    language: Optional[Language] = None
    timezone: Optional[str] = None
    notifications: Optional[NotificationPreferences] = None
