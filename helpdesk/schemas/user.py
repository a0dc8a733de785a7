"""Account schemas."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from helpdesk.models.user import UserRole, UserStatus


class AccountCreate(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    password: str
    role: UserRole = UserRole.admin
    department: str | None = None


class AccountUpdate(BaseModel):
    username: str | None = Field(default=None, min_length=3, max_length=50)
    email: EmailStr | None = None
    role: UserRole | None = None
    status: UserStatus | None = None
    department: str | None = None


class AccountRead(BaseModel):
    id: int
    username: str
    email: EmailStr
    role: UserRole
    department: str | None = None
    status: UserStatus
    login_attempts: int
    last_login_at: datetime | None = None
    password_changed_at: datetime | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PasswordReset(BaseModel):
    new_password: str


class PasswordChange(BaseModel):
    current_password: str
    new_password: str


class StatusToggle(BaseModel):
    status: UserStatus
