"""Account domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ...models import Role, User
from ...shared.validators import validate_email, validate_password, validate_phone


class RegisterRequest(BaseModel):
    """Schema for patient self-registration"""

    name: str
    email: str
    password: str
    phone: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v: str) -> str:
        return validate_email(v)

    @field_validator("password")
    @classmethod
    def validate_password_field(cls, v: str) -> str:
        return validate_password(v)

    @field_validator("phone")
    @classmethod
    def validate_phone_field(cls, v):
        return validate_phone(v)


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class ProfileUpdate(BaseModel):
    """Schema for updating the caller's own account; absent fields are left alone"""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Name cannot be blank")
        return v.strip() if v else v

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def validate_phone_field(cls, v):
        return validate_phone(v)

    @field_validator("password")
    @classmethod
    def validate_password_field(cls, v):
        if v is None:
            return v
        return validate_password(v)


class AccountResponse(BaseModel):
    """Schema for account response"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: Optional[str] = None
    role: Role
    isDoctor: bool
    isAdmin: bool
    createdAt: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: User) -> "AccountResponse":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            phone=user.phone,
            role=user.role,
            isDoctor=user.is_doctor,
            isAdmin=user.is_admin,
            createdAt=user.created_at,
        )


class AuthResponse(AccountResponse):
    """Account plus a freshly issued bearer token"""

    token: str

    @classmethod
    def for_user(cls, user: User, token: str) -> "AuthResponse":
        return cls(**AccountResponse.from_user(user).model_dump(), token=token)
