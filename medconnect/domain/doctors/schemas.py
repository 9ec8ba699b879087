"""Doctor domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...models import DEFAULT_FEES, DoctorProfile
from ...shared.validators import (
    require_text,
    validate_email,
    validate_password,
    validate_phone,
)
from .availability import normalize_timings


class DayTiming(BaseModel):
    """One weekday entry of the weekly availability template"""

    day: str
    startTime: str
    endTime: str
    isAvailable: bool = True


def _check_timings(v: Optional[list[DayTiming]]) -> Optional[list[DayTiming]]:
    if v is None:
        return v
    return [DayTiming(**entry) for entry in normalize_timings(t.model_dump() for t in v)]


class DoctorCreate(BaseModel):
    """
    Schema for creating a doctor profile.

    Admins must also send name/email/password: the doctor account and its
    profile are created together. A doctor creating their own profile sends
    the profile fields only.
    """

    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    specialization: str
    experience: int = Field(0, ge=0)
    fees: float = Field(DEFAULT_FEES, ge=0)
    phone: Optional[str] = None
    address: Optional[str] = None
    timings: Optional[list[DayTiming]] = None
    bio: Optional[str] = None
    image: Optional[str] = None

    @field_validator("specialization")
    @classmethod
    def validate_specialization(cls, v: str) -> str:
        return require_text(v, "Specialization")

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v):
        return validate_email(v)

    @field_validator("password")
    @classmethod
    def validate_password_field(cls, v):
        if v is None:
            return v
        return validate_password(v)

    @field_validator("phone")
    @classmethod
    def validate_phone_field(cls, v):
        return validate_phone(v)

    @field_validator("timings")
    @classmethod
    def validate_timings(cls, v):
        return _check_timings(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is None:
            return v
        return require_text(v, "Name")

    def has_account_fields(self) -> bool:
        return any(value is not None for value in (self.name, self.email, self.password))


class DoctorUpdate(BaseModel):
    """
    Schema for updating a doctor profile.

    Only fields present in the request body are applied, so 0 and "" are
    real values. Sending null clears optional text fields. `name` renames the
    doctor's account.
    """

    name: Optional[str] = None
    specialization: Optional[str] = None
    experience: Optional[int] = Field(None, ge=0)
    fees: Optional[float] = Field(None, ge=0)
    phone: Optional[str] = None
    address: Optional[str] = None
    timings: Optional[list[DayTiming]] = None
    bio: Optional[str] = None
    image: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is None:
            return v
        return require_text(v, "Name")

    @field_validator("specialization")
    @classmethod
    def validate_specialization(cls, v):
        if v is None:
            return v
        return require_text(v, "Specialization")

    @field_validator("phone")
    @classmethod
    def validate_phone_field(cls, v):
        return validate_phone(v)

    @field_validator("timings")
    @classmethod
    def validate_timings(cls, v):
        return _check_timings(v)


class DoctorAccountSummary(BaseModel):
    id: int
    name: str
    email: str


class DoctorResponse(BaseModel):
    """Schema for doctor profile response, joined with the owning account"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    userId: int
    name: str
    email: str
    user: DoctorAccountSummary
    specialization: str
    experience: int
    fees: float
    phone: Optional[str]
    address: Optional[str]
    timings: list[DayTiming]
    bio: Optional[str]
    image: Optional[str]
    rating: float
    numReviews: int
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_profile(cls, doctor: DoctorProfile) -> "DoctorResponse":
        account = doctor.user
        return cls(
            id=doctor.id,
            userId=doctor.user_id,
            name=account.name,
            email=account.email,
            user=DoctorAccountSummary(id=account.id, name=account.name, email=account.email),
            specialization=doctor.specialization,
            experience=doctor.experience,
            fees=doctor.fees,
            phone=doctor.phone,
            address=doctor.address,
            timings=[DayTiming(**entry) for entry in doctor.timings or []],
            bio=doctor.bio,
            image=doctor.image,
            rating=doctor.rating or 0,
            numReviews=doctor.num_reviews or 0,
            createdAt=doctor.created_at,
            updatedAt=doctor.updated_at,
        )


class SlotsResponse(BaseModel):
    doctorId: int
    date: date
    day: str
    isAvailable: bool
    slots: list[str]
