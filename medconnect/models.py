import enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

DEFAULT_DOCTOR_ADDRESS = "MedConnect Medical Center, New Delhi"
DEFAULT_DOCTOR_IMAGE = "/images/doctor.jpg"
DEFAULT_FEES = 500


class Role(str, enum.Enum):
    PATIENT = "patient"
    DOCTOR = "doctor"
    ADMIN = "admin"


class AppointmentStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)  # Stored lowercase
    password_hash = Column(String(255), nullable=False)
    # Fixed at creation, there is no role-change operation
    role = Column(
        Enum(Role, values_callable=lambda e: [m.value for m in e], native_enum=False),
        nullable=False,
        default=Role.PATIENT,
    )
    phone = Column(String(50), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    doctor_profile = relationship("DoctorProfile", back_populates="user", uselist=False)
    appointments = relationship("Appointment", back_populates="patient")

    @property
    def is_doctor(self) -> bool:
        return self.role == Role.DOCTOR

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class DoctorProfile(Base):
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)
    # One profile per doctor account
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    specialization = Column(String(255), nullable=False, index=True)
    experience = Column(Integer, nullable=False, default=0)
    fees = Column(Float, nullable=False, default=DEFAULT_FEES, index=True)
    phone = Column(String(50), nullable=True)
    address = Column(String(500), nullable=True, default=DEFAULT_DOCTOR_ADDRESS)
    timings = Column(JSON, nullable=False)  # Weekly availability template, seven day entries
    bio = Column(Text, nullable=True)
    image = Column(String(500), nullable=True, default=DEFAULT_DOCTOR_IMAGE)
    rating = Column(Float, nullable=False, default=0)
    num_reviews = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="doctor_profile")
    appointments = relationship("Appointment", back_populates="doctor")


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False, index=True)
    appointment_date = Column(Date, nullable=False)
    time_slot = Column(String(20), nullable=False)  # "H:MM AM" format
    reason = Column(Text, nullable=True)
    status = Column(
        Enum(
            AppointmentStatus,
            values_callable=lambda e: [m.value for m in e],
            native_enum=False,
        ),
        nullable=False,
        default=AppointmentStatus.PENDING,
    )
    is_paid = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    patient = relationship("User", back_populates="appointments")
    doctor = relationship("DoctorProfile", back_populates="appointments")

    __table_args__ = (
        # A slot is held by at most one live booking; cancelled ones free it
        Index(
            "uq_appointments_live_slot",
            "doctor_id",
            "appointment_date",
            "time_slot",
            unique=True,
            sqlite_where=text("status != 'cancelled'"),
            postgresql_where=text("status != 'cancelled'"),
        ),
    )
