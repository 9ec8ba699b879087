"""Appointment domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ...models import Appointment, AppointmentStatus
from ..doctors.availability import normalize_slot


class BookingRequest(BaseModel):
    """Schema for a patient booking a slot"""

    doctorId: int
    appointmentDate: date
    timeSlot: str
    reason: Optional[str] = None

    @field_validator("timeSlot")
    @classmethod
    def validate_time_slot(cls, v: str) -> str:
        return normalize_slot(v)

    @field_validator("reason")
    @classmethod
    def strip_reason(cls, v):
        return v.strip() if v else v


class StatusUpdate(BaseModel):
    status: AppointmentStatus


class AppointmentPatient(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None


class AppointmentDoctor(BaseModel):
    id: int
    userId: int
    name: str
    specialization: str
    fees: float


class AppointmentResponse(BaseModel):
    """Schema for appointment response"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    patientId: int
    doctorId: int
    patient: AppointmentPatient
    doctor: AppointmentDoctor
    appointmentDate: date
    timeSlot: str
    reason: Optional[str]
    status: AppointmentStatus
    isPaid: bool
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_appointment(cls, appointment: Appointment) -> "AppointmentResponse":
        patient = appointment.patient
        doctor = appointment.doctor
        return cls(
            id=appointment.id,
            patientId=appointment.patient_id,
            doctorId=appointment.doctor_id,
            patient=AppointmentPatient(
                id=patient.id, name=patient.name, email=patient.email, phone=patient.phone
            ),
            doctor=AppointmentDoctor(
                id=doctor.id,
                userId=doctor.user_id,
                name=doctor.user.name,
                specialization=doctor.specialization,
                fees=doctor.fees,
            ),
            appointmentDate=appointment.appointment_date,
            timeSlot=appointment.time_slot,
            reason=appointment.reason,
            status=appointment.status,
            isPaid=appointment.is_paid,
            createdAt=appointment.created_at,
            updatedAt=appointment.updated_at,
        )
