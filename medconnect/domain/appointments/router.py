"""Appointment router - FastAPI endpoints for the appointment ledger"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth import get_current_user, get_settings, require_doctor, require_patient
from ...config import Settings
from ...database import get_db
from ...models import AppointmentStatus, User
from .schemas import AppointmentResponse, BookingRequest, StatusUpdate
from .service import AppointmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def get_appointment_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db, settings)


@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    data: BookingRequest,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Book a slot with a doctor (patients only)"""
    appointment = service.book(data, current_user)
    return AppointmentResponse.from_appointment(appointment)


@router.get("", response_model=list[AppointmentResponse])
async def list_all_appointments(
    status_filter: Optional[AppointmentStatus] = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    """List every appointment (admin)"""
    appointments = service.list_all(current_user, status_filter)
    return [AppointmentResponse.from_appointment(a) for a in appointments]


@router.get("/myappointments", response_model=list[AppointmentResponse])
async def list_my_appointments(
    current_user: User = Depends(require_patient),
    service: AppointmentService = Depends(get_appointment_service),
):
    """List the calling patient's appointments"""
    appointments = service.list_for_patient(current_user)
    return [AppointmentResponse.from_appointment(a) for a in appointments]


@router.get("/doctor", response_model=list[AppointmentResponse])
async def list_doctor_appointments(
    status_filter: Optional[AppointmentStatus] = Query(None, alias="status"),
    current_user: User = Depends(require_doctor),
    service: AppointmentService = Depends(get_appointment_service),
):
    """List appointments booked with the calling doctor"""
    appointments = service.list_for_doctor(current_user, status_filter)
    return [AppointmentResponse.from_appointment(a) for a in appointments]


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Get one appointment (owning patient, owning doctor or admin)"""
    return AppointmentResponse.from_appointment(
        service.get_appointment(appointment_id, current_user)
    )


@router.put("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment_status(
    appointment_id: int,
    data: StatusUpdate,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Move an appointment through its status workflow"""
    appointment = service.update_status(appointment_id, data.status, current_user)
    return AppointmentResponse.from_appointment(appointment)


@router.put("/{appointment_id}/pay", response_model=AppointmentResponse)
async def pay_appointment(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Mark an appointment as paid (owning patient or admin)"""
    appointment = service.mark_paid(appointment_id, current_user)
    return AppointmentResponse.from_appointment(appointment)
