"""Doctor router - FastAPI endpoints for the doctor directory"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth import get_current_user, get_settings, require_doctor
from ...config import Settings
from ...database import get_db
from ...models import User
from .schemas import DoctorCreate, DoctorResponse, DoctorUpdate, SlotsResponse
from .service import DoctorService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/doctors", tags=["Doctors"])


def get_doctor_service(db: Session = Depends(get_db)) -> DoctorService:
    """Dependency injection for DoctorService"""
    return DoctorService(db)


@router.get("", response_model=list[DoctorResponse])
async def list_doctors(
    specialization: Optional[str] = Query(None, description="Exact specialization match"),
    search: Optional[str] = Query(None, description="Case-insensitive doctor name search"),
    limit: int = Query(20, ge=1, le=100),
    service: DoctorService = Depends(get_doctor_service),
):
    """List doctors (public)"""
    doctors = service.list_doctors(specialization, search, limit)
    return [DoctorResponse.from_profile(d) for d in doctors]


@router.post("", response_model=DoctorResponse, status_code=status.HTTP_201_CREATED)
async def create_doctor(
    data: DoctorCreate,
    current_user: User = Depends(get_current_user),
    service: DoctorService = Depends(get_doctor_service),
):
    """Create a doctor (admin) or the caller's own doctor profile (doctor)"""
    doctor = service.create_doctor(data, current_user)
    return DoctorResponse.from_profile(doctor)


@router.get("/me", response_model=DoctorResponse)
async def get_own_profile(
    current_user: User = Depends(require_doctor),
    service: DoctorService = Depends(get_doctor_service),
):
    """Get the calling doctor's profile"""
    return DoctorResponse.from_profile(service.get_own_profile(current_user))


@router.get("/{doctor_id}", response_model=DoctorResponse)
async def get_doctor(doctor_id: int, service: DoctorService = Depends(get_doctor_service)):
    """Get a doctor by id (public)"""
    return DoctorResponse.from_profile(service.get_doctor(doctor_id))


@router.put("/{doctor_id}", response_model=DoctorResponse)
async def update_doctor(
    doctor_id: int,
    data: DoctorUpdate,
    current_user: User = Depends(get_current_user),
    service: DoctorService = Depends(get_doctor_service),
):
    """Update a doctor profile (admin or the owning doctor)"""
    doctor = service.update_doctor(doctor_id, data, current_user)
    return DoctorResponse.from_profile(doctor)


@router.get("/{doctor_id}/slots", response_model=SlotsResponse)
async def get_open_slots(
    doctor_id: int,
    on_date: date = Query(..., alias="date", description="YYYY-MM-DD"),
    service: DoctorService = Depends(get_doctor_service),
    settings: Settings = Depends(get_settings),
):
    """Open booking slots for a doctor on a date (public)"""
    return service.open_slots(doctor_id, on_date, settings.slot_minutes)
