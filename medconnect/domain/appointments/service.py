"""Appointment service - Booking and status workflow"""

import logging
from datetime import date
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...config import Settings
from ...errors import (
    ConflictError,
    InvalidInputError,
    InvalidTransitionError,
    NotFoundError,
)
from ...models import Appointment, AppointmentStatus, User
from ...permissions import Actor, Operation, Ownership, ensure_allowed
from ..doctors.availability import WEEKDAYS, is_slot_offered, offered_slots, parse_clock
from ..doctors.repository import DoctorRepository
from .repository import AppointmentRepository
from .schemas import BookingRequest
from .status_machine import check_transition

logger = logging.getLogger(__name__)


def ownership_of(appointment: Appointment) -> Ownership:
    return Ownership(patient_id=appointment.patient_id, doctor_user_id=appointment.doctor.user_id)


class AppointmentService:
    """Service layer for appointment business logic"""

    def __init__(
        self,
        db: Session,
        settings: Settings,
        today: Optional[Callable[[], date]] = None,
    ):
        self.db = db
        self.settings = settings
        self.repo = AppointmentRepository()
        self.doctors = DoctorRepository()
        self.today = today or date.today

    def book(self, data: BookingRequest, user: User) -> Appointment:
        """Create a pending appointment for the calling patient"""
        ensure_allowed(
            Actor.from_user(user),
            Operation.BOOK_APPOINTMENT,
            message="Only patients can book appointments",
        )

        doctor = self.doctors.get_by_id(self.db, data.doctorId)
        if not doctor:
            raise NotFoundError("Doctor not found")

        if data.appointmentDate < self.today():
            raise InvalidInputError("Appointment date cannot be in the past")

        if not is_slot_offered(doctor.timings, data.appointmentDate, parse_clock(data.timeSlot)):
            weekday = WEEKDAYS[data.appointmentDate.weekday()]
            raise InvalidInputError(
                f"Doctor is not available on {weekday} {data.appointmentDate.isoformat()} "
                f"at {data.timeSlot}"
            )

        if data.timeSlot not in offered_slots(
            doctor.timings, data.appointmentDate, self.settings.slot_minutes
        ):
            raise InvalidInputError(
                f"{data.timeSlot} is not a bookable slot; slots start every "
                f"{self.settings.slot_minutes} minutes from the start of the working day"
            )

        if self.repo.find_live_booking(self.db, doctor.id, data.appointmentDate, data.timeSlot):
            logger.warning(
                f"Slot already booked: doctor {doctor.id} {data.appointmentDate} {data.timeSlot}"
            )
            raise ConflictError("This time slot is already booked")

        try:
            appointment = self.repo.create_appointment(
                self.db,
                patient_id=user.id,
                doctor_id=doctor.id,
                appointment_date=data.appointmentDate,
                time_slot=data.timeSlot,
                reason=data.reason,
                status=AppointmentStatus.PENDING,
                is_paid=False,
            )
        except IntegrityError as e:
            # A concurrent booking won the unique slot index
            self.db.rollback()
            logger.warning(
                f"Slot race lost: doctor {doctor.id} {data.appointmentDate} {data.timeSlot}"
            )
            raise ConflictError("This time slot is already booked") from e

        logger.info(
            f"Appointment {appointment.id} booked: patient {user.id} with doctor {doctor.id} "
            f"on {appointment.appointment_date} at {appointment.time_slot}"
        )
        return self.repo.get_by_id(self.db, appointment.id)

    def get_appointment(self, appointment_id: int, user: User) -> Appointment:
        appointment = self.repo.get_by_id(self.db, appointment_id)
        if not appointment:
            raise NotFoundError("Appointment not found")

        ensure_allowed(
            Actor.from_user(user),
            Operation.VIEW_APPOINTMENT,
            ownership_of(appointment),
            message="Not authorized to view this appointment",
        )
        return appointment

    def list_for_patient(self, user: User) -> list[Appointment]:
        return self.repo.list_for_patient(self.db, user.id)

    def list_for_doctor(
        self, user: User, status: Optional[AppointmentStatus] = None
    ) -> list[Appointment]:
        doctor = self.doctors.get_by_user_id(self.db, user.id)
        if not doctor:
            raise NotFoundError("Doctor profile not found")
        return self.repo.list_for_doctor(self.db, doctor.id, status)

    def list_all(self, user: User, status: Optional[AppointmentStatus] = None) -> list[Appointment]:
        ensure_allowed(Actor.from_user(user), Operation.LIST_ALL_APPOINTMENTS)
        return self.repo.list_all(self.db, status)

    def update_status(
        self, appointment_id: int, target: AppointmentStatus, user: User
    ) -> Appointment:
        appointment = self.repo.get_by_id(self.db, appointment_id)
        if not appointment:
            raise NotFoundError("Appointment not found")

        previous = appointment.status
        new_status = check_transition(
            Actor.from_user(user), ownership_of(appointment), previous, target
        )

        appointment = self.repo.update_appointment(self.db, appointment, status=new_status)
        logger.info(
            f"Appointment {appointment.id} transitioned: {previous.value} -> {new_status.value} "
            f"by {user.role.value} {user.id}"
        )
        return appointment

    def mark_paid(self, appointment_id: int, user: User) -> Appointment:
        appointment = self.repo.get_by_id(self.db, appointment_id)
        if not appointment:
            raise NotFoundError("Appointment not found")

        ensure_allowed(
            Actor.from_user(user),
            Operation.PAY_APPOINTMENT,
            ownership_of(appointment),
            message="Not authorized to pay for this appointment",
        )

        if appointment.status == AppointmentStatus.CANCELLED:
            raise InvalidTransitionError("A cancelled appointment cannot be paid")
        if appointment.is_paid:
            raise ConflictError("Appointment is already paid")

        appointment = self.repo.update_appointment(self.db, appointment, is_paid=True)
        logger.info(f"Appointment {appointment.id} marked paid by user {user.id}")
        return appointment
