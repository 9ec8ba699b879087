"""Appointment repository - Database operations for the appointment ledger"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Appointment, AppointmentStatus, DoctorProfile


def _with_parties(query):
    return query.options(
        joinedload(Appointment.patient),
        joinedload(Appointment.doctor).joinedload(DoctorProfile.user),
    )


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def get_by_id(db: Session, appointment_id: int) -> Optional[Appointment]:
        return _with_parties(db.query(Appointment)).filter(Appointment.id == appointment_id).first()

    @staticmethod
    def list_for_patient(db: Session, patient_id: int) -> list[Appointment]:
        return (
            _with_parties(db.query(Appointment))
            .filter(Appointment.patient_id == patient_id)
            .order_by(Appointment.appointment_date.desc(), Appointment.id.desc())
            .all()
        )

    @staticmethod
    def list_for_doctor(
        db: Session, doctor_id: int, status: Optional[AppointmentStatus] = None
    ) -> list[Appointment]:
        query = _with_parties(db.query(Appointment)).filter(Appointment.doctor_id == doctor_id)
        if status:
            query = query.filter(Appointment.status == status)
        return query.order_by(Appointment.appointment_date.asc(), Appointment.id.asc()).all()

    @staticmethod
    def list_all(db: Session, status: Optional[AppointmentStatus] = None) -> list[Appointment]:
        query = _with_parties(db.query(Appointment))
        if status:
            query = query.filter(Appointment.status == status)
        return query.order_by(Appointment.appointment_date.desc(), Appointment.id.desc()).all()

    @staticmethod
    def find_live_booking(
        db: Session, doctor_id: int, on_date: date, time_slot: str
    ) -> Optional[Appointment]:
        """A non-cancelled appointment holding this (doctor, date, slot)"""
        return (
            db.query(Appointment)
            .filter(
                Appointment.doctor_id == doctor_id,
                Appointment.appointment_date == on_date,
                Appointment.time_slot == time_slot,
                Appointment.status != AppointmentStatus.CANCELLED,
            )
            .first()
        )

    @staticmethod
    def create_appointment(db: Session, **appointment_data) -> Appointment:
        appointment = Appointment(**appointment_data)
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def update_appointment(db: Session, appointment: Appointment, **updates) -> Appointment:
        for key, value in updates.items():
            if hasattr(appointment, key):
                setattr(appointment, key, value)

        db.commit()
        db.refresh(appointment)
        return appointment
