"""Doctor repository - Database operations for doctor profiles"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, contains_eager, joinedload

from ...models import Appointment, AppointmentStatus, DoctorProfile, User


class DoctorRepository:
    """Repository for doctor profile database operations"""

    @staticmethod
    def list_doctors(
        db: Session,
        specialization: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 20,
    ) -> list[DoctorProfile]:
        """Filter doctors by exact specialization and case-insensitive name substring"""
        query = (
            db.query(DoctorProfile)
            .join(DoctorProfile.user)
            .options(contains_eager(DoctorProfile.user))
        )

        if specialization:
            query = query.filter(DoctorProfile.specialization == specialization)

        if search:
            query = query.filter(User.name.ilike(f"%{_escape_like(search)}%", escape="\\"))

        return query.order_by(DoctorProfile.id.asc()).limit(limit).all()

    @staticmethod
    def get_by_id(db: Session, doctor_id: int) -> Optional[DoctorProfile]:
        return (
            db.query(DoctorProfile)
            .options(joinedload(DoctorProfile.user))
            .filter(DoctorProfile.id == doctor_id)
            .first()
        )

    @staticmethod
    def get_by_user_id(db: Session, user_id: int) -> Optional[DoctorProfile]:
        return (
            db.query(DoctorProfile)
            .options(joinedload(DoctorProfile.user))
            .filter(DoctorProfile.user_id == user_id)
            .first()
        )

    @staticmethod
    def create_profile(db: Session, user_id: int, commit: bool = True, **profile_data) -> DoctorProfile:
        """Create a new doctor profile; commit=False leaves the transaction open"""
        doctor = DoctorProfile(user_id=user_id, **profile_data)
        db.add(doctor)
        if commit:
            db.commit()
            db.refresh(doctor)
        else:
            db.flush()
        return doctor

    @staticmethod
    def update_profile(db: Session, doctor: DoctorProfile, **updates) -> DoctorProfile:
        """Apply every given field, None included"""
        for key, value in updates.items():
            if hasattr(doctor, key):
                setattr(doctor, key, value)

        db.commit()
        db.refresh(doctor)
        return doctor

    @staticmethod
    def taken_slots(db: Session, doctor_id: int, on_date: date) -> set[str]:
        """Slots held by live (non-cancelled) bookings on a date"""
        rows = (
            db.query(Appointment.time_slot)
            .filter(
                Appointment.doctor_id == doctor_id,
                Appointment.appointment_date == on_date,
                Appointment.status != AppointmentStatus.CANCELLED,
            )
            .all()
        )
        return {row[0] for row in rows}


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
