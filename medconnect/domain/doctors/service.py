"""Doctor service - Business logic for the doctor directory"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...errors import ConflictError, InvalidInputError, NotFoundError
from ...models import DEFAULT_DOCTOR_ADDRESS, DEFAULT_DOCTOR_IMAGE, DoctorProfile, Role, User
from ...permissions import Actor, Operation, Ownership, ensure_allowed
from ...security import hash_password
from ..accounts.repository import AccountRepository
from .availability import WEEKDAYS, default_timings, offered_slots
from .repository import DoctorRepository
from .schemas import DoctorCreate, DoctorUpdate

logger = logging.getLogger(__name__)

# Fields that may not be cleared with an explicit null
REQUIRED_FIELDS = ("name", "specialization", "experience", "fees", "timings")


class DoctorService:
    """Service layer for doctor directory business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = DoctorRepository()
        self.accounts = AccountRepository()

    def list_doctors(
        self,
        specialization: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 20,
    ) -> list[DoctorProfile]:
        doctors = self.repo.list_doctors(self.db, specialization, search, limit)
        logger.debug(
            f"Doctor filter specialization={specialization!r} search={search!r}: "
            f"{len(doctors)} found"
        )
        return doctors

    def get_doctor(self, doctor_id: int) -> DoctorProfile:
        doctor = self.repo.get_by_id(self.db, doctor_id)
        if not doctor:
            raise NotFoundError("Doctor not found")
        return doctor

    def get_own_profile(self, user: User) -> DoctorProfile:
        doctor = self.repo.get_by_user_id(self.db, user.id)
        if not doctor:
            raise NotFoundError("You have not created a doctor profile yet")
        return doctor

    def create_doctor(self, data: DoctorCreate, user: User) -> DoctorProfile:
        """Admins create account + profile together; doctors create their own profile"""
        actor = Actor.from_user(user)
        if user.role == Role.ADMIN:
            ensure_allowed(actor, Operation.CREATE_DOCTOR_ACCOUNT)
            return self._create_doctor_account(data)

        ensure_allowed(
            actor,
            Operation.CREATE_OWN_DOCTOR_PROFILE,
            message="Only admins or doctors can create doctor profiles",
        )
        return self._create_own_profile(data, user)

    def _profile_fields(self, data: DoctorCreate) -> dict:
        timings = [t.model_dump() for t in data.timings] if data.timings else default_timings()
        return {
            "specialization": data.specialization,
            "experience": data.experience,
            "fees": data.fees,
            "phone": data.phone,
            "address": data.address if data.address is not None else DEFAULT_DOCTOR_ADDRESS,
            "timings": timings,
            "bio": data.bio,
            "image": data.image if data.image is not None else DEFAULT_DOCTOR_IMAGE,
        }

    def _create_doctor_account(self, data: DoctorCreate) -> DoctorProfile:
        missing = [f for f in ("name", "email", "password") if not getattr(data, f)]
        if missing:
            raise InvalidInputError(f"Missing doctor account fields: {', '.join(missing)}")

        # All validation is done; nothing has been written yet
        if self.accounts.email_taken(self.db, data.email):
            raise ConflictError("User already exists")

        profile_fields = self._profile_fields(data)
        try:
            user = self.accounts.create_user(
                self.db,
                name=data.name,
                email=data.email,
                password_hash=hash_password(data.password),
                role=Role.DOCTOR,
                phone=data.phone,
                commit=False,
            )
            doctor = self.repo.create_profile(self.db, user.id, commit=False, **profile_fields)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Doctor account creation conflicted for {data.email}: {e.orig}")
            raise ConflictError("User already exists") from e
        except SQLAlchemyError:
            # Account and profile are rolled back together
            self.db.rollback()
            raise

        self.db.refresh(doctor)
        logger.info(f"Doctor account {user.id} and profile {doctor.id} created")
        return doctor

    def _create_own_profile(self, data: DoctorCreate, user: User) -> DoctorProfile:
        if data.has_account_fields():
            raise InvalidInputError("Account fields can only be set by an admin")

        if self.repo.get_by_user_id(self.db, user.id):
            raise ConflictError("Doctor profile already exists")

        try:
            doctor = self.repo.create_profile(self.db, user.id, **self._profile_fields(data))
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("Doctor profile already exists") from e

        logger.info(f"Doctor {user.id} created profile {doctor.id}")
        return doctor

    def update_doctor(self, doctor_id: int, data: DoctorUpdate, user: User) -> DoctorProfile:
        doctor = self.get_doctor(doctor_id)
        ensure_allowed(
            Actor.from_user(user),
            Operation.UPDATE_DOCTOR_PROFILE,
            Ownership(doctor_user_id=doctor.user_id),
            message="You can only update your own doctor profile",
        )

        provided = data.model_fields_set
        for field in REQUIRED_FIELDS:
            if field in provided and getattr(data, field) is None:
                raise InvalidInputError(f"{field} cannot be cleared")

        updates = {}
        for field in provided:
            value = getattr(data, field)
            if field == "name":
                # Lives on the account; committed with the profile below
                doctor.user.name = value
                continue
            if field == "timings":
                value = [t.model_dump() for t in value]
            updates[field] = value

        doctor = self.repo.update_profile(self.db, doctor, **updates)
        logger.info(f"Doctor profile {doctor.id} updated by user {user.id}: {sorted(provided)}")
        return doctor

    def open_slots(self, doctor_id: int, on_date: date, slot_minutes: int) -> dict:
        """Slots offered on a date that no live booking holds"""
        doctor = self.get_doctor(doctor_id)
        offered = offered_slots(doctor.timings, on_date, slot_minutes)
        taken = self.repo.taken_slots(self.db, doctor.id, on_date) if offered else set()
        return {
            "doctorId": doctor.id,
            "date": on_date,
            "day": WEEKDAYS[on_date.weekday()],
            "isAvailable": bool(offered),
            "slots": [slot for slot in offered if slot not in taken],
        }
