"""Account service - Business logic for registration, login and profiles"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...config import Settings
from ...errors import ConflictError, InvalidInputError, UnauthenticatedError
from ...models import Role, User
from ...security import create_access_token, hash_password, verify_password
from .repository import AccountRepository
from .schemas import LoginRequest, ProfileUpdate, RegisterRequest

logger = logging.getLogger(__name__)

# Fields that may not be explicitly cleared on profile update
REQUIRED_PROFILE_FIELDS = ("name", "email", "password")


class AccountService:
    """Service layer for account business logic"""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.repo = AccountRepository()

    def issue_token(self, user: User) -> str:
        return create_access_token(user.id, self.settings)

    def register(self, data: RegisterRequest) -> User:
        """Create a patient account; duplicate email is a conflict"""
        logger.info(f"Registering account: {data.email}")

        if self.repo.email_taken(self.db, data.email):
            logger.warning(f"Registration rejected, email already in use: {data.email}")
            raise ConflictError("User already exists")

        try:
            user = self.repo.create_user(
                self.db,
                name=data.name,
                email=data.email,
                password_hash=hash_password(data.password),
                role=Role.PATIENT,
                phone=data.phone,
            )
        except IntegrityError as e:
            # Lost a race with a concurrent registration for the same email
            self.db.rollback()
            raise ConflictError("User already exists") from e

        logger.info(f"Account {user.id} registered")
        return user

    def login(self, data: LoginRequest) -> User:
        user = self.repo.get_by_email(self.db, data.email)
        if not user or not verify_password(data.password, user.password_hash):
            logger.warning(f"Failed login for {data.email}")
            raise UnauthenticatedError("Invalid email or password")
        return user

    def update_profile(self, user: User, data: ProfileUpdate) -> User:
        provided = data.model_fields_set

        for field in REQUIRED_PROFILE_FIELDS:
            if field in provided and getattr(data, field) is None:
                raise InvalidInputError(f"{field} cannot be cleared")

        updates = {}
        if "name" in provided:
            updates["name"] = data.name
        if "email" in provided and data.email != user.email:
            if self.repo.email_taken(self.db, data.email, exclude_user_id=user.id):
                raise ConflictError("Email is already in use")
            updates["email"] = data.email
        if "phone" in provided:
            updates["phone"] = data.phone
        if "password" in provided:
            updates["password_hash"] = hash_password(data.password)

        try:
            user = self.repo.update_user(self.db, user, **updates)
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("Email is already in use") from e

        logger.info(f"Account {user.id} updated fields: {sorted(updates)}")
        return user

    def ensure_admin(self, email: str, password: str, name: str = "Administrator") -> User:
        """Create the bootstrap admin account if it doesn't exist yet"""
        existing = self.repo.get_by_email(self.db, email)
        if existing:
            if not existing.is_admin:
                logger.error(f"Bootstrap admin email {email} belongs to a {existing.role.value}")
            return existing

        user = self.repo.create_user(
            self.db,
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=Role.ADMIN,
        )
        logger.info(f"Bootstrap admin account created: {email}")
        return user
