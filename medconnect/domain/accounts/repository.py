"""Account repository - Database operations for accounts"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Role, User


class AccountRepository:
    """Repository for account database operations"""

    @staticmethod
    def get_by_id(db: Session, user_id: int) -> Optional[User]:
        return db.get(User, user_id)

    @staticmethod
    def get_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email.lower()).first()

    @staticmethod
    def email_taken(db: Session, email: str, exclude_user_id: Optional[int] = None) -> bool:
        query = db.query(User.id).filter(User.email == email.lower())
        if exclude_user_id is not None:
            query = query.filter(User.id != exclude_user_id)
        return query.first() is not None

    @staticmethod
    def create_user(
        db: Session,
        name: str,
        email: str,
        password_hash: str,
        role: Role = Role.PATIENT,
        phone: Optional[str] = None,
        commit: bool = True,
    ) -> User:
        """
        Create a new account.

        With commit=False the row is only flushed, so the caller can bundle it
        with further writes in the same transaction.
        """
        user = User(
            name=name,
            email=email.lower(),
            password_hash=password_hash,
            role=role,
            phone=phone,
        )
        db.add(user)
        if commit:
            db.commit()
            db.refresh(user)
        else:
            db.flush()
        return user

    @staticmethod
    def update_user(db: Session, user: User, **updates) -> User:
        """Update an account with provided fields"""
        for key, value in updates.items():
            if hasattr(user, key):
                setattr(user, key, value)

        db.commit()
        db.refresh(user)
        return user
