import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .config import Settings
from .database import get_db
from .errors import ForbiddenError, UnauthenticatedError
from .models import Role, User
from .security import decode_access_token

logger = logging.getLogger(__name__)

# auto_error=False so a missing header yields our 401 shape instead of FastAPI's 403
security = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    """Resolve the acting account from the bearer token"""

    if not credentials:
        raise UnauthenticatedError(
            "Not authenticated. Please provide a valid Bearer token in the Authorization header."
        )

    payload = decode_access_token(credentials.credentials, settings)
    if not payload:
        raise UnauthenticatedError("Not authorized, token failed")

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        logger.warning(f"Token missing usable subject claim: {list(payload.keys())}")
        raise UnauthenticatedError("Invalid token claims") from None

    user = db.get(User, user_id)
    if not user:
        logger.warning(f"Token subject {user_id} does not match any account")
        raise UnauthenticatedError("Not authorized, account not found")

    logger.debug(f"User authenticated: {user.email}")
    return user


def require_roles(*roles: Role):
    """Dependency factory: the current user must hold one of the given roles"""

    async def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            logger.warning(
                f"Access denied: {user.role.value} {user.id} needs one of "
                f"{[r.value for r in roles]}"
            )
            raise ForbiddenError(
                f"This action requires the {' or '.join(r.value for r in roles)} role"
            )
        return user

    return checker


require_patient = require_roles(Role.PATIENT)
require_doctor = require_roles(Role.DOCTOR)
