"""Account router - FastAPI endpoints for registration, login and profile"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...auth import get_current_user, get_settings
from ...config import Settings
from ...database import get_db
from ...models import User
from .schemas import AccountResponse, AuthResponse, LoginRequest, ProfileUpdate, RegisterRequest
from .service import AccountService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


def get_account_service(
    db: Session = Depends(get_db), settings: Settings = Depends(get_settings)
) -> AccountService:
    """Dependency injection for AccountService"""
    return AccountService(db, settings)


@router.post("", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(data: RegisterRequest, service: AccountService = Depends(get_account_service)):
    """Register a new patient account"""
    user = service.register(data)
    return AuthResponse.for_user(user, service.issue_token(user))


@router.post("/login", response_model=AuthResponse)
async def login(data: LoginRequest, service: AccountService = Depends(get_account_service)):
    """Authenticate with email and password"""
    user = service.login(data)
    return AuthResponse.for_user(user, service.issue_token(user))


@router.get("/profile", response_model=AccountResponse)
async def get_profile(current_user: User = Depends(get_current_user)):
    """Get the caller's account"""
    return AccountResponse.from_user(current_user)


@router.put("/profile", response_model=AuthResponse)
async def update_profile(
    data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
):
    """Update the caller's account and return a fresh token"""
    user = service.update_profile(current_user, data)
    return AuthResponse.for_user(user, service.issue_token(user))
