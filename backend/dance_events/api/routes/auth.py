"""
Authentication endpoints: register and login.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from dance_events.api.deps import get_app_settings
from dance_events.core.config import Settings
from dance_events.db.session import get_db
from dance_events.schemas.user import AuthResponse, UserCreate, UserLogin, UserResponse
from dance_events.services.auth_service import authenticate_user, register_user

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Register a new account and receive a token right away."""
    user, token = await register_user(db, user_data, settings)
    await db.commit()
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.post("/login", response_model=AuthResponse)
async def login(
    login_data: UserLogin,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Authenticate and receive a JWT access token."""
    user, token = await authenticate_user(db, login_data, settings)
    return AuthResponse(user=UserResponse.model_validate(user), token=token)
