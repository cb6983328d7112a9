"""
Authentication service handling user registration and login.
"""

from functools import lru_cache

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dance_events.core.config import Settings
from dance_events.core.errors import AuthError, ConflictError
from dance_events.core.logging import get_logger
from dance_events.core.metrics import record_auth_attempt
from dance_events.core.security import create_access_token, hash_password, verify_password
from dance_events.db.session import DuplicateKeyError, insert_unique
from dance_events.models.user import User
from dance_events.schemas.user import UserCreate, UserLogin

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


@lru_cache()
def _dummy_hash(rounds: int) -> str:
    # Compared against when the email is unknown so both failures cost one bcrypt check
    return hash_password("not-a-real-password", rounds=rounds)


def issue_token(user: User, settings: Settings) -> str:
    return create_access_token(user.id, user.role, user.email, settings)


async def register_user(db: AsyncSession, user_data: UserCreate, settings: Settings) -> tuple[User, str]:
    """
    Register a new user with hashed password and return it with a token.
    Raises 409 if the email is already registered.
    """
    user = User(
        email=user_data.email,
        hashed_password=hash_password(user_data.password, rounds=settings.BCRYPT_ROUNDS),
        name=user_data.name,
        role=user_data.role,
    )
    try:
        # The unique index on email decides; no separate existence check
        await insert_unique(db, user)
    except DuplicateKeyError as e:
        record_auth_attempt("register", "conflict")
        logger.warning("registration_failed", reason="email_exists", email=user_data.email)
        raise ConflictError("Email already used") from e
    await db.refresh(user)

    record_auth_attempt("register", "success")
    logger.info("user_registered", user_id=user.id, email=user.email, role=user.role.value)
    return user, issue_token(user, settings)


async def authenticate_user(db: AsyncSession, login_data: UserLogin, settings: Settings) -> tuple[User, str]:
    """
    Authenticate user and return it with a JWT access token.
    Unknown email and wrong password raise the same 401.
    """
    result = await db.execute(select(User).where(User.email == login_data.email))
    user = result.scalar_one_or_none()

    hashed = user.hashed_password if user else _dummy_hash(settings.BCRYPT_ROUNDS)
    if not verify_password(login_data.password, hashed) or user is None:
        record_auth_attempt("login", "invalid")
        logger.warning("login_failed", email=login_data.email)
        raise AuthError(INVALID_CREDENTIALS)

    record_auth_attempt("login", "success")
    logger.info("user_logged_in", user_id=user.id)
    return user, issue_token(user, settings)
