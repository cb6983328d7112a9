"""
Password hashing (bcrypt) and access tokens (JWT, HS256).

Tokens carry the identity claims the access gate trusts without another
database round trip: userId, role and email.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from dance_events.core.config import Settings
from dance_events.core.errors import AuthError
from dance_events.models.user import Role

# Longest password bcrypt accepts
BCRYPT_MAX_BYTES = 72


@dataclass(frozen=True)
class Actor:
    """Verified identity attached to a request."""

    user_id: int
    role: Role
    email: str


def hash_password(password: str, rounds: int = 12) -> str:
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    encoded = password.encode("utf-8")
    # Registration never stores a hash of a longer password
    if len(encoded) > BCRYPT_MAX_BYTES:
        return False
    return bcrypt.checkpw(encoded, hashed_password.encode("utf-8"))


def create_access_token(user_id: int, role: Role, email: str, settings: Settings) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "userId": user_id,
        "role": role.value,
        "email": email,
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> Actor:
    """
    Verify signature and expiry and return the actor the token names.
    Raises AuthError for anything that does not check out.
    """
    try:
        claims = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            options={"require": ["exp", "userId", "role", "email"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise AuthError("Token expired") from e
    except jwt.PyJWTError as e:
        raise AuthError("Invalid token") from e

    try:
        return Actor(
            user_id=int(claims["userId"]),
            role=Role(claims["role"]),
            email=str(claims["email"]),
        )
    except (TypeError, ValueError) as e:
        raise AuthError("Invalid token") from e
