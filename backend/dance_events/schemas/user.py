"""
Pydantic schemas for user-related request/response validation.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError

from dance_events.core.security import BCRYPT_MAX_BYTES
from dance_events.models.user import Role


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)
    name: Optional[str] = Field(None, max_length=255)
    role: Role

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValueError(f"password must be at most {BCRYPT_MAX_BYTES} bytes")
        return value


class UserLogin(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        """
        Same normalization EmailStr applies at registration. Anything that
        is not an address is kept as typed and simply matches no account.
        """
        try:
            return validate_email(value)[1]
        except PydanticCustomError:
            return value


class UserResponse(BaseModel):
    id: int
    email: str
    name: Optional[str]
    role: Role
    created_at: datetime

    model_config = ConfigDict(
        from_attributes=True, alias_generator=to_camel, populate_by_name=True
    )


class AuthResponse(BaseModel):
    user: UserResponse
    token: str
