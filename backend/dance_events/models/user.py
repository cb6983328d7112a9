"""
User model with secure password storage and a closed set of roles.
"""

import enum

from sqlalchemy import Column, Enum, Integer, String
from sqlalchemy.orm import relationship

from dance_events.db.base import Base, TimestampMixin


class Role(str, enum.Enum):
    DANCER = "DANCER"
    STUDIO = "STUDIO"
    AGENCY = "AGENCY"


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    name = Column(String(255), nullable=True)
    role = Column(
        Enum(Role, name="user_role", native_enum=False, length=20, create_constraint=True),
        nullable=False,
    )

    # Relationships
    events = relationship("Event", back_populates="creator")
    tickets = relationship("Ticket", back_populates="user")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
