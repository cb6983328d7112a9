"""
Event model.

Key design decisions:
- Index on `start_at`: every listing is ordered by it and range-filtered on it
- Index on `price_cents` for the min/max price filters
- Tickets cascade at the DB level (ON DELETE CASCADE) and at the ORM level,
  so deleting an event never leaves orphaned tickets
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship

from dance_events.db.base import Base, TimestampMixin


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(String(2000), nullable=True)
    location = Column(String(255), nullable=False)
    start_at = Column(DateTime(timezone=True), nullable=False)
    end_at = Column(DateTime(timezone=True), nullable=True)
    price_cents = Column(Integer, nullable=False)
    creator_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Relationships
    creator = relationship("User", back_populates="events")
    tickets = relationship(
        "Ticket",
        back_populates="event",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("price_cents >= 0", name="check_event_price_non_negative"),
        Index("ix_events_start_at", "start_at"),
        Index("ix_events_price_cents", "price_cents"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, start_at={self.start_at})>"
