"""
Ticket model: one row per issued ticket.

The unique constraint on (user_id, event_id) is what keeps a dancer to one
ticket per event. Purchases insert straight into this table and let the
constraint decide; there is no read-then-write check.
"""

from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship

from dance_events.db.base import Base, TimestampMixin


class Ticket(Base, TimestampMixin):
    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(
        Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Price at purchase time; later event price changes do not touch it
    price_cents = Column(Integer, nullable=False)

    # Relationships
    user = relationship("User", back_populates="tickets")
    event = relationship("Event", back_populates="tickets")

    __table_args__ = (
        UniqueConstraint("user_id", "event_id", name="uq_ticket_user_event"),
        CheckConstraint("price_cents >= 0", name="check_ticket_price_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Ticket(id={self.id}, user={self.user_id}, event={self.event_id})>"
