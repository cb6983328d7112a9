"""
Ticket service: purchase and listing.

CONCURRENCY STRATEGY: Unique constraint as the serialization point
===================================================================

Problem:
  A dancer double-clicks "buy" (or two tabs race). Both requests check
  "does this user already hold a ticket for this event?", both see no,
  both insert. Result: two tickets for one (user, event) pair.

Solution:
  There is no check-then-insert. The tickets table carries
  UNIQUE(user_id, event_id) and a purchase is a single INSERT:

  1. Look the event up (404 if missing) and snapshot its price
  2. INSERT the ticket and flush right away
  3. If the database rejects it as a duplicate, roll back and answer 409

  Under contention the database serializes the competing inserts on the
  unique index: the first commits, every other one fails with a unique
  violation. Exactly one ticket, no application locks, no retries.

  If the event is deleted between step 1 and step 2 the foreign key rejects
  the insert and the caller gets 404.
"""

import time

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from dance_events.core.errors import ConflictError, ForbiddenError, NotFoundError
from dance_events.core.logging import get_logger
from dance_events.core.metrics import record_ticket_purchase, ticket_purchase_latency
from dance_events.core.security import Actor
from dance_events.db.session import DuplicateKeyError, MissingReferenceError, insert_unique
from dance_events.models.event import Event
from dance_events.models.ticket import Ticket
from dance_events.models.user import Role
from dance_events.services.event_service import get_event

logger = get_logger(__name__)


async def purchase_ticket(db: AsyncSession, actor: Actor, event_id: int) -> Ticket:
    """
    Issue one ticket for the actor. The event is looked up before the role
    is checked, so a missing event is a 404 whoever asks.
    """
    start = time.perf_counter()
    try:
        event = await get_event(db, event_id)
    except NotFoundError:
        record_ticket_purchase("not_found")
        raise

    if actor.role is not Role.DANCER:
        record_ticket_purchase("forbidden")
        raise ForbiddenError("Only dancers can buy tickets")

    ticket = Ticket(
        user_id=actor.user_id,
        event_id=event.id,
        price_cents=event.price_cents,
    )
    try:
        await insert_unique(db, ticket)
    except DuplicateKeyError as e:
        record_ticket_purchase("conflict")
        logger.info("ticket_purchase_conflict", user_id=actor.user_id, event_id=event_id)
        raise ConflictError("You already have a ticket for this event") from e
    except MissingReferenceError as e:
        record_ticket_purchase("not_found")
        raise NotFoundError(f"Event {event_id} not found") from e
    await db.refresh(ticket)

    record_ticket_purchase("success")
    ticket_purchase_latency.observe(time.perf_counter() - start)
    logger.info(
        "ticket_purchased",
        ticket_id=ticket.id,
        user_id=actor.user_id,
        event_id=event_id,
        price_cents=ticket.price_cents,
    )
    return ticket


async def get_user_tickets(db: AsyncSession, actor: Actor) -> list[Ticket]:
    """All tickets of the actor with event and creator loaded, newest first."""
    result = await db.execute(
        select(Ticket)
        .options(selectinload(Ticket.event).selectinload(Event.creator))
        .where(Ticket.user_id == actor.user_id)
        .order_by(Ticket.created_at.desc(), Ticket.id.desc())
    )
    return list(result.scalars().all())
