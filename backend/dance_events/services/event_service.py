"""
Event service: catalog search and creator-scoped CRUD.
"""

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from dance_events.core.errors import ForbiddenError, NotFoundError, ValidationError
from dance_events.core.logging import get_logger
from dance_events.core.metrics import record_catalog_mutation
from dance_events.core.security import Actor
from dance_events.models.event import Event
from dance_events.models.ticket import Ticket
from dance_events.schemas.event import EventCreate, EventFilters, EventUpdate, as_utc

logger = get_logger(__name__)


def _apply_filters(query, filters: EventFilters):
    if filters.q:
        query = query.where(
            or_(
                Event.title.icontains(filters.q, autoescape=True),
                Event.description.icontains(filters.q, autoescape=True),
                Event.location.icontains(filters.q, autoescape=True),
            )
        )
    if filters.city:
        query = query.where(Event.location.icontains(filters.city, autoescape=True))
    if filters.date_from is not None:
        query = query.where(Event.start_at >= filters.date_from)
    if filters.date_to is not None:
        query = query.where(Event.start_at <= filters.date_to)
    if filters.min_price is not None:
        query = query.where(Event.price_cents >= filters.min_price)
    if filters.max_price is not None:
        query = query.where(Event.price_cents <= filters.max_price)
    return query


async def list_events(db: AsyncSession, filters: EventFilters) -> tuple[list[Event], int]:
    """
    Filtered, paginated listing ordered by start time.
    Uses the ix_events_start_at index for both the range filter and the sort.
    """
    query = _apply_filters(select(Event), filters)

    # Get total count
    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar()

    events_query = (
        query
        .order_by(Event.start_at.asc(), Event.id.asc())
        .offset((filters.page - 1) * filters.limit)
        .limit(filters.limit)
    )
    result = await db.execute(events_query)
    events = list(result.scalars().all())

    return events, total


async def get_event(db: AsyncSession, event_id: int) -> Event:
    """Get a single event by ID."""
    result = await db.execute(select(Event).where(Event.id == event_id))
    event = result.scalar_one_or_none()

    if not event:
        raise NotFoundError(f"Event {event_id} not found")
    return event


async def get_event_detail(db: AsyncSession, event_id: int) -> tuple[Event, int]:
    """Event with its creator loaded, plus the number of tickets issued for it."""
    result = await db.execute(
        select(Event).options(selectinload(Event.creator)).where(Event.id == event_id)
    )
    event = result.scalar_one_or_none()
    if not event:
        raise NotFoundError(f"Event {event_id} not found")

    ticket_count = (
        await db.execute(select(func.count(Ticket.id)).where(Ticket.event_id == event_id))
    ).scalar()
    return event, ticket_count


async def create_event(db: AsyncSession, actor: Actor, event_data: EventCreate) -> Event:
    event = Event(
        title=event_data.title,
        description=event_data.description,
        location=event_data.location,
        start_at=event_data.start_at,
        end_at=event_data.end_at,
        price_cents=event_data.price_cents,
        creator_id=actor.user_id,
    )
    db.add(event)
    await db.flush()
    await db.refresh(event)

    record_catalog_mutation("create")
    logger.info("event_created", event_id=event.id, title=event.title, creator_id=actor.user_id)
    return event


async def _get_owned_event(db: AsyncSession, actor: Actor, event_id: int) -> Event:
    event = await get_event(db, event_id)
    if event.creator_id != actor.user_id:
        logger.warning("event_access_denied", event_id=event_id, user_id=actor.user_id)
        raise ForbiddenError("Only the event creator can modify this event")
    return event


async def update_event(db: AsyncSession, actor: Actor, event_id: int, event_data: EventUpdate) -> Event:
    """
    Partial update: only fields present in the request are written.
    An explicit null for endAt or description clears it.
    """
    event = await _get_owned_event(db, actor, event_id)

    changes = event_data.model_dump(exclude_unset=True)
    start_at = as_utc(changes.get("start_at", event.start_at))
    end_at = as_utc(changes.get("end_at", event.end_at))
    if end_at is not None and end_at < start_at:
        raise ValidationError("endAt must not be before startAt")

    for field, value in changes.items():
        setattr(event, field, value)
    await db.flush()
    await db.refresh(event)

    record_catalog_mutation("update")
    logger.info("event_updated", event_id=event.id, fields=sorted(changes))
    return event


async def delete_event(db: AsyncSession, actor: Actor, event_id: int) -> None:
    """Delete an event together with every ticket issued for it."""
    event = await _get_owned_event(db, actor, event_id)

    result = await db.execute(delete(Ticket).where(Ticket.event_id == event_id))
    await db.delete(event)
    await db.flush()

    record_catalog_mutation("delete")
    logger.info("event_deleted", event_id=event_id, tickets_removed=result.rowcount)
