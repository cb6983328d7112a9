"""
Event endpoints. Listings go through the redis cache; detail reads never do
because they carry a live ticket count.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from dance_events.api.deps import get_current_actor, get_event_cache, require_organizer
from dance_events.core.logging import get_logger
from dance_events.core.security import Actor
from dance_events.db.session import get_db
from dance_events.schemas.event import (
    MAX_DB_INT,
    CreatorSummary,
    EventCreate,
    EventDetailResponse,
    EventFilters,
    EventListResponse,
    EventResponse,
    EventUpdate,
)
from dance_events.services.cache_service import EventCache
from dance_events.services.event_service import (
    create_event,
    delete_event,
    get_event_detail,
    list_events,
    update_event,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/events", tags=["Events"])


@router.get("", response_model=EventListResponse)
async def list_events_endpoint(
    q: Optional[str] = Query(None, description="Free text over title, description and location"),
    city: Optional[str] = Query(None, description="Substring of the location"),
    date_from: Optional[datetime] = Query(None, alias="from"),
    date_to: Optional[datetime] = Query(None, alias="to"),
    min_price: Optional[int] = Query(None, alias="minPrice", ge=0, le=MAX_DB_INT),
    max_price: Optional[int] = Query(None, alias="maxPrice", ge=0, le=MAX_DB_INT),
    page: Optional[int] = Query(None, le=MAX_DB_INT, description="1-based page number"),
    limit: Optional[int] = Query(None, description="Page size, at most 50"),
    db: AsyncSession = Depends(get_db),
    cache: EventCache = Depends(get_event_cache),
):
    """
    Search events, ordered by start time.
    Results are cached in Redis for 5 minutes.
    Cache is invalidated whenever an event is created, updated or deleted.
    """
    filters = EventFilters.build(
        q=q,
        city=city,
        date_from=date_from,
        date_to=date_to,
        min_price=min_price,
        max_price=max_price,
        page=page,
        limit=limit,
    )

    # Try cache first
    cached = await cache.get_events(filters)
    if cached:
        logger.info("events_list_cache_hit", page=filters.page)
        return EventListResponse.model_validate(cached)

    # Cache miss - query database
    events, total = await list_events(db, filters)
    response = EventListResponse(
        items=[EventResponse.model_validate(e) for e in events],
        total=total,
        page=filters.page,
        limit=filters.limit,
    )

    # Store in cache for next request
    await cache.set_events(filters, response.model_dump(mode="json", by_alias=True))

    return response


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    event_data: EventCreate,
    actor: Actor = Depends(require_organizer),
    db: AsyncSession = Depends(get_db),
    cache: EventCache = Depends(get_event_cache),
):
    """Create a new event. Studios and agencies only."""
    event = await create_event(db, actor, event_data)
    # Commit before invalidating so a concurrent miss cannot re-cache stale rows
    await db.commit()
    await cache.invalidate_events()
    return event


@router.get("/{event_id}", response_model=EventDetailResponse)
async def get_event_endpoint(
    event_id: int = Path(..., le=MAX_DB_INT),
    db: AsyncSession = Depends(get_db),
):
    """Get a single event with its creator and ticket count."""
    event, ticket_count = await get_event_detail(db, event_id)
    return EventDetailResponse(
        **EventResponse.model_validate(event).model_dump(),
        creator=CreatorSummary.model_validate(event.creator),
        ticket_count=ticket_count,
    )


@router.put("/{event_id}", response_model=EventResponse)
async def update_event_endpoint(
    event_data: EventUpdate,
    event_id: int = Path(..., le=MAX_DB_INT),
    actor: Actor = Depends(require_organizer),
    db: AsyncSession = Depends(get_db),
    cache: EventCache = Depends(get_event_cache),
):
    """Update an event. Only its creator may; omitted fields are left alone."""
    event = await update_event(db, actor, event_id, event_data)
    await db.commit()
    await cache.invalidate_events()
    return event


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event_endpoint(
    event_id: int = Path(..., le=MAX_DB_INT),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
    cache: EventCache = Depends(get_event_cache),
):
    """Delete an event and the tickets issued for it. Only its creator may."""
    await delete_event(db, actor, event_id)
    await db.commit()
    await cache.invalidate_events()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
