"""
Ticket endpoints, nested under /events.
"""

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from dance_events.api.deps import get_current_actor, require_dancer
from dance_events.core.security import Actor
from dance_events.db.session import get_db
from dance_events.schemas.event import MAX_DB_INT
from dance_events.schemas.ticket import TicketResponse, TicketWithEventResponse
from dance_events.services.ticket_service import get_user_tickets, purchase_ticket

router = APIRouter(prefix="/events", tags=["Tickets"])


@router.get("/me/tickets", response_model=list[TicketWithEventResponse])
async def list_my_tickets(
    actor: Actor = Depends(require_dancer),
    db: AsyncSession = Depends(get_db),
):
    """Tickets held by the authenticated dancer, newest first."""
    return await get_user_tickets(db, actor)


@router.post(
    "/{event_id}/tickets",
    response_model=TicketResponse,
    status_code=status.HTTP_201_CREATED,
)
async def purchase_ticket_endpoint(
    event_id: int = Path(..., le=MAX_DB_INT),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    """
    Buy a ticket for an event. Dancers only, one ticket per event.

    A second purchase for the same event, concurrent or not, returns 409.
    The role check runs after the event lookup, so a missing event is a 404
    for every caller.
    """
    ticket = await purchase_ticket(db, actor, event_id)
    # The 201 goes out only once the ticket row is committed
    await db.commit()
    return ticket
