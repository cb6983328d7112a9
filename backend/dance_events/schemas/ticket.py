"""
Pydantic schemas for ticket responses.
"""

from datetime import datetime

from dance_events.schemas.event import CamelModel, CreatorSummary, EventResponse


class TicketResponse(CamelModel):
    id: int
    user_id: int
    event_id: int
    price_cents: int
    created_at: datetime


class TicketEventSummary(EventResponse):
    creator: CreatorSummary


class TicketWithEventResponse(TicketResponse):
    event: TicketEventSummary
