from dance_events.schemas.user import UserCreate, UserResponse, UserLogin, AuthResponse
from dance_events.schemas.event import (
    EventCreate, EventUpdate, EventResponse, EventDetailResponse, EventListResponse, EventFilters,
)
from dance_events.schemas.ticket import TicketResponse, TicketWithEventResponse

__all__ = [
    "UserCreate", "UserResponse", "UserLogin", "AuthResponse",
    "EventCreate", "EventUpdate", "EventResponse", "EventDetailResponse",
    "EventListResponse", "EventFilters",
    "TicketResponse", "TicketWithEventResponse",
]
