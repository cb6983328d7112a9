from dance_events.models.user import User, Role
from dance_events.models.event import Event
from dance_events.models.ticket import Ticket

__all__ = ["User", "Role", "Event", "Ticket"]
