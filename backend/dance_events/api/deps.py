"""
Request dependencies: settings, cache and the access gate.

get_current_actor is requireAuth, require_roles(...) is requireRole. Both
are pure guards; the only thing they leave behind is the verified Actor on
request.state and a user_id in the log context.
"""

from typing import Optional

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from dance_events.core.config import Settings
from dance_events.core.errors import AuthError, ForbiddenError
from dance_events.core.security import Actor, decode_access_token
from dance_events.models.user import Role
from dance_events.services.cache_service import EventCache

bearer_scheme = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_event_cache(request: Request) -> EventCache:
    return request.app.state.cache


async def get_current_actor(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_app_settings),
) -> Actor:
    if credentials is None:
        raise AuthError("Not authenticated")

    actor = decode_access_token(credentials.credentials, settings)
    request.state.actor = actor
    structlog.contextvars.bind_contextvars(user_id=actor.user_id)
    return actor


def require_roles(*roles: Role):
    allowed = frozenset(roles)
    names = ", ".join(role.value for role in roles)

    async def role_guard(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in allowed:
            raise ForbiddenError(f"Requires role: {names}")
        return actor

    return role_guard


require_dancer = require_roles(Role.DANCER)
require_organizer = require_roles(Role.STUDIO, Role.AGENCY)
