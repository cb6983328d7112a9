"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from dance_events.api.routes import auth, events, tickets

api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router)
api_router.include_router(tickets.router)
api_router.include_router(events.router)


@api_router.get("/dance", tags=["Health"])
async def ping():
    """Liveness ping."""
    return {"ok": True, "message": "Server is running"}
