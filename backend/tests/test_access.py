"""
Tests for the access gate: token verification and role checks.
"""

import pytest
from httpx import AsyncClient

from dance_events.core.security import create_access_token
from dance_events.models.user import Role

NEW_EVENT = {
    "title": "Bachata Social",
    "location": "Miami",
    "startAt": "2025-03-01T20:00:00Z",
    "priceCents": 1500,
}


@pytest.mark.asyncio
async def test_missing_token_is_401(client: AsyncClient):
    response = await client.post("/api/events", json=NEW_EVENT)
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_non_bearer_scheme_is_401(client: AsyncClient):
    response = await client.post(
        "/api/events", json=NEW_EVENT, headers={"Authorization": "Basic abc"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_garbage_token_is_401(client: AsyncClient):
    response = await client.get(
        "/api/events/me/tickets", headers={"Authorization": "Bearer not.a.jwt"}
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token"


@pytest.mark.asyncio
async def test_token_signed_with_other_secret_is_401(client: AsyncClient, settings, dancer):
    forged = settings.model_copy(update={"SECRET_KEY": "someone-elses-secret-also-32-bytes-long"})
    token = create_access_token(dancer.id, dancer.role, dancer.email, forged)
    response = await client.get(
        "/api/events/me/tickets", headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_expired_token_is_401(client: AsyncClient, settings, dancer):
    expired = settings.model_copy(update={"ACCESS_TOKEN_EXPIRE_MINUTES": -1})
    token = create_access_token(dancer.id, dancer.role, dancer.email, expired)
    response = await client.get(
        "/api/events/me/tickets", headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Token expired"


@pytest.mark.asyncio
async def test_dancer_cannot_create_event(client: AsyncClient, dancer_headers):
    response = await client.post("/api/events", json=NEW_EVENT, headers=dancer_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_studio_cannot_list_tickets(client: AsyncClient, studio_headers):
    response = await client.get("/api/events/me/tickets", headers=studio_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_agency_can_create_event(client: AsyncClient, agency_headers):
    response = await client.post("/api/events", json=NEW_EVENT, headers=agency_headers)
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_token_claims_are_trusted_without_lookup(client: AsyncClient, settings):
    """The gate does not re-read the user; a well-signed token is enough to pass it."""
    token = create_access_token(4242, Role.DANCER, "ghost@x.com", settings)
    response = await client.get(
        "/api/events/me/tickets", headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_health_and_ping(client: AsyncClient):
    health = await client.get("/health")
    assert health.status_code == 200
    assert health.json()["cache"] == {"status": "disabled"}

    ping = await client.get("/api/dance")
    assert ping.json() == {"ok": True, "message": "Server is running"}


@pytest.mark.asyncio
async def test_request_id_header(client: AsyncClient):
    response = await client.get("/api/dance", headers={"X-Request-ID": "abc123"})
    assert response.headers["x-request-id"] == "abc123"
    assert response.headers["x-response-time"].endswith("ms")


@pytest.mark.asyncio
async def test_metrics_endpoint(client: AsyncClient):
    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "ticket_purchases_total" in response.text
