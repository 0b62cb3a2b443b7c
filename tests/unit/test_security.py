import pytest
from fastapi import HTTPException
from httpx import AsyncClient, ASGITransport
from app.core.config import Settings
from app.core.security import resolve_permissions


def test_auth_disabled_grants_everything():
    settings = Settings(auth_enabled=False)

    assert resolve_permissions(settings, None) == {"read", "write", "delete"}


def test_missing_key_is_unauthorized():
    settings = Settings(auth_enabled=True, api_keys={"k": ["read"]})

    with pytest.raises(HTTPException) as exc_info:
        resolve_permissions(settings, None)

    assert exc_info.value.status_code == 401


def test_unknown_permissions_are_ignored():
    settings = Settings(auth_enabled=True, api_keys={"k": ["read", "admin"]})

    assert resolve_permissions(settings, "k") == {"read"}


@pytest.mark.asyncio
async def test_invalid_key_gets_401_envelope(secured_app):
    async with AsyncClient(transport=ASGITransport(app=secured_app), base_url="http://test") as client:
        response = await client.get("/api/v1/events", headers={"X-API-Key": "nope"})

    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Unauthorized", "message": "Invalid API key"}


@pytest.mark.asyncio
async def test_reader_cannot_write(secured_app):
    async with AsyncClient(transport=ASGITransport(app=secured_app), base_url="http://test") as client:
        listed = await client.get("/api/v1/events", headers={"X-API-Key": "reader-key"})
        created = await client.post(
            "/api/v1/events",
            json={"name": "Signed Up", "type": "track", "description": "d"},
            headers={"X-API-Key": "reader-key"}
        )

    assert listed.status_code == 200
    assert created.status_code == 403
    assert created.json()["error"] == "Forbidden"
    assert "write" in created.json()["message"]


@pytest.mark.asyncio
async def test_delete_needs_delete_permission(secured_app):
    async with AsyncClient(transport=ASGITransport(app=secured_app), base_url="http://test") as client:
        created = await client.post(
            "/api/v1/events",
            json={"name": "Signed Up", "type": "track", "description": "d"},
            headers={"X-API-Key": "writer-key"}
        )
        event_id = created.json()["data"]["id"]

        denied = await client.delete(f"/api/v1/events/{event_id}", headers={"X-API-Key": "writer-key"})
        allowed = await client.delete(f"/api/v1/events/{event_id}", headers={"X-API-Key": "admin-key"})

    assert denied.status_code == 403
    assert allowed.status_code == 200


@pytest.mark.asyncio
async def test_permissions_endpoint(secured_app):
    async with AsyncClient(transport=ASGITransport(app=secured_app), base_url="http://test") as client:
        response = await client.get("/api/v1/auth/permissions", headers={"X-API-Key": "writer-key"})

    assert response.status_code == 200
    assert response.json()["data"] == {"permissions": ["read", "write"]}
