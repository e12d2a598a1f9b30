"""Application-level tests: health, error envelope and request IDs."""

from __future__ import annotations

import uuid
from unittest.mock import MagicMock

import pytest

from src.models.enums import UserRole
from src.modules.auth import AuthenticatedUser, create_access_token


def _token(role: UserRole = UserRole.SUPPLIER, is_platform_admin: bool = False) -> str:
    user = AuthenticatedUser(
        id=uuid.uuid4(),
        email="ops@fuelgrid.co.za",
        role=role,
        is_platform_admin=is_platform_admin,
    )
    return create_access_token(user)


@pytest.mark.asyncio
async def test_health(async_client):
    response = await async_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_request_id_is_echoed(async_client):
    response = await async_client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_missing_token_uses_error_envelope(async_client):
    response = await async_client.get(
        "/api/v1/compliance/supplier/status", headers={"X-Request-ID": "req-401"}
    )

    assert response.status_code == 401
    error = response.json()["error"]
    assert error["code"] == "UNAUTHORIZED"
    assert error["requestId"] == "req-401"
    assert error["details"] == []


@pytest.mark.asyncio
async def test_invalid_token_rejected(async_client):
    response = await async_client.get(
        "/api/v1/compliance/driver/status", headers={"Authorization": "Bearer not-a-jwt"}
    )

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid or expired token"


@pytest.mark.asyncio
async def test_admin_routes_require_platform_admin(async_client):
    response = await async_client.get(
        "/api/v1/admin/compliance/pending",
        headers={"Authorization": f"Bearer {_token(UserRole.DRIVER)}"},
    )

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


@pytest.mark.asyncio
async def test_unknown_supplier_profile_is_404(async_client, mock_db):
    result = MagicMock()
    result.scalar_one_or_none.return_value = None
    mock_db.execute.return_value = result

    response = await async_client.get(
        "/api/v1/compliance/supplier/status",
        headers={"Authorization": f"Bearer {_token()}"},
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "ACTOR_NOT_FOUND"


@pytest.mark.asyncio
async def test_required_documents_table(async_client):
    response = await async_client.get("/api/v1/compliance/requirements/vehicle")

    assert response.status_code == 200
    doc_types = [r["doc_type"] for r in response.json()]
    assert doc_types[:3] == [
        "vehicle_registration",
        "roadworthy_certificate",
        "insurance_certificate",
    ]
    assert {"dg_vehicle_permit", "letter_of_authority"} <= set(doc_types)


@pytest.mark.asyncio
async def test_request_validation_uses_error_envelope(async_client):
    response = await async_client.get("/api/v1/compliance/requirements/pilot")

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"][0]["field"].startswith("path")
