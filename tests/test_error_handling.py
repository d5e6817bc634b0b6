import pytest
from unittest.mock import patch
from httpx import AsyncClient

from app.schemas.common import fail, ok
from app.shared.core.exceptions import ConflictError, NimbusException, ResourceNotFoundError, ValidationError


def test_exception_status_codes():
    assert ValidationError("bad").status_code == 400
    assert ConflictError("taken").status_code == 400
    assert ResourceNotFoundError("gone").status_code == 404
    assert isinstance(ResourceNotFoundError("gone"), NimbusException)


@pytest.mark.asyncio
async def test_unexpected_error_is_generic_500(ac: AsyncClient, auth_headers):
    with patch(
        "app.modules.monitoring.api.v1.alerts.AlertLedger.list",
        side_effect=RuntimeError("database exploded: password=hunter2"),
    ):
        response = await ac.get("/api/v1/alerts", headers=auth_headers)

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Server error"}
    assert "hunter2" not in response.text


@pytest.mark.asyncio
async def test_unknown_route_uses_envelope(ac: AsyncClient):
    response = await ac.get("/api/v1/nothing-here")

    assert response.status_code == 404
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_malformed_body_is_400(ac: AsyncClient, auth_headers):
    response = await ac.post(
        "/api/v1/metrics",
        headers=auth_headers,
        json={"samples": []},
    )
    assert response.status_code == 400
    assert response.json()["message"].startswith("samples")


def test_envelope_helpers():
    assert fail("Nope") == {"success": False, "message": "Nope"}
    assert fail("Bad input", details={"fields": ["email"]}) == {
        "success": False,
        "message": "Bad input",
        "details": {"fields": ["email"]},
    }
    assert ok() == {"success": True}
    assert ok([1], count=1) == {"success": True, "data": [1], "count": 1}


@pytest.mark.asyncio
async def test_domain_error_details_are_returned(ac: AsyncClient, auth_headers):
    response = await ac.put(
        "/api/v1/users/connections/azure",
        headers=auth_headers,
        json={"subscription_id": "sub"},
    )

    body = response.json()
    assert response.status_code == 400
    assert body["success"] is False
    assert "tenant_id" in body["details"]["fields"]
