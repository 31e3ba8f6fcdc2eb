"""
Postboard Backend — Health, Middleware & Error Body Tests
"""

import pytest


@pytest.mark.asyncio
async def test_health_reports_database(test_client):
    response = await test_client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"


@pytest.mark.asyncio
async def test_request_id_generated_and_echoed(test_client):
    generated = await test_client.get("/health")
    echoed = await test_client.get("/health", headers={"X-Request-ID": "trace-123"})

    assert len(generated.headers["X-Request-ID"]) == 8
    assert echoed.headers["X-Request-ID"] == "trace-123"


class TestFrameworkErrorBodies:

    @pytest.mark.asyncio
    async def test_unknown_route(self, test_client):
        response = await test_client.get("/api/nothing-here")

        assert response.status_code == 404
        assert response.json() == {"msg": "Not Found"}

    @pytest.mark.asyncio
    async def test_wrong_method(self, test_client):
        response = await test_client.delete("/api/auth")

        assert response.status_code == 405
        assert response.json() == {"msg": "Method Not Allowed"}
        assert "GET" in response.headers["allow"]

    @pytest.mark.asyncio
    async def test_undecodable_body(self, test_client):
        response = await test_client.post(
            "/api/auth",
            content=b'{"email": "\xff"}',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"msg": "There was an error parsing the body"}
