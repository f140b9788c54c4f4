import pytest


pytestmark = pytest.mark.asyncio


async def test_health_endpoints(client):
    health = await client.get("/api/v1/health")
    readiness = await client.get("/api/v1/readiness")

    assert health.status_code == 200
    body = health.json()
    assert body["status"] == "healthy"
    assert body["service"] == "Cookite Reservations API"
    assert body["timestamp"]
    assert readiness.status_code == 200
    assert readiness.json() == {"ready": True}
