"""Health probes — liveness and database readiness."""

from unittest.mock import AsyncMock


async def test_liveness(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


async def test_readiness_with_database(client):
    resp = await client.get("/health/ready")
    assert resp.status_code == 200
    assert resp.json()["checks"] == {"database": "healthy"}


async def test_readiness_without_database(app, client):
    app.state.db_manager.health_check = AsyncMock(return_value=False)
    resp = await client.get("/health/ready")
    assert resp.status_code == 503
    assert resp.json() == {"status": "not_ready", "reason": "database_unavailable"}
