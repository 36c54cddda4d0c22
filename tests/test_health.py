"""Tests for the health and root endpoints."""

from app.api import health
from app.api.deps import get_tenant_connection


class TestHealth:
    async def test_ping(self, client):
        response = await client.get("/api/ping")
        assert response.json() == {"message": "pong"}

    async def test_health_reports_databases(self, client):
        response = await client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"]["controlPlane"] == "connected"
        assert body["database"]["tenants"] == "disconnected"

    async def test_health_unhealthy_when_control_plane_fails(self, client, monkeypatch):
        async def broken():
            raise ConnectionError("connection refused")

        monkeypatch.setattr(health, "check_db", broken)

        response = await client.get("/api/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"
        assert "connection refused" in response.json()["error"]

    async def test_root(self, client):
        response = await client.get("/")

        assert response.json()["service"] == "Advocacia SaaS API"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["X-Content-Type-Options"] == "nosniff"

    async def test_plain_health(self, client):
        response = await client.get("/health")
        assert response.json() == {"status": "healthy"}

    async def test_tenant_routes_unavailable_without_pool(self, app, client, simples_headers):
        app.dependency_overrides.pop(get_tenant_connection)

        response = await client.get("/api/clients", headers=simples_headers)

        assert response.status_code == 503
