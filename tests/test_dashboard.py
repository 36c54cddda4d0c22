"""Tests for the consolidated dashboard."""

from app.services.dashboard import DashboardService

from .conftest import FakeTenantConnection, make_user

ACTIVITIES = [
    {"id": "a1", "type": "info", "title": "t", "message": "Ana cadastrou novo cliente: João",
     "category": "client", "created_at": None, "created_by": "Ana"},
    {"id": "a2", "type": "info", "title": "t", "message": "Aviso",
     "category": "publication", "created_at": None, "created_by": "Ana"},
]


def dashboard_connection() -> FakeTenantConnection:
    conn = FakeTenantConnection()
    conn.on("FROM ${schema}.notifications", ACTIVITIES, method="fetch")
    conn.on("SELECT title, due_date, status", [
        {"title": "Ação revisional", "due_date": "2026-10-20", "status": "proposal"},
    ], method="fetch")
    conn.on("SELECT numero_fatura", [
        {"numero_fatura": "FAT-001", "cliente_nome": "João", "valor": 1500,
         "data_vencimento": "2026-10-22"},
    ], method="fetch")
    conn.on("total_income", {"total_income": 10000, "total_expenses": 4000}, method="fetchrow")
    conn.on("monthly_income", {"monthly_income": 3000, "monthly_expenses": 1000}, method="fetchrow")
    conn.on("monthly_data", 12.5, method="fetchval")
    conn.on("SELECT COUNT(*) FROM ${schema}.clients", 8, method="fetchval")
    return conn


class TestDashboard:
    async def test_cards_for_gerencial(self):
        conn = dashboard_connection()
        data = await DashboardService(make_user("gerencial"), conn).get_dashboard_data()

        assert data["revenue"] == {"value": 3000.0, "change": 12.5, "trend": "up"}
        assert data["expenses"]["value"] == 1000.0
        assert data["expenses"]["trend"] == "down"
        assert data["balance"]["value"] == 2000.0
        assert data["clients"]["value"] == 8
        assert data["stats"]["financial"]["balance"] == 6000.0
        assert data["urgentProjects"][0] == {
            "name": "Ação revisional",
            "deadline": "2026-10-20",
            "status": "Com Proposta",
        }
        assert data["upcomingInvoices"][0]["amount"] == 1500.0

    async def test_simples_gets_no_financial_data(self):
        conn = dashboard_connection()
        data = await DashboardService(make_user("simples"), conn).get_dashboard_data()

        assert data["revenue"]["value"] == 0
        assert data["stats"]["financial"]["totalIncome"] == 0
        assert data["upcomingInvoices"] == []
        assert not conn.find("${schema}.cash_flow")
        assert not conn.find("${schema}.invoices")

    async def test_recent_activity_icons(self):
        conn = dashboard_connection()
        activities = await DashboardService(make_user(), conn).get_recent_activities()

        assert activities[0]["icon"] == "Users"
        assert activities[0]["color"] == "text-blue-600"
        assert activities[1]["icon"] == "Bell"
        assert activities[1]["color"] == "text-gray-600"


class TestDashboardApi:
    async def test_requires_authentication(self, client):
        response = await client.get("/api/dashboard")
        assert response.status_code == 401

    async def test_returns_dashboard(self, client, fake_conn, composta_headers):
        fake_conn.on("SELECT COUNT(*) FROM ${schema}.clients", 2, method="fetchval")

        response = await client.get("/api/dashboard", headers=composta_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["clients"]["value"] == 2
        assert body["recentActivities"] == []
        assert body["upcomingInvoices"] == []
