"""Tests for tenant isolation, account-type gates and tenant settings."""

import uuid
from datetime import timedelta

from sqlalchemy import select

from app.core.security import create_access_token
from app.models import SystemLog

from .conftest import create_tenant_row, create_user_row, headers_for


class TestTenantBinding:
    async def test_requests_run_in_the_users_schema(self, client, fake_conn, tenant, gerencial_headers):
        response = await client.get("/api/clients", headers=gerencial_headers)
        assert response.status_code == 200
        assert fake_conn.schema == "tenant_" + uuid.UUID(tenant.id).hex
        assert "${schema}.clients" in fake_conn.queries("fetch")[0][0]

    async def test_forged_tenant_claim_is_blocked_and_logged(
        self, client, db_session, fake_conn, gerencial_user
    ):
        other = await create_tenant_row(db_session, name="Outro Escritório")
        headers = headers_for(gerencial_user, tenantId=other.id)

        response = await client.get("/api/clients", headers=headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "Acesso entre tenants negado"
        assert fake_conn.calls == []

        logs = (await db_session.execute(
            select(SystemLog).where(SystemLog.level == "critical")
        )).scalars().all()
        assert len(logs) == 1
        assert logs[0].metadata_["tokenTenantId"] == other.id

    async def test_suspended_tenant_is_blocked(self, client, db_session, tenant, gerencial_headers):
        tenant.is_active = False
        await db_session.commit()
        response = await client.get("/api/clients", headers=gerencial_headers)
        assert response.status_code == 403

    async def test_expired_token_asks_for_refresh(self, client, fake_conn, gerencial_user):
        token = create_access_token(
            {
                "sub": gerencial_user.id,
                "userId": gerencial_user.id,
                "tenantId": gerencial_user.tenant_id,
                "accountType": gerencial_user.account_type,
            },
            expires_delta=timedelta(seconds=-5),
        )

        response = await client.get("/api/clients", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["detail"] == {"error": "Token expirado", "code": "TOKEN_EXPIRED"}
        assert fake_conn.calls == []

    async def test_invalid_token(self, client):
        response = await client.get("/api/clients", headers={"Authorization": "Bearer nao-e-um-jwt"})
        assert response.status_code == 403

    async def test_users_of_other_tenants_see_their_own_schema(self, client, db_session, fake_conn):
        other = await create_tenant_row(db_session, name="Outro Escritório")
        user = await create_user_row(db_session, other, "gerencial")
        await client.get("/api/tasks", headers=headers_for(user))
        assert fake_conn.schema == other.schema_name


class TestAccountTypes:
    async def test_simples_cannot_use_cashflow(self, client, simples_headers, fake_conn):
        response = await client.get("/api/cashflow", headers=simples_headers)
        assert response.status_code == 403
        detail = response.json()["detail"]
        assert detail["required"] == ["composta", "gerencial"]
        assert detail["current"] == "simples"
        assert fake_conn.calls == []

    async def test_simples_gets_zeroed_financial_stats(self, client, simples_headers, fake_conn):
        response = await client.get("/api/cashflow/stats", headers=simples_headers)
        assert response.status_code == 200
        assert response.json()["balance"] == 0
        assert fake_conn.calls == []

    async def test_composta_can_use_cashflow(self, client, composta_headers):
        response = await client.get("/api/cashflow", headers=composta_headers)
        assert response.status_code == 200

    async def test_settings_are_gerencial_only(self, client, composta_headers):
        response = await client.get("/api/settings", headers=composta_headers)
        assert response.status_code == 403


class TestSettings:
    async def test_get_settings_reports_usage(self, client, gerencial_headers, simples_user, tenant):
        response = await client.get("/api/settings", headers=gerencial_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["tenant"]["id"] == tenant.id
        assert data["usage"]["gerencial"] == {"used": 1, "limit": 1}
        assert data["usage"]["simples"] == {"used": 1, "limit": 5}
        assert data["usage"]["composta"]["used"] == 0

    async def test_update_settings(self, client, gerencial_headers):
        response = await client.put(
            "/api/settings",
            json={"name": "Silva Advocacia", "domain": "silva.adv.br"},
            headers=gerencial_headers,
        )
        assert response.status_code == 200
        assert response.json()["tenant"]["name"] == "Silva Advocacia"
        assert response.json()["tenant"]["domain"] == "silva.adv.br"

    async def test_list_active_users(self, client, db_session, tenant, gerencial_headers, simples_user):
        await create_user_row(db_session, tenant, "composta", is_active=False)
        response = await client.get("/api/settings/users", headers=gerencial_headers)
        assert response.status_code == 200
        assert {user["accountType"] for user in response.json()["users"]} == {"gerencial", "simples"}
