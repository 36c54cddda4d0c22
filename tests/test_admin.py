"""Tests for the admin console: admin auth, registration keys, tenants and metrics."""

import pytest
from sqlalchemy import select

from app.models import RegistrationKey, SystemLog, Tenant, User
from app.schemas.admin import TenantCreate
from app.services.tenants import create_tenant_from_request, delete_tenant

from .conftest import PASSWORD, create_user_row


class TestAdminAuth:
    async def test_setup_creates_super_admin_once(self, client, db_session):
        response = await client.post("/api/admin/auth/setup")
        assert response.status_code == 201
        assert response.json()["admin"]["role"] == "super_admin"
        assert response.json()["admin"]["email"] == "root@advocacia.test"

        again = await client.post("/api/admin/auth/setup")
        assert again.status_code == 400
        assert again.json()["detail"] == "Setup já realizado"

    async def test_login_tokens_carry_role(self, client, admin_user):
        response = await client.post(
            "/api/admin/auth/login",
            json={"email": admin_user.email, "password": PASSWORD}
        )
        assert response.status_code == 200
        access = response.json()["tokens"]["accessToken"]

        me = await client.get("/api/admin/auth/me", headers={"Authorization": f"Bearer {access}"})
        assert me.status_code == 200
        assert me.json()["admin"]["role"] == "super_admin"

    async def test_admin_refresh_uses_shared_endpoint(self, client, admin_user):
        tokens = (await client.post(
            "/api/admin/auth/login",
            json={"email": admin_user.email, "password": PASSWORD}
        )).json()["tokens"]
        response = await client.post("/api/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
        assert response.status_code == 200
        assert response.json()["user"]["role"] == "super_admin"

    async def test_bad_credentials(self, client, admin_user):
        response = await client.post(
            "/api/admin/auth/login",
            json={"email": admin_user.email, "password": "errada"}
        )
        assert response.status_code == 401

    async def test_user_token_cannot_reach_admin(self, client, gerencial_headers):
        response = await client.get("/api/admin/tenants", headers=gerencial_headers)
        assert response.status_code == 403

    async def test_admin_token_cannot_reach_tenant_data(self, client, admin_headers):
        response = await client.get("/api/clients", headers=admin_headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "Token inválido"


class TestRegistrationKeys:
    async def test_create_returns_plain_key_once(self, client, db_session, admin_headers, admin_user):
        response = await client.post(
            "/api/admin/keys",
            json={"accountType": "COMPOSTA", "usesAllowed": 3, "singleUse": False},
            headers=admin_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert len(data["key"]) == 64
        assert data["metadata"]["accountType"] == "composta"
        assert data["metadata"]["usesAllowed"] == 3
        assert data["metadata"]["singleUse"] is False

        stored = (await db_session.execute(select(RegistrationKey))).scalar_one()
        assert stored.key_hash != data["key"]
        assert stored.key_prefix == data["key"][:8]
        assert stored.created_by == admin_user.id

    async def test_invalid_account_type(self, client, admin_headers):
        response = await client.post("/api/admin/keys", json={"accountType": "root"}, headers=admin_headers)
        assert response.status_code == 422

    async def test_unknown_tenant(self, client, admin_headers):
        response = await client.post(
            "/api/admin/keys",
            json={"accountType": "simples", "tenantId": "00000000-0000-0000-0000-000000000000"},
            headers=admin_headers,
        )
        assert response.status_code == 404

    async def test_list_hides_hashes_and_filters_by_tenant(self, client, admin_headers, tenant):
        await client.post("/api/admin/keys", json={"accountType": "simples", "tenantId": tenant.id}, headers=admin_headers)
        await client.post("/api/admin/keys", json={"accountType": "gerencial"}, headers=admin_headers)

        all_keys = (await client.get("/api/admin/keys", headers=admin_headers)).json()["keys"]
        assert len(all_keys) == 2
        assert all("keyHash" not in key and "key_hash" not in key for key in all_keys)

        filtered = (await client.get(f"/api/admin/keys?tenantId={tenant.id}", headers=admin_headers)).json()["keys"]
        assert len(filtered) == 1
        assert filtered[0]["tenant"] == {"id": tenant.id, "name": tenant.name}
        assert filtered[0]["usageCount"] == 0

    async def test_revoked_key_cannot_register(self, client, admin_headers):
        created = (await client.post("/api/admin/keys", json={"accountType": "simples"}, headers=admin_headers)).json()
        revoke = await client.patch(f"/api/admin/keys/{created['id']}/revoke", headers=admin_headers)
        assert revoke.status_code == 200

        response = await client.post("/api/auth/register", json={
            "email": "tarde@escritorio.test",
            "password": "senha-forte-1",
            "name": "Atrasado",
            "key": created["key"],
        })
        assert response.status_code == 400

    async def test_usage_lists_registrations(self, client, admin_headers):
        created = (await client.post(
            "/api/admin/keys",
            json={"accountType": "simples", "usesAllowed": 2, "singleUse": False},
            headers=admin_headers,
        )).json()
        await client.post("/api/auth/register", json={
            "email": "primeiro@escritorio.test",
            "password": "senha-forte-1",
            "name": "Primeiro",
            "key": created["key"],
        })

        usage = (await client.get(f"/api/admin/keys/{created['id']}/usage", headers=admin_headers)).json()
        assert usage["usesAllowed"] == 2
        assert usage["usesLeft"] == 1
        assert usage["revoked"] is False
        assert usage["usedLogs"][0]["email"] == "primeiro@escritorio.test"

    async def test_missing_key_usage(self, client, admin_headers):
        response = await client.get("/api/admin/keys/nao-existe/usage", headers=admin_headers)
        assert response.status_code == 404


class TestTenants:
    async def test_create_provisions_schema(self, client, db_session, admin_headers, fake_provisioner):
        response = await client.post(
            "/api/admin/tenants",
            json={"name": "Costa & Lima", "planType": "premium", "maxUsers": 10, "maxStorage": 50},
            headers=admin_headers,
        )
        assert response.status_code == 201
        tenant = response.json()["tenant"]
        assert tenant["schema_name"] == "tenant_" + tenant["id"].replace("-", "")
        assert tenant["max_users_simples"] == 10
        assert tenant["max_storage_gb"] == 50
        assert fake_provisioner.created == [tenant["schema_name"]]

    async def test_list_includes_counts_and_stats(self, client, admin_headers, tenant, gerencial_user, simples_user):
        response = await client.get("/api/admin/tenants", headers=admin_headers)
        assert response.status_code == 200
        listed = next(item for item in response.json()["tenants"] if item["id"] == tenant.id)
        assert listed["userCount"] == 2
        assert listed["maxUsers"]["simples"] == 5
        assert listed["stats"] == {"clients": 0, "projects": 0, "tasks": 0}

    async def test_update_quotas_and_suspend(self, client, admin_headers, tenant, gerencial_user):
        response = await client.patch(
            f"/api/admin/tenants/{tenant.id}",
            json={"maxUsersGerencial": 3, "isActive": False},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["tenant"]["max_users_gerencial"] == 3
        assert response.json()["tenant"]["is_active"] is False

        login = await client.post(
            "/api/auth/login", json={"email": gerencial_user.email, "password": PASSWORD}
        )
        assert login.status_code == 403

    async def test_tenant_users(self, client, admin_headers, tenant, gerencial_user, simples_user):
        response = await client.get(f"/api/admin/tenants/{tenant.id}/users", headers=admin_headers)
        assert response.status_code == 200
        emails = {user["email"] for user in response.json()["users"]}
        assert emails == {gerencial_user.email, simples_user.email}

    async def test_delete_removes_schema_and_users(
        self, client, db_session, admin_headers, tenant, gerencial_user, fake_provisioner
    ):
        schema = tenant.schema_name
        response = await client.delete(f"/api/admin/tenants/{tenant.id}", headers=admin_headers)
        assert response.status_code == 200
        assert fake_provisioner.dropped == [schema]

        db_session.expunge_all()
        assert await db_session.get(Tenant, tenant.id) is None
        remaining = (await db_session.execute(select(User).where(User.tenant_id == tenant.id))).scalars().all()
        assert remaining == []

    async def test_failed_commit_drops_new_schema(self, db_session, fake_provisioner, monkeypatch):
        async def broken_commit():
            raise RuntimeError("conexão perdida")

        monkeypatch.setattr(db_session, "commit", broken_commit)
        with pytest.raises(RuntimeError):
            await create_tenant_from_request(db_session, fake_provisioner, TenantCreate(name="Costa & Lima"))

        assert len(fake_provisioner.created) == 1
        assert fake_provisioner.dropped == fake_provisioner.created
        assert (await db_session.execute(select(Tenant))).scalars().all() == []

    async def test_failed_delete_keeps_schema(self, db_session, tenant, fake_provisioner, monkeypatch):
        tenant_id = tenant.id

        async def broken_commit():
            raise RuntimeError("conexão perdida")

        monkeypatch.setattr(db_session, "commit", broken_commit)
        with pytest.raises(RuntimeError):
            await delete_tenant(db_session, fake_provisioner, tenant_id)
        await db_session.rollback()

        assert fake_provisioner.dropped == []
        assert await db_session.get(Tenant, tenant_id) is not None

    async def test_unknown_tenant(self, client, admin_headers):
        response = await client.delete("/api/admin/tenants/nao-existe", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Tenant não encontrado"


class TestMetrics:
    async def test_metrics(self, client, db_session, admin_headers, tenant, gerencial_user):
        await create_user_row(db_session, tenant, "simples", is_active=False)
        await client.post("/api/admin/keys", json={"accountType": "simples"}, headers=admin_headers)
        await client.post("/api/admin/keys", json={"accountType": "simples"}, headers=admin_headers)
        db_session.add(SystemLog(tenant_id=tenant.id, level="info", message="Backup concluído"))
        await db_session.commit()

        response = await client.get("/api/admin/metrics", headers=admin_headers)
        assert response.status_code == 200
        metrics = response.json()
        assert metrics["tenants"] == {"total": 1, "active": 1}
        assert metrics["users"]["total"] == 1
        assert metrics["registrationKeys"] == [{"accountType": "simples", "count": 2}]
        assert metrics["recentActivity"][0]["tenantName"] == tenant.name

    async def test_metrics_requires_admin(self, client):
        response = await client.get("/api/admin/metrics")
        assert response.status_code == 401
