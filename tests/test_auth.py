"""Tests for /api/auth: login, refresh rotation, registration and profile."""

import pytest
from sqlalchemy import select
from sqlalchemy import update as sa_update

from app.core.exceptions import BadRequestError
from app.models import RegistrationKey, SystemLog, Tenant, User
from app.schemas.admin import RegistrationKeyCreate
from app.schemas.auth import RegisterRequest
from app.services.auth import AuthService
from app.services.registration_keys import INVALID_KEY, consume_key, create_key, find_usable_key

from .conftest import PASSWORD, create_tenant_row, headers_for


async def login(client, email: str, password: str = PASSWORD):
    return await client.post("/api/auth/login", json={"email": email, "password": password})


class TestLogin:
    async def test_login_returns_user_and_tokens(self, client, gerencial_user):
        response = await login(client, gerencial_user.email)
        assert response.status_code == 200
        data = response.json()
        assert data["user"]["accountType"] == "gerencial"
        assert data["user"]["tenantId"] == gerencial_user.tenant_id
        assert data["tokens"]["accessToken"]
        assert data["tokens"]["refreshToken"]

    async def test_login_is_case_insensitive_on_email(self, client, gerencial_user):
        response = await login(client, gerencial_user.email.upper())
        assert response.status_code == 200

    async def test_wrong_password(self, client, gerencial_user):
        response = await login(client, gerencial_user.email, "senha-errada")
        assert response.status_code == 401
        assert response.json()["detail"] == "Email ou senha incorretos"

    async def test_suspended_tenant_cannot_login(self, client, db_session, tenant, gerencial_user):
        tenant.is_active = False
        await db_session.commit()
        response = await login(client, gerencial_user.email)
        assert response.status_code == 403
        assert response.json()["detail"] == "Conta suspensa - contate o suporte"

    async def test_auth_responses_are_not_cached(self, client, gerencial_user):
        response = await login(client, gerencial_user.email)
        assert response.headers["Cache-Control"].startswith("no-store")
        assert response.headers["X-Frame-Options"] == "DENY"


class TestRefresh:
    async def test_refresh_rotates_tokens(self, client, gerencial_user):
        tokens = (await login(client, gerencial_user.email)).json()["tokens"]

        response = await client.post("/api/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Tokens renovados com sucesso"
        assert data["tokens"]["refreshToken"] != tokens["refreshToken"]

    async def test_reused_refresh_token_revokes_family(self, client, db_session, gerencial_user):
        first = (await login(client, gerencial_user.email)).json()["tokens"]["refreshToken"]
        second = (await client.post("/api/auth/refresh", json={"refreshToken": first})).json()["tokens"]["refreshToken"]

        reuse = await client.post("/api/auth/refresh", json={"refreshToken": first})
        assert reuse.status_code == 401

        # The legitimate token was revoked together with the reused one
        after = await client.post("/api/auth/refresh", json={"refreshToken": second})
        assert after.status_code == 401

        logs = (await db_session.execute(
            select(SystemLog).where(SystemLog.user_id == gerencial_user.id)
        )).scalars().all()
        assert any(log.level == "warning" for log in logs)

    async def test_access_token_is_not_a_refresh_token(self, client, gerencial_user):
        access = (await login(client, gerencial_user.email)).json()["tokens"]["accessToken"]
        response = await client.post("/api/auth/refresh", json={"refreshToken": access})
        assert response.status_code == 401

    async def test_logout_revokes_refresh_tokens(self, client, gerencial_user):
        tokens = (await login(client, gerencial_user.email)).json()["tokens"]
        response = await client.post(
            "/api/auth/logout",
            headers={"Authorization": f"Bearer {tokens['accessToken']}"}
        )
        assert response.status_code == 200

        refresh = await client.post("/api/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
        assert refresh.status_code == 401


class TestRegister:
    async def issue_key(self, db_session, **fields) -> str:
        plain, _ = await create_key(db_session, RegistrationKeyCreate(**fields))
        await db_session.commit()
        return plain

    async def test_register_without_tenant_creates_office(self, client, db_session, fake_provisioner):
        key = await self.issue_key(
            db_session, accountType="gerencial", metadata={"tenantName": "Souza Advogados"}
        )
        response = await client.post("/api/auth/register", json={
            "email": "novo@souza.test",
            "password": "senha-forte-1",
            "name": "Maria Souza",
            "key": key,
        })
        assert response.status_code == 201
        data = response.json()
        assert data["isNewTenant"] is True
        assert data["user"]["accountType"] == "gerencial"
        assert data["user"]["tenantName"] == "Souza Advogados"

        tenant = await db_session.get(Tenant, data["user"]["tenantId"])
        assert tenant is not None
        assert fake_provisioner.created == [tenant.schema_name]

    async def test_single_use_key_is_consumed(self, client, db_session):
        key = await self.issue_key(db_session, accountType="simples")
        payload = {"email": "a@escritorio.test", "password": "senha-forte-1", "name": "Ana", "key": key}
        assert (await client.post("/api/auth/register", json=payload)).status_code == 201

        payload["email"] = "b@escritorio.test"
        response = await client.post("/api/auth/register", json=payload)
        assert response.status_code == 400
        assert response.json()["detail"] == "Chave de registro inválida, expirada ou revogada"

        stored = (await db_session.execute(select(RegistrationKey))).scalar_one()
        await db_session.refresh(stored)
        assert stored.revoked is True
        assert stored.uses_left == 0
        assert stored.used_logs[0]["email"] == "a@escritorio.test"

    async def test_register_into_existing_tenant_respects_quota(
        self, client, db_session, tenant, gerencial_user
    ):
        key = await self.issue_key(db_session, accountType="gerencial", tenantId=tenant.id)
        response = await client.post("/api/auth/register", json={
            "email": "segundo@escritorio.test",
            "password": "senha-forte-1",
            "name": "Segundo Gerente",
            "key": key,
        })
        assert response.status_code == 403
        assert "Limite de usuários" in response.json()["detail"]

    async def test_register_into_existing_tenant(self, client, db_session, tenant, fake_provisioner):
        key = await self.issue_key(db_session, accountType="composta", tenantId=tenant.id)
        response = await client.post("/api/auth/register", json={
            "email": "contador@escritorio.test",
            "password": "senha-forte-1",
            "name": "Contador",
            "key": key,
        })
        assert response.status_code == 201
        assert response.json()["isNewTenant"] is False
        assert response.json()["user"]["tenantId"] == tenant.id
        assert fake_provisioner.created == []

    async def test_duplicate_email(self, client, db_session, gerencial_user):
        key = await self.issue_key(db_session, accountType="simples")
        response = await client.post("/api/auth/register", json={
            "email": gerencial_user.email,
            "password": "senha-forte-1",
            "name": "Duplicado",
            "key": key,
        })
        assert response.status_code == 409
        assert response.json()["detail"] == "Email já cadastrado"

    async def test_unknown_key(self, client):
        response = await client.post("/api/auth/register", json={
            "email": "x@escritorio.test",
            "password": "senha-forte-1",
            "name": "Sem Chave",
            "key": "0" * 64,
        })
        assert response.status_code == 400

    async def test_key_consumed_elsewhere_is_rejected(self, db_session):
        plain = await self.issue_key(db_session, accountType="simples")
        key = await find_usable_key(db_session, plain)
        assert key is not None and key.uses_left == 1

        # Outro cadastro esgota a chave depois da validação
        await db_session.execute(
            sa_update(RegistrationKey.__table__)
            .where(RegistrationKey.__table__.c.id == key.id)
            .values(uses_left=0)
        )

        with pytest.raises(BadRequestError) as exc:
            await consume_key(db_session, key, "atrasado@escritorio.test")
        assert exc.value.message == INVALID_KEY
        assert key.used_logs in (None, [])

    async def test_multi_use_key_keeps_remaining_uses(self, db_session):
        plain = await self.issue_key(db_session, accountType="simples", usesAllowed=2, singleUse=False)
        key = await find_usable_key(db_session, plain)

        await consume_key(db_session, key, "a@escritorio.test")
        await db_session.commit()
        assert key.uses_left == 1
        assert key.revoked is False

        await consume_key(db_session, key, "b@escritorio.test")
        await db_session.commit()
        await db_session.refresh(key)
        assert key.uses_left == 0
        assert key.revoked is True
        assert [log["email"] for log in key.used_logs] == ["a@escritorio.test", "b@escritorio.test"]

    async def test_failed_registration_drops_new_schema(self, db_session, fake_provisioner, monkeypatch):
        plain = await self.issue_key(db_session, accountType="gerencial")

        async def broken_tokens(self, principal, is_admin=False):
            raise RuntimeError("falha ao emitir tokens")

        monkeypatch.setattr(AuthService, "issue_tokens", broken_tokens)
        data = RegisterRequest(email="novo@escritorio.test", password="senha-forte-1", name="Novo", key=plain)
        with pytest.raises(RuntimeError):
            await AuthService(db_session).register(data, fake_provisioner)

        assert len(fake_provisioner.created) == 1
        assert fake_provisioner.dropped == fake_provisioner.created
        assert (await db_session.execute(select(Tenant))).scalars().all() == []
        assert (await db_session.execute(select(User))).scalars().all() == []
        stored = (await db_session.execute(select(RegistrationKey))).scalar_one()
        assert stored.uses_left == 1
        assert stored.revoked is False


class TestProfile:
    async def test_get_me(self, client, gerencial_user, gerencial_headers):
        response = await client.get("/api/auth/me", headers=gerencial_headers)
        assert response.status_code == 200
        user = response.json()["user"]
        assert user["email"] == gerencial_user.email
        assert user["planType"] == "basic"

    async def test_me_requires_token(self, client):
        response = await client.get("/api/auth/me")
        assert response.status_code == 401

    async def test_update_name(self, client, gerencial_headers):
        response = await client.put("/api/auth/me", json={"name": "Dr. Novo Nome"}, headers=gerencial_headers)
        assert response.status_code == 200
        assert response.json()["user"]["name"] == "Dr. Novo Nome"

    async def test_change_password_requires_current(self, client, gerencial_headers):
        response = await client.put(
            "/api/auth/me",
            json={"currentPassword": "errada", "newPassword": "nova-senha-123"},
            headers=gerencial_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Senha atual incorreta"

    async def test_change_password(self, client, gerencial_user, gerencial_headers):
        response = await client.put(
            "/api/auth/me",
            json={"currentPassword": PASSWORD, "newPassword": "nova-senha-123"},
            headers=gerencial_headers,
        )
        assert response.status_code == 200
        assert (await login(client, gerencial_user.email, "nova-senha-123")).status_code == 200

    async def test_inactive_user_is_rejected(self, client, db_session, tenant):
        user = User(
            tenant_id=tenant.id,
            email="inativo@escritorio.test",
            password_hash="x",
            name="Inativo",
            account_type="simples",
            is_active=False,
        )
        db_session.add(user)
        await db_session.commit()
        response = await client.get("/api/auth/me", headers=headers_for(user))
        assert response.status_code == 401
