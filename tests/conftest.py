"""Shared fixtures for the API tests.

The control plane runs on an in-memory SQLite database. Tenant schemas
are replaced by FakeTenantConnection, which records every query and
answers from canned results keyed by SQL fragments.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_ACCESS_SECRET"] = "test-access-secret"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret"
os.environ["ADMIN_EMAIL"] = "root@advocacia.test"
os.environ["ADMIN_PASSWORD"] = "admin-password"

import uuid
from collections.abc import AsyncGenerator
from typing import Any, Optional

import pytest
from fastapi import Depends
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.deps import get_current_user, get_tenant_connection
from app.core.email import get_email_service
from app.core.provisioning import get_provisioner
from app.core.security import create_access_token, get_password_hash
from app.database import Base, get_db
from app.database.session import engine_options
from app.database.tenant import render_sql, schema_name_for
from app.main import app as fastapi_app
from app.models import AdminUser, Tenant, User
from app.services.base import AuthenticatedUser

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
PASSWORD = "senha-segura-123"


class FakeTenantConnection:
    """Stand-in for TenantConnection that records calls."""

    def __init__(self, schema: Optional[str] = None):
        self.schema = schema or schema_name_for(uuid.uuid4())
        self.calls: list[tuple[str, str, tuple]] = []
        self._results: list[tuple[str, str, Any]] = []

    def on(self, needle: str, result: Any, method: Optional[str] = None):
        """Answer queries containing `needle` (callables receive the args)."""
        self._results.append((needle, method, result))
        return self

    def queries(self, method: Optional[str] = None) -> list[tuple[str, tuple]]:
        return [(sql, args) for m, sql, args in self.calls if method in (None, m)]

    def find(self, needle: str) -> list[tuple[str, tuple]]:
        return [(sql, args) for _, sql, args in self.calls if needle in sql]

    async def _answer(self, method: str, sql: str, args: tuple, default: Any) -> Any:
        # Every query must render against a valid tenant schema
        render_sql(sql, self.schema)
        self.calls.append((method, sql, args))
        for needle, only, result in reversed(self._results):
            if needle in sql and only in (None, method):
                return result(*args) if callable(result) else result
        return default

    async def fetch(self, sql: str, *args) -> list[dict]:
        return await self._answer("fetch", sql, args, [])

    async def fetchrow(self, sql: str, *args) -> Optional[dict]:
        return await self._answer("fetchrow", sql, args, None)

    async def fetchval(self, sql: str, *args) -> Any:
        return await self._answer("fetchval", sql, args, 0)

    async def execute(self, sql: str, *args) -> str:
        return await self._answer("execute", sql, args, "OK")


class FakeProvisioner:
    def __init__(self):
        self.created: list[str] = []
        self.dropped: list[str] = []

    async def schema_exists(self, schema: str) -> bool:
        return schema in self.created

    async def create_schema(self, schema: str) -> bool:
        self.created.append(schema)
        return True

    async def drop_schema(self, schema: str) -> bool:
        self.dropped.append(schema)
        return True

    async def check_schema(self, schema: str):
        return True, {"schema": schema, "status": "healthy"}

    async def tenant_stats(self, schema: str) -> dict:
        return {"clients": 0, "projects": 0, "tasks": 0}


class FakeEmailService:
    def __init__(self, configured: bool = True, succeed: bool = True):
        self.configured = configured
        self.succeed = succeed
        self.sent: list[dict] = []

    def is_configured(self) -> bool:
        return self.configured

    def send_billing_document(self, to_email, receiver_name, sender_name, document_label,
                              number, title, total, due_date, pdf_content) -> bool:
        self.sent.append({
            "to": to_email,
            "label": document_label,
            "number": number,
            "total": total,
            "pdf": pdf_content,
        })
        return self.succeed


def make_user(account_type: str = "gerencial", tenant_id: Optional[str] = None, **kwargs) -> AuthenticatedUser:
    """AuthenticatedUser for service-level tests."""
    return AuthenticatedUser(
        id=kwargs.get("id", str(uuid.uuid4())),
        tenant_id=tenant_id or str(uuid.uuid4()),
        tenant_name=kwargs.get("tenant_name", "Escritório Teste"),
        email=kwargs.get("email", f"{account_type}@escritorio.test"),
        name=kwargs.get("name", f"Usuário {account_type.capitalize()}"),
        account_type=account_type,
    )


def token_for(user: User, **overrides) -> str:
    claims = {
        "sub": user.id,
        "userId": user.id,
        "email": user.email,
        "name": user.name,
        "tenantId": user.tenant_id,
        "accountType": user.account_type,
    }
    claims.update(overrides)
    return create_access_token(claims)


def headers_for(user: User, **overrides) -> dict[str, str]:
    return {"Authorization": f"Bearer {token_for(user, **overrides)}"}


@pytest.fixture
async def test_engine():
    """In-memory control plane shared by every session of the test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        **engine_options(TEST_DATABASE_URL),
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_conn() -> FakeTenantConnection:
    return FakeTenantConnection()


@pytest.fixture
def fake_provisioner() -> FakeProvisioner:
    return FakeProvisioner()


@pytest.fixture
def fake_email() -> FakeEmailService:
    return FakeEmailService()


@pytest.fixture
def app(session_factory, fake_conn, fake_provisioner, fake_email):
    """App with the control plane, tenant pool, provisioner and SMTP replaced."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    def override_tenant_connection(user: AuthenticatedUser = Depends(get_current_user)):
        fake_conn.schema = user.schema_name
        return fake_conn

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_tenant_connection] = override_tenant_connection
    fastapi_app.dependency_overrides[get_provisioner] = lambda: fake_provisioner
    fastapi_app.dependency_overrides[get_email_service] = lambda: fake_email
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http


async def create_tenant_row(session: AsyncSession, name: str = "Escritório Teste", **kwargs) -> Tenant:
    tenant_id = str(uuid.uuid4())
    tenant = Tenant(
        id=tenant_id,
        name=name,
        schema_name=schema_name_for(tenant_id),
        plan_type=kwargs.pop("plan_type", "basic"),
        is_active=kwargs.pop("is_active", True),
        **kwargs,
    )
    session.add(tenant)
    await session.commit()
    return tenant


async def create_user_row(
    session: AsyncSession,
    tenant: Tenant,
    account_type: str,
    email: Optional[str] = None,
    is_active: bool = True,
) -> User:
    user = User(
        tenant_id=tenant.id,
        email=email or f"{account_type}.{uuid.uuid4().hex[:6]}@escritorio.test",
        password_hash=get_password_hash(PASSWORD),
        name=f"Usuário {account_type.capitalize()}",
        account_type=account_type,
        is_active=is_active,
    )
    user.tenant = tenant
    session.add(user)
    await session.commit()
    return user


@pytest.fixture
async def tenant(db_session: AsyncSession) -> Tenant:
    return await create_tenant_row(db_session, max_users_simples=5, max_users_composta=5)


@pytest.fixture
async def gerencial_user(db_session: AsyncSession, tenant: Tenant) -> User:
    return await create_user_row(db_session, tenant, "gerencial", email="gerente@escritorio.test")


@pytest.fixture
async def composta_user(db_session: AsyncSession, tenant: Tenant) -> User:
    return await create_user_row(db_session, tenant, "composta", email="financeiro@escritorio.test")


@pytest.fixture
async def simples_user(db_session: AsyncSession, tenant: Tenant) -> User:
    return await create_user_row(db_session, tenant, "simples", email="atendimento@escritorio.test")


@pytest.fixture
def gerencial_headers(gerencial_user: User) -> dict[str, str]:
    return headers_for(gerencial_user)


@pytest.fixture
def composta_headers(composta_user: User) -> dict[str, str]:
    return headers_for(composta_user)


@pytest.fixture
def simples_headers(simples_user: User) -> dict[str, str]:
    return headers_for(simples_user)


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> AdminUser:
    admin = AdminUser(
        email="admin@advocacia.test",
        password_hash=get_password_hash(PASSWORD),
        name="Administrador",
        role="super_admin",
        is_active=True,
    )
    db_session.add(admin)
    await db_session.commit()
    return admin


@pytest.fixture
def admin_headers(admin_user: AdminUser) -> dict[str, str]:
    token = create_access_token({
        "sub": admin_user.id,
        "userId": admin_user.id,
        "email": admin_user.email,
        "name": admin_user.name,
        "role": admin_user.role,
    })
    return {"Authorization": f"Bearer {token}"}
