"""Tests for password hashing, tokens and tenant schema helpers."""

import uuid
from contextlib import asynccontextmanager
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import asyncpg
import pytest
from jose import ExpiredSignatureError, JWTError

from app.core.config import settings
from app.core.exceptions import ConflictError, DatabaseQueryError
from app.core.security import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
    generate_registration_key,
    get_password_hash,
    hash_token,
    verify_password,
)
from app.core.tenant_schema import TENANT_SCHEMA_SQL, TENANT_TABLES
from app.database.tenant import (
    TenantConnection,
    TenantDatabase,
    render_sql,
    row_to_dict,
    schema_name_for,
    validate_schema_name,
)
from app.services.base import format_time_ago, tenant_now


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = get_password_hash("segredo")
        assert hashed != "segredo"
        assert verify_password("segredo", hashed)
        assert not verify_password("outro", hashed)

    def test_corrupted_hash_does_not_verify(self):
        assert verify_password("segredo", "não-é-um-hash") is False

    def test_registration_key_format(self):
        key = generate_registration_key()
        assert len(key) == 64
        int(key, 16)


class TestTokens:
    def test_access_token_carries_type(self):
        token = create_access_token({"sub": "u1", "tenantId": "t1"})
        payload = decode_access_token(token)
        assert payload["type"] == ACCESS_TOKEN_TYPE
        assert payload["tenantId"] == "t1"

    def test_refresh_tokens_are_unique(self):
        first, expires_at = create_refresh_token({"sub": "u1"})
        second, _ = create_refresh_token({"sub": "u1"})
        assert first != second
        assert decode_refresh_token(first)["type"] == REFRESH_TOKEN_TYPE
        assert expires_at > datetime.utcnow()

    def test_refresh_token_is_not_an_access_token(self):
        token, _ = create_refresh_token({"sub": "u1"})
        with pytest.raises(JWTError):
            decode_access_token(token)

    def test_expired_access_token(self):
        token = create_access_token({"sub": "u1"}, expires_delta=timedelta(seconds=-1))
        with pytest.raises(ExpiredSignatureError):
            decode_access_token(token)

    def test_hash_token_is_stable(self):
        assert hash_token("abc") == hash_token("abc")
        assert len(hash_token("abc")) == 64


class TestTenantSchemas:
    def test_schema_name_from_tenant_id(self):
        tenant_id = uuid.uuid4()
        assert schema_name_for(str(tenant_id)) == f"tenant_{tenant_id.hex}"

    def test_invalid_tenant_id(self):
        with pytest.raises(ValueError):
            schema_name_for("não-é-uuid")

    @pytest.mark.parametrize("schema", ["public", "tenant_123", 'tenant_x"; DROP SCHEMA admin; --', ""])
    def test_rejects_unsafe_schema_names(self, schema):
        with pytest.raises(ValueError):
            validate_schema_name(schema)

    def test_render_replaces_every_placeholder(self):
        schema = schema_name_for(str(uuid.uuid4()))
        sql = render_sql("SELECT * FROM ${schema}.a JOIN ${schema}.b ON true", schema)
        assert "${schema}" not in sql
        assert sql.count(f'"{schema}"') == 2

    def test_provisioning_sql_renders(self):
        schema = schema_name_for(str(uuid.uuid4()))
        sql = render_sql(TENANT_SCHEMA_SQL, schema)
        for table in TENANT_TABLES:
            assert f'"{schema}".{table}' in sql

    def test_row_to_dict(self):
        row_id = uuid.uuid4()
        row = row_to_dict({
            "id": row_id,
            "amount": Decimal("10.50"),
            "due_date": date(2026, 10, 1),
            "name": "x",
        })
        assert row == {"id": str(row_id), "amount": 10.5, "due_date": "2026-10-01", "name": "x"}
        assert row_to_dict(None) is None


class TestTimeAgo:
    NOW = datetime(2026, 10, 19, 12, 0, 0)

    @pytest.mark.parametrize("delta, expected", [
        (timedelta(seconds=30), "Agora mesmo"),
        (timedelta(minutes=5), "5 minutos atrás"),
        (timedelta(hours=3), "3 horas atrás"),
        (timedelta(days=2), "2 dias atrás"),
        (timedelta(days=40), "09/09/2026"),
    ])
    def test_relative_times(self, delta, expected):
        assert format_time_ago(self.NOW - delta, now=self.NOW) == expected

    def test_accepts_iso_strings(self):
        assert format_time_ago("2026-10-19T11:00:00", now=self.NOW) == "1 horas atrás"

    def test_aware_values_use_the_tenant_time_zone(self, monkeypatch):
        monkeypatch.setattr(settings, "TENANT_DB_TIMEZONE", "America/Sao_Paulo")
        # 14:00 UTC is 11:00 in São Paulo
        moment = datetime(2026, 10, 19, 14, 0, tzinfo=timezone.utc)
        assert format_time_ago(moment, now=self.NOW) == "1 horas atrás"

    def test_fresh_rows_are_recent_in_any_zone(self, monkeypatch):
        monkeypatch.setattr(settings, "TENANT_DB_TIMEZONE", "America/Sao_Paulo")
        created_at = tenant_now() - timedelta(minutes=5)
        assert format_time_ago(created_at) == "5 minutos atrás"


class StubConnection:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.queries = []

    async def _run(self, query, *args):
        self.queries.append((query, args))
        if self.error:
            raise self.error
        return self.result

    fetch = fetchrow = fetchval = execute = _run


class StubDatabase:
    def __init__(self, conn):
        self.conn = conn

    @asynccontextmanager
    async def acquire(self):
        yield self.conn


class TestTenantConnection:
    SCHEMA = "tenant_" + "a" * 32

    def connection(self, **stub) -> tuple[TenantConnection, StubConnection]:
        conn = StubConnection(**stub)
        return TenantConnection(StubDatabase(conn), self.SCHEMA), conn

    async def test_fetchrow_renders_schema_and_converts_row(self):
        row_id = uuid.uuid4()
        tenant_conn, conn = self.connection(result={
            "id": row_id,
            "valor": Decimal("99.90"),
            "created_at": datetime(2026, 10, 19, 9, 30),
        })

        row = await tenant_conn.fetchrow("SELECT * FROM ${schema}.invoices WHERE id = $1", str(row_id))

        assert row == {"id": str(row_id), "valor": 99.9, "created_at": "2026-10-19T09:30:00"}
        assert conn.queries == [(f'SELECT * FROM "{self.SCHEMA}".invoices WHERE id = $1', (str(row_id),))]

    async def test_fetch_converts_every_row(self):
        tenant_conn, _ = self.connection(result=[{"due": date(2026, 1, 5)}, {"due": None}])
        assert await tenant_conn.fetch("SELECT due FROM ${schema}.tasks") == [{"due": "2026-01-05"}, {"due": None}]

    async def test_fetchrow_without_match(self):
        tenant_conn, _ = self.connection(result=None)
        assert await tenant_conn.fetchrow("SELECT * FROM ${schema}.tasks WHERE id = $1", "x") is None

    async def test_unique_violation_becomes_conflict(self):
        tenant_conn, _ = self.connection(error=asyncpg.UniqueViolationError("duplicate key value"))

        with pytest.raises(ConflictError) as exc_info:
            await tenant_conn.execute("INSERT INTO ${schema}.clients (name) VALUES ($1)", "Ana")

        assert exc_info.value.message == "Registro duplicado"
        assert exc_info.value.status_code == 409

    async def test_other_database_errors_become_query_errors(self):
        tenant_conn, _ = self.connection(error=asyncpg.UndefinedTableError('relation "clients" does not exist'))

        with pytest.raises(DatabaseQueryError) as exc_info:
            await tenant_conn.fetch("SELECT * FROM ${schema}.clients")

        assert exc_info.value.status_code == 500

    def test_rejects_invalid_schema(self):
        with pytest.raises(ValueError):
            TenantConnection(StubDatabase(StubConnection()), "public")

    async def test_pool_session_uses_configured_time_zone(self, monkeypatch):
        captured = {}

        async def create_pool(dsn, **kwargs):
            captured.update(kwargs, dsn=dsn)
            return object()

        monkeypatch.setattr(asyncpg, "create_pool", create_pool)
        monkeypatch.setattr(settings, "TENANT_DB_TIMEZONE", "America/Sao_Paulo")

        database = TenantDatabase(dsn="postgresql://localhost/advocacia")
        await database.connect()

        assert database.is_connected
        assert captured["dsn"] == "postgresql://localhost/advocacia"
        assert captured["server_settings"] == {"timezone": "America/Sao_Paulo"}
