"""
Advocacia SaaS - Tenant Database
Pool asyncpg dos schemas de tenant e conexão por requisição

Cada escritório (tenant) tem um schema tenant_<uuid sem hífens>.
As queries são escritas com o placeholder ${schema}, reescrito aqui
para o schema do usuário autenticado.
"""
import re
import json
import uuid
import logging
from datetime import datetime, date
from decimal import Decimal
from functools import partial
from typing import Any, Optional
from contextlib import asynccontextmanager

import asyncpg

from app.core.config import settings
from app.core.exceptions import ConflictError, DatabaseQueryError

logger = logging.getLogger(__name__)

SCHEMA_PLACEHOLDER = "${schema}"
SCHEMA_NAME_PATTERN = re.compile(r"^tenant_[0-9a-f]{32}$")


def custom_json_serializer(obj):
    """Serializa tipos especiais para JSON"""
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Decimal):
        return float(obj)
    if isinstance(obj, uuid.UUID):
        return str(obj)
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


json_dumps = partial(json.dumps, default=custom_json_serializer)


def row_to_dict(row) -> Optional[dict]:
    """Converte asyncpg Record para dict serializável"""
    if row is None:
        return None
    result = dict(row)
    for key, value in result.items():
        if isinstance(value, (datetime, date)):
            result[key] = value.isoformat()
        elif isinstance(value, Decimal):
            result[key] = float(value)
        elif isinstance(value, uuid.UUID):
            result[key] = str(value)
    return result


def schema_name_for(tenant_id: str) -> str:
    """tenant_<uuid sem hífens>. Levanta ValueError para ids inválidos"""
    return f"tenant_{uuid.UUID(str(tenant_id)).hex}"


def validate_schema_name(schema: str) -> str:
    if not schema or not SCHEMA_NAME_PATTERN.match(schema):
        raise ValueError(f"Nome de schema inválido: {schema!r}")
    return schema


def render_sql(sql: str, schema: str) -> str:
    """Substitui todas as ocorrências de ${schema} pelo schema do tenant"""
    validate_schema_name(schema)
    return sql.replace(SCHEMA_PLACEHOLDER, f'"{schema}"')


async def _init_connection(conn: asyncpg.Connection):
    """Codecs JSON para colunas json/jsonb"""
    for type_name in ("json", "jsonb"):
        await conn.set_type_codec(
            type_name,
            encoder=json_dumps,
            decoder=json.loads,
            schema="pg_catalog"
        )


class TenantDatabase:
    """Pool compartilhado por todos os schemas de tenant"""

    def __init__(self, dsn: str = None):
        self.dsn = dsn or settings.tenant_dsn
        self.pool: Optional[asyncpg.Pool] = None

    @property
    def is_connected(self) -> bool:
        return self.pool is not None

    async def connect(self):
        if self.pool is not None:
            return
        self.pool = await asyncpg.create_pool(
            self.dsn,
            min_size=settings.TENANT_POOL_MIN_SIZE,
            max_size=settings.TENANT_POOL_MAX_SIZE,
            init=_init_connection,
            server_settings={"timezone": settings.TENANT_DB_TIMEZONE}
        )
        logger.info("Pool de tenants conectado")

    async def close(self):
        if self.pool is not None:
            await self.pool.close()
            self.pool = None
            logger.info("Pool de tenants encerrado")

    @asynccontextmanager
    async def acquire(self):
        if self.pool is None:
            raise DatabaseQueryError("Banco de dados dos tenants indisponível")
        async with self.pool.acquire() as conn:
            yield conn

    def connection_for(self, schema: str) -> "TenantConnection":
        return TenantConnection(self, schema)


class TenantConnection:
    """
    Conexão lógica de um tenant.

    Cada chamada adquire uma conexão própria do pool, então consultas
    independentes podem rodar em paralelo com asyncio.gather.
    """

    def __init__(self, database: TenantDatabase, schema: str):
        self.database = database
        self.schema = validate_schema_name(schema)

    def render(self, sql: str) -> str:
        return render_sql(sql, self.schema)

    async def _run(self, method: str, sql: str, *args) -> Any:
        query = self.render(sql)
        try:
            async with self.database.acquire() as conn:
                return await getattr(conn, method)(query, *args)
        except asyncpg.UniqueViolationError as e:
            logger.warning(f"Violação de unicidade em {self.schema}: {e}")
            raise ConflictError("Registro duplicado")
        except (asyncpg.PostgresError, OSError) as e:
            logger.error(f"Erro na consulta ({self.schema}): {e}")
            raise DatabaseQueryError()

    async def fetch(self, sql: str, *args) -> list[dict]:
        rows = await self._run("fetch", sql, *args)
        return [row_to_dict(row) for row in rows]

    async def fetchrow(self, sql: str, *args) -> Optional[dict]:
        row = await self._run("fetchrow", sql, *args)
        return row_to_dict(row)

    async def fetchval(self, sql: str, *args) -> Any:
        return await self._run("fetchval", sql, *args)

    async def execute(self, sql: str, *args) -> str:
        return await self._run("execute", sql, *args)


# Instância global (conectada no lifespan do app)
tenant_database = TenantDatabase()
