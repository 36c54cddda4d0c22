"""
Advocacia SaaS - Tenant Schema Provisioning
Criação e remoção dos schemas tenant_<uuid> no banco compartilhado
"""
import logging
from typing import Tuple

import asyncpg

from app.database.tenant import TenantDatabase, tenant_database, render_sql, validate_schema_name
from .exceptions import ProvisioningError
from .tenant_schema import TENANT_SCHEMA_SQL, TENANT_TABLES

logger = logging.getLogger(__name__)


class TenantSchemaProvisioner:
    """
    Serviço responsável por criar e configurar o schema de cada tenant.

    Fluxo de provisionamento:
    1. Cria o schema tenant_<uuid>
    2. Cria a estrutura de tabelas (template com ${schema})
    3. Cria os índices
    Tudo dentro de uma única transação.
    """

    def __init__(self, database: TenantDatabase = None):
        self.database = database or tenant_database

    async def schema_exists(self, schema: str) -> bool:
        """Verifica se um schema existe"""
        validate_schema_name(schema)
        async with self.database.acquire() as conn:
            result = await conn.fetchval(
                "SELECT 1 FROM information_schema.schemata WHERE schema_name = $1",
                schema
            )
        return result is not None

    async def create_schema(self, schema: str) -> bool:
        """Cria o schema e toda a estrutura de tabelas do tenant"""
        validate_schema_name(schema)
        logger.info(f"Criando schema {schema}...")
        try:
            async with self.database.acquire() as conn:
                async with conn.transaction():
                    await conn.execute(f'CREATE SCHEMA IF NOT EXISTS "{schema}"')
                    await conn.execute(render_sql(TENANT_SCHEMA_SQL, schema))
        except (asyncpg.PostgresError, OSError) as e:
            logger.error(f"Erro ao criar schema {schema}: {e}")
            raise ProvisioningError(f"Erro ao criar estrutura do tenant: {e}")

        logger.info(f"Schema {schema} criado com sucesso")
        return True

    async def drop_schema(self, schema: str) -> bool:
        """
        Remove o schema do tenant e todos os seus dados.
        CUIDADO: Esta operação é irreversível!
        """
        validate_schema_name(schema)
        try:
            async with self.database.acquire() as conn:
                await conn.execute(f'DROP SCHEMA IF EXISTS "{schema}" CASCADE')
        except (asyncpg.PostgresError, OSError) as e:
            logger.error(f"Erro ao remover schema {schema}: {e}")
            raise ProvisioningError(f"Erro ao remover schema do tenant: {e}")

        logger.info(f"Schema {schema} removido")
        return True

    async def check_schema(self, schema: str) -> Tuple[bool, dict]:
        """
        Verifica se o schema do tenant está funcionando corretamente.

        Returns:
            Tuple[bool, dict]: (sucesso, informações)
        """
        try:
            validate_schema_name(schema)
            async with self.database.acquire() as conn:
                tables = await conn.fetch(
                    """
                    SELECT table_name
                    FROM information_schema.tables
                    WHERE table_schema = $1
                    """,
                    schema
                )
                names = {row["table_name"] for row in tables}
                records = {}
                for table in TENANT_TABLES:
                    if table in names:
                        records[table] = await conn.fetchval(
                            render_sql(f"SELECT COUNT(*) FROM ${{schema}}.{table}", schema)
                        )

            missing = [table for table in TENANT_TABLES if table not in names]
            return not missing, {
                "schema": schema,
                "tables": len(names),
                "missing": missing,
                "records": records,
                "status": "healthy" if not missing else "incomplete"
            }

        except (ValueError, asyncpg.PostgresError, OSError) as e:
            return False, {
                "schema": schema,
                "error": str(e),
                "status": "error"
            }

    async def tenant_stats(self, schema: str) -> dict:
        """Contagem de registros usada na listagem de tenants do admin"""
        try:
            async with self.database.acquire() as conn:
                row = await conn.fetchrow(render_sql(
                    """
                    SELECT
                        (SELECT COUNT(*) FROM ${schema}.clients) AS clients,
                        (SELECT COUNT(*) FROM ${schema}.projects) AS projects,
                        (SELECT COUNT(*) FROM ${schema}.tasks) AS tasks
                    """,
                    schema
                ))
            return {
                "clients": int(row["clients"]),
                "projects": int(row["projects"]),
                "tasks": int(row["tasks"])
            }
        except Exception as e:
            logger.warning(f"Falha ao obter estatísticas de {schema}: {e}")
            return {"clients": 0, "projects": 0, "tasks": 0, "error": "Schema não encontrado"}


# Instância global do serviço
schema_provisioner = TenantSchemaProvisioner()


def get_provisioner() -> TenantSchemaProvisioner:
    """Dependency para injetar o provisionador de schemas"""
    return schema_provisioner
