"""
Advocacia SaaS - CRM Client Service
"""
import asyncio

from app.core.exceptions import NotFoundError
from app.schemas.client import ClientCreate, ClientUpdate
from .base import TenantServiceBase, changed_fields

CLIENT_GROWTH_SQL = """
    WITH monthly_clients AS (
        SELECT
            DATE_TRUNC('month', created_at) AS month,
            COUNT(*) AS new_clients,
            SUM(COUNT(*)) OVER (ORDER BY DATE_TRUNC('month', created_at)) AS cumulative_clients
        FROM ${schema}.clients
        WHERE created_at >= DATE_TRUNC('month', NOW() - INTERVAL '2 months')
        GROUP BY DATE_TRUNC('month', created_at)
    )
    SELECT
        COALESCE(
            ROUND(
                ((current_month.cumulative_clients - previous_month.cumulative_clients) * 100.0 /
                 NULLIF(previous_month.cumulative_clients, 0)), 2
            ), 0
        ) AS growth_percentage
    FROM monthly_clients current_month
    LEFT JOIN monthly_clients previous_month
        ON previous_month.month = current_month.month - INTERVAL '1 month'
    WHERE current_month.month = DATE_TRUNC('month', NOW())
"""


class ClientService(TenantServiceBase):

    async def get_all(self, search: str = None, status: str = None) -> list[dict]:
        self.require_permission("read", "crm")

        sql = "SELECT * FROM ${schema}.clients WHERE 1=1"
        params = []

        if search:
            params.append(f"%{search}%")
            sql += f" AND (name ILIKE ${len(params)} OR email ILIKE ${len(params)})"

        if status:
            params.append(status)
            sql += f" AND status = ${len(params)}"

        sql += " ORDER BY created_at DESC"

        return await self.conn.fetch(sql, *params)

    async def get_by_id(self, client_id: str) -> dict:
        self.require_permission("read", "crm")

        client = await self.conn.fetchrow(
            "SELECT * FROM ${schema}.clients WHERE id = $1",
            client_id
        )
        if not client:
            raise NotFoundError("Cliente não encontrado")
        return client

    async def create(self, data: ClientCreate) -> dict:
        self.require_permission("write", "crm")

        client = await self.conn.fetchrow(
            """
            INSERT INTO ${schema}.clients (
                name, organization, email, mobile, country, state, address,
                city, zip_code, budget, currency, level, tags, description,
                pis, cei, professional_title, marital_status, birth_date,
                cpf, rg, inss_status, amount_paid, referred_by, registered_by,
                status, created_at, updated_at
            ) VALUES (
                $1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14,
                $15, $16, $17, $18, $19, $20, $21, $22, $23, $24, $25, $26,
                NOW(), NOW()
            ) RETURNING *
            """,
            data.name, data.organization, data.email, data.mobile, data.country,
            data.state, data.address, data.city, data.zip_code, data.budget,
            data.currency, data.level, data.tags, data.description, data.pis,
            data.cei, data.professional_title, data.marital_status, data.birth_date,
            data.cpf, data.rg, data.inss_status, data.amount_paid, data.referred_by,
            self.user.name, data.status
        )

        await self.audit_log("clients", "CREATE", client["id"], None, client)
        await self.create_notification(
            "info",
            "Novo Cliente Cadastrado",
            f"{self.user.name} cadastrou novo cliente: {client['name']}",
            "client",
            "client",
            client["id"],
            {"client_id": client["id"], "page": "/crm"}
        )
        return client

    async def update(self, client_id: str, data: ClientUpdate) -> dict:
        self.require_permission("write", "crm")

        old_client = await self.get_by_id(client_id)
        client = await self.update_record("clients", client_id, changed_fields(data))
        if not client:
            raise NotFoundError("Cliente não encontrado")

        await self.audit_log("clients", "UPDATE", client_id, old_client, client)
        await self.create_notification(
            "info",
            "Cliente Atualizado",
            f"{self.user.name} editou o cliente: {client['name']}",
            "client",
            "client",
            client["id"],
            {"client_id": client["id"], "page": "/crm"}
        )
        return client

    async def delete(self, client_id: str):
        self.require_permission("write", "crm")

        client = await self.get_by_id(client_id)
        await self.conn.execute("DELETE FROM ${schema}.clients WHERE id = $1", client_id)

        await self.audit_log("clients", "DELETE", client_id, client, None)
        await self.create_notification(
            "warning",
            "Cliente Excluído",
            f"{self.user.name} excluiu o cliente: {client['name']}",
            "client",
            action_data={"client_id": client_id, "page": "/crm"}
        )

    async def get_stats(self) -> dict:
        self.require_permission("read", "crm")

        total, active, growth = await asyncio.gather(
            self.conn.fetchval("SELECT COUNT(*) FROM ${schema}.clients"),
            self.conn.fetchval("SELECT COUNT(*) FROM ${schema}.clients WHERE status = 'active'"),
            self.conn.fetchval(CLIENT_GROWTH_SQL)
        )
        return {
            "total": int(total or 0),
            "active": int(active or 0),
            "growth": float(growth or 0)
        }
