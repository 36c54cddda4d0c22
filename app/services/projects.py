"""
Advocacia SaaS - Project Service
"""
import asyncio

from app.core.exceptions import BadRequestError, NotFoundError
from app.schemas.project import ProjectCreate, ProjectUpdate
from .base import TenantServiceBase, changed_fields, link_value


class ProjectService(TenantServiceBase):

    async def get_all(self, search: str = None, status: str = None, priority: str = None) -> list[dict]:
        self.require_permission("read", "projects")

        sql = "SELECT * FROM ${schema}.projects WHERE 1=1"
        params = []

        if search:
            params.append(f"%{search}%")
            sql += f" AND (title ILIKE ${len(params)} OR client_name ILIKE ${len(params)})"

        if status:
            params.append(status)
            sql += f" AND status = ${len(params)}"

        if priority:
            params.append(priority)
            sql += f" AND priority = ${len(params)}"

        sql += " ORDER BY created_at DESC"

        return await self.conn.fetch(sql, *params)

    async def get_by_id(self, project_id: str) -> dict:
        self.require_permission("read", "projects")

        project = await self.conn.fetchrow(
            "SELECT * FROM ${schema}.projects WHERE id = $1",
            project_id
        )
        if not project:
            raise NotFoundError("Projeto não encontrado")
        return project

    async def _client_name(self, client_id: str):
        if not client_id:
            return None
        return await self.conn.fetchval(
            "SELECT name FROM ${schema}.clients WHERE id = $1",
            client_id
        )

    async def create(self, data: ProjectCreate) -> dict:
        self.require_permission("write", "projects")

        client_id = link_value(data.client_id)
        client_name = data.client_name
        if client_id and not client_name:
            client_name = await self._client_name(client_id)
        if not client_name:
            raise BadRequestError("Nome do cliente é obrigatório")

        project = await self.conn.fetchrow(
            """
            INSERT INTO ${schema}.projects (
                title, description, client_name, client_id, organization,
                contacts, address, budget, currency, status, start_date,
                due_date, tags, assigned_to, priority, progress, notes,
                created_by, created_at, updated_at, attachments
            ) VALUES (
                $1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14, $15, $16, $17,
                $18, NOW(), NOW(), $19
            ) RETURNING *
            """,
            data.title, data.description, client_name, client_id, data.organization,
            data.contacts, data.address, data.budget, data.currency, data.status,
            data.start_date, data.due_date, data.tags, data.assigned_to, data.priority,
            data.progress, data.notes, self.user.name, data.attachments
        )

        await self.audit_log("projects", "CREATE", project["id"], None, project)
        await self.create_notification(
            "info",
            "Novo Projeto Criado",
            f"{self.user.name} criou o projeto: {project['title']}",
            "project",
            "project",
            project["id"],
            {"project_id": project["id"], "page": "/projetos"}
        )
        return project

    async def update(self, project_id: str, data: ProjectUpdate) -> dict:
        self.require_permission("write", "projects")

        old_project = await self.get_by_id(project_id)
        fields = changed_fields(data)

        if "client_id" in fields:
            fields["client_id"] = link_value(fields["client_id"])
            if fields["client_id"] and "client_name" not in fields:
                client_name = await self._client_name(fields["client_id"])
                if client_name:
                    fields["client_name"] = client_name

        project = await self.update_record("projects", project_id, fields)
        if not project:
            raise NotFoundError("Projeto não encontrado")

        await self.audit_log("projects", "UPDATE", project_id, old_project, project)
        await self.create_notification(
            "info",
            "Projeto Atualizado",
            f"{self.user.name} editou o projeto: {project['title']}",
            "project",
            "project",
            project["id"],
            {"project_id": project["id"], "page": "/projetos"}
        )
        return project

    async def delete(self, project_id: str):
        self.require_permission("write", "projects")

        project = await self.get_by_id(project_id)
        await self.conn.execute("DELETE FROM ${schema}.projects WHERE id = $1", project_id)

        await self.audit_log("projects", "DELETE", project_id, project, None)
        await self.create_notification(
            "warning",
            "Projeto Excluído",
            f"{self.user.name} excluiu o projeto: {project['title']}",
            "project"
        )

    async def get_stats(self) -> dict:
        self.require_permission("read", "projects")

        total, active, overdue, revenue, avg_progress = await asyncio.gather(
            self.conn.fetchval("SELECT COUNT(*) FROM ${schema}.projects"),
            self.conn.fetchval(
                "SELECT COUNT(*) FROM ${schema}.projects WHERE status NOT IN ('won', 'lost')"
            ),
            self.conn.fetchval(
                """
                SELECT COUNT(*) FROM ${schema}.projects
                WHERE due_date < CURRENT_DATE AND status NOT IN ('won', 'lost')
                """
            ),
            self.conn.fetchval(
                """
                SELECT SUM(budget) FROM ${schema}.projects
                WHERE status = 'won' AND updated_at >= DATE_TRUNC('month', NOW())
                """
            ),
            self.conn.fetchval(
                "SELECT AVG(progress) FROM ${schema}.projects WHERE status NOT IN ('won', 'lost')"
            )
        )
        return {
            "total": int(total or 0),
            "active": int(active or 0),
            "overdue": int(overdue or 0),
            "revenue": float(revenue or 0),
            "avgProgress": round(float(avg_progress or 0))
        }
