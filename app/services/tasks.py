"""
Advocacia SaaS - Task Service
"""
import asyncio

from app.core.exceptions import NotFoundError
from app.schemas.task import TaskCreate, TaskUpdate
from .base import TenantServiceBase, changed_fields, link_value

TASK_SELECT = """
    SELECT t.*,
        p.title AS linked_project_title,
        c.name AS linked_client_name
    FROM ${schema}.tasks t
    LEFT JOIN ${schema}.projects p ON t.project_id = p.id
    LEFT JOIN ${schema}.clients c ON t.client_id = c.id
"""


def merge_links(task: dict) -> dict:
    """Nomes atuais do projeto/cliente vinculados, com fallback para os desnormalizados"""
    project_title = task.pop("linked_project_title", None)
    client_name = task.pop("linked_client_name", None)
    task["project_title"] = project_title or task.get("project_title")
    task["client_name"] = client_name or task.get("client_name")
    return task


class TaskService(TenantServiceBase):

    async def get_all(
        self,
        search: str = None,
        status: str = None,
        priority: str = None,
        assigned_to: str = None
    ) -> list[dict]:
        self.require_permission("read", "tasks")

        sql = TASK_SELECT + " WHERE 1=1"
        params = []

        if search:
            params.append(f"%{search}%")
            sql += f" AND (t.title ILIKE ${len(params)} OR t.description ILIKE ${len(params)})"

        if status:
            params.append(status)
            sql += f" AND t.status = ${len(params)}"

        if priority:
            params.append(priority)
            sql += f" AND t.priority = ${len(params)}"

        if assigned_to:
            params.append(assigned_to)
            sql += f" AND t.assigned_to = ${len(params)}"

        sql += " ORDER BY t.created_at DESC"

        return [merge_links(task) for task in await self.conn.fetch(sql, *params)]

    async def get_by_id(self, task_id: str) -> dict:
        self.require_permission("read", "tasks")

        task = await self.conn.fetchrow(TASK_SELECT + " WHERE t.id = $1", task_id)
        if not task:
            raise NotFoundError("Tarefa não encontrada")
        return merge_links(task)

    async def _resolve_links(self, project_id, client_id):
        """(project_title, client_name) a partir do projeto ou do cliente"""
        project_title, client_name = await self.lookup_project(project_id)
        if not client_name and client_id:
            client_name = await self.conn.fetchval(
                "SELECT name FROM ${schema}.clients WHERE id = $1",
                client_id
            )
        return project_title, client_name

    async def create(self, data: TaskCreate) -> dict:
        self.require_permission("write", "tasks")

        project_id = link_value(data.project_id)
        client_id = link_value(data.client_id)
        project_title, client_name = await self._resolve_links(project_id, client_id)

        task = await self.conn.fetchrow(
            """
            INSERT INTO ${schema}.tasks (
                title, description, start_date, end_date, status, priority,
                assigned_to, project_id, project_title, client_id, client_name,
                tags, estimated_hours, actual_hours, progress, notes, subtasks,
                attachments, completed_at, created_at, updated_at
            ) VALUES (
                $1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14, $15, $16, $17,
                $18, CASE WHEN $5 = 'completed' THEN NOW() END, NOW(), NOW()
            ) RETURNING *
            """,
            data.title, data.description, data.start_date, data.end_date, data.status,
            data.priority, data.assigned_to, project_id, project_title, client_id,
            client_name, data.tags, data.estimated_hours, data.actual_hours,
            data.progress, data.notes, data.subtasks, data.attachments
        )

        await self.audit_log("tasks", "CREATE", task["id"], None, task)
        await self.create_notification(
            "info",
            "Nova Tarefa Criada",
            f"{self.user.name} criou a tarefa: {task['title']}",
            "task",
            "task",
            task["id"],
            {"task_id": task["id"], "page": "/tarefas"}
        )
        return task

    async def update(self, task_id: str, data: TaskUpdate) -> dict:
        self.require_permission("write", "tasks")

        old_task = await self.get_by_id(task_id)
        fields = changed_fields(data)
        raw_assignments = []

        if "project_id" in fields or "client_id" in fields:
            project_id = link_value(fields.get("project_id", old_task.get("project_id")))
            client_id = link_value(fields.get("client_id", old_task.get("client_id")))
            if "project_id" in fields:
                fields["project_id"] = project_id
            if "client_id" in fields:
                fields["client_id"] = client_id
            project_title, client_name = await self._resolve_links(project_id, client_id)
            fields["project_title"] = project_title
            fields["client_name"] = client_name

        new_status = fields.get("status")
        if new_status == "completed" and old_task["status"] != "completed":
            raw_assignments.append("completed_at = NOW()")
        elif new_status and new_status != "completed" and old_task["status"] == "completed":
            fields["completed_at"] = None

        task = await self.update_record("tasks", task_id, fields, raw_assignments)
        if not task:
            raise NotFoundError("Tarefa não encontrada")

        await self.audit_log("tasks", "UPDATE", task_id, old_task, task)
        return task

    async def delete(self, task_id: str):
        self.require_permission("write", "tasks")

        task = await self.get_by_id(task_id)
        await self.conn.execute("DELETE FROM ${schema}.tasks WHERE id = $1", task_id)
        await self.audit_log("tasks", "DELETE", task_id, task, None)

    async def get_stats(self) -> dict:
        self.require_permission("read", "tasks")

        total, not_started, in_progress, completed, overdue, avg_days = await asyncio.gather(
            self.conn.fetchval("SELECT COUNT(*) FROM ${schema}.tasks"),
            self.conn.fetchval("SELECT COUNT(*) FROM ${schema}.tasks WHERE status = 'not_started'"),
            self.conn.fetchval("SELECT COUNT(*) FROM ${schema}.tasks WHERE status = 'in_progress'"),
            self.conn.fetchval("SELECT COUNT(*) FROM ${schema}.tasks WHERE status = 'completed'"),
            self.conn.fetchval(
                """
                SELECT COUNT(*) FROM ${schema}.tasks
                WHERE end_date < CURRENT_DATE AND status NOT IN ('completed', 'cancelled')
                """
            ),
            self.conn.fetchval(
                """
                SELECT AVG(EXTRACT(EPOCH FROM (completed_at - created_at)) / 86400)
                FROM ${schema}.tasks
                WHERE status = 'completed' AND completed_at IS NOT NULL
                AND completed_at >= NOW() - INTERVAL '3 months'
                """
            )
        )

        total = int(total or 0)
        completed = int(completed or 0)
        return {
            "total": total,
            "notStarted": int(not_started or 0),
            "inProgress": int(in_progress or 0),
            "completed": completed,
            "overdue": int(overdue or 0),
            "completionRate": round(completed / total * 100) if total else 0,
            "averageCompletionTime": round(float(avg_days or 0))
        }
