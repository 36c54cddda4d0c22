"""Tests for clients, projects and tasks."""

import uuid

from app.schemas import ProjectCreate, TaskCreate, TaskUpdate
from app.services.projects import ProjectService
from app.services.tasks import TaskService

from .conftest import FakeTenantConnection, make_user

CLIENT_ID = str(uuid.uuid4())
PROJECT_ID = str(uuid.uuid4())
TASK_ID = str(uuid.uuid4())

NEW_CLIENT = {
    "name": "João Souza",
    "mobile": "11999990000",
    "country": "Brasil",
    "state": "SP",
    "city": "São Paulo",
}


class TestClientsApi:
    async def test_create_client_notifies(self, client, fake_conn, simples_headers):
        fake_conn.on("INSERT INTO ${schema}.clients", {"id": CLIENT_ID, "name": "João Souza"})

        response = await client.post("/api/clients", headers=simples_headers, json=NEW_CLIENT)

        assert response.status_code == 201
        assert response.json()["client"]["id"] == CLIENT_ID
        _, args = fake_conn.find("INSERT INTO ${schema}.notifications")[0]
        assert args[1] == "Novo Cliente Cadastrado"
        assert "João Souza" in args[2]
        assert fake_conn.find("INSERT INTO ${schema}.audit_log")

    async def test_missing_client(self, client, simples_headers):
        response = await client.get(f"/api/clients/{CLIENT_ID}", headers=simples_headers)

        assert response.status_code == 404
        assert response.json()["detail"] == "Cliente não encontrado"

    async def test_search_filter(self, client, fake_conn, simples_headers):
        response = await client.get("/api/clients?search=Souza&status=active", headers=simples_headers)

        assert response.status_code == 200
        sql, args = fake_conn.queries("fetch")[0]
        assert "name ILIKE $1 OR email ILIKE $1" in sql
        assert "status = $2" in sql
        assert args == ("%Souza%", "active")

    async def test_requires_mandatory_fields(self, client, simples_headers):
        response = await client.post("/api/clients", headers=simples_headers, json={"name": "Sem dados"})
        assert response.status_code == 422

    async def test_delete_client(self, client, fake_conn, simples_headers):
        fake_conn.on("SELECT * FROM ${schema}.clients WHERE id = $1", {"id": CLIENT_ID, "name": "João"})

        response = await client.delete(f"/api/clients/{CLIENT_ID}", headers=simples_headers)

        assert response.status_code == 200
        assert fake_conn.find("DELETE FROM ${schema}.clients")


class TestProjects:
    async def test_client_name_comes_from_linked_client(self):
        conn = FakeTenantConnection()
        conn.on("SELECT name FROM ${schema}.clients", "Maria Lima", method="fetchval")
        conn.on("INSERT INTO ${schema}.projects", lambda *args: {"id": PROJECT_ID, "title": args[0], "client_name": args[2]})

        project = await ProjectService(make_user("simples"), conn).create(ProjectCreate(
            title="Aposentadoria especial",
            client_id=CLIENT_ID,
            start_date="2026-10-01",
            due_date="2026-12-01",
        ))

        assert project["client_name"] == "Maria Lima"

    async def test_client_name_is_required(self, client, simples_headers):
        response = await client.post("/api/projects", headers=simples_headers, json={
            "title": "Sem cliente",
            "start_date": "2026-10-01",
            "due_date": "2026-12-01",
        })

        assert response.status_code == 400
        assert response.json()["detail"] == "Nome do cliente é obrigatório"

    async def test_missing_project(self, client, simples_headers):
        response = await client.get(f"/api/projects/{PROJECT_ID}", headers=simples_headers)
        assert response.status_code == 404


class TestTasks:
    async def test_links_resolve_project_and_client(self):
        conn = FakeTenantConnection()
        conn.on("FROM ${schema}.projects p", {"title": "Inventário", "client_name": "Maria Lima"}, method="fetchrow")
        conn.on("INSERT INTO ${schema}.tasks", lambda *args: {"id": TASK_ID, "project_title": args[8], "client_name": args[10]})

        task = await TaskService(make_user(), conn).create(TaskCreate(
            title="Protocolar petição",
            start_date="2026-10-01",
            end_date="2026-10-10",
            assigned_to="Ana",
            project_id=PROJECT_ID,
        ))

        assert task["project_title"] == "Inventário"
        assert task["client_name"] == "Maria Lima"

    async def test_completing_stamps_completed_at(self):
        conn = FakeTenantConnection()
        conn.on("WHERE t.id = $1", {"id": TASK_ID, "status": "in_progress"}, method="fetchrow")
        conn.on("UPDATE ${schema}.tasks", {"id": TASK_ID, "status": "completed"}, method="fetchrow")

        await TaskService(make_user(), conn).update(TASK_ID, TaskUpdate(status="completed"))

        sql, _ = conn.find("UPDATE ${schema}.tasks")[0]
        assert "completed_at = NOW()" in sql

    async def test_reopening_clears_completed_at(self):
        conn = FakeTenantConnection()
        conn.on("WHERE t.id = $1", {"id": TASK_ID, "status": "completed"}, method="fetchrow")
        conn.on("UPDATE ${schema}.tasks", {"id": TASK_ID, "status": "in_progress"}, method="fetchrow")

        await TaskService(make_user(), conn).update(TASK_ID, TaskUpdate(status="in_progress"))

        sql, args = conn.find("UPDATE ${schema}.tasks")[0]
        assert "completed_at = $" in sql
        assert None in args

    async def test_stats_completion_rate(self):
        conn = FakeTenantConnection()
        conn.on("SELECT COUNT(*) FROM ${schema}.tasks", 4, method="fetchval")
        conn.on("WHERE status = 'completed'", 1, method="fetchval")

        stats = await TaskService(make_user(), conn).get_stats()

        assert stats["total"] == 4
        assert stats["completed"] == 1
        assert stats["completionRate"] == 25
