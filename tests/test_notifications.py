"""Tests for notifications: visibility, read state and deletion."""

import uuid

from app.services.notifications import NotificationService, serialize_notification

from .conftest import FakeTenantConnection, make_user


class TestNotificationService:
    async def test_lists_general_and_own_notifications(self):
        user = make_user("composta")
        conn = FakeTenantConnection()
        conn.on("FROM ${schema}.notifications", [
            {"id": "n1", "type": "info", "title": "Novo Cliente Cadastrado", "message": "m",
             "created_at": None, "read": False, "category": "client"},
        ], method="fetch")

        notifications = await NotificationService(user, conn).get_all()

        sql, args = conn.queries("fetch")[0]
        assert "user_id IS NULL OR user_id = $1" in sql
        assert args == (user.id,)
        assert notifications[0]["title"] == "Novo Cliente Cadastrado"
        assert notifications[0]["read"] is False

    async def test_unread_count(self):
        conn = FakeTenantConnection().on("read = false", 4, method="fetchval")
        assert await NotificationService(make_user(), conn).get_unread_count() == 4

    async def test_mark_all_as_read_returns_count(self):
        conn = FakeTenantConnection().on("SET read = true", [{"id": "a"}, {"id": "b"}], method="fetch")
        assert await NotificationService(make_user(), conn).mark_all_as_read() == 2

    async def test_serialize_maps_columns(self):
        data = serialize_notification({
            "id": "n1", "type": "warning", "title": "t", "message": "m",
            "created_by": "Ana", "action_data": {"page": "/crm"}, "read": None,
        })
        assert data["createdBy"] == "Ana"
        assert data["actionData"] == {"page": "/crm"}
        assert data["read"] is False
        assert data["time"] == ""


class TestNotificationsApi:
    async def test_unread_count_endpoint(self, client, fake_conn, simples_headers):
        fake_conn.on("read = false", 3, method="fetchval")

        response = await client.get("/api/notifications/unread-count", headers=simples_headers)

        assert response.status_code == 200
        assert response.json() == {"count": 3}

    async def test_mark_all_read_endpoint(self, client, fake_conn, simples_headers):
        fake_conn.on("SET read = true", [{"id": "a"}], method="fetch")

        response = await client.patch("/api/notifications/mark-all-read", headers=simples_headers)

        assert response.status_code == 200
        assert response.json()["count"] == 1

    async def test_mark_read_missing_notification(self, client, simples_headers):
        response = await client.patch(f"/api/notifications/{uuid.uuid4()}/read", headers=simples_headers)

        assert response.status_code == 404
        assert response.json()["detail"] == "Notificação não encontrada"

    async def test_delete_is_scoped_to_the_user(self, client, fake_conn, simples_user, simples_headers):
        notification_id = str(uuid.uuid4())
        fake_conn.on("DELETE FROM ${schema}.notifications", {"id": notification_id})

        response = await client.delete(f"/api/notifications/{notification_id}", headers=simples_headers)

        assert response.status_code == 200
        sql, args = fake_conn.find("DELETE FROM ${schema}.notifications")[0]
        assert args == (simples_user.id, notification_id)
