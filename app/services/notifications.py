"""
Advocacia SaaS - Notification Service
Notificações visíveis ao usuário: gerais do escritório (user_id nulo) ou suas
"""
from app.core.exceptions import NotFoundError
from .base import TenantServiceBase, format_time_ago

VISIBLE_TO_USER = "(user_id IS NULL OR user_id = $1)"


def serialize_notification(notification: dict) -> dict:
    return {
        "id": notification["id"],
        "type": notification["type"],
        "title": notification["title"],
        "message": notification["message"],
        "time": format_time_ago(notification.get("created_at")),
        "read": bool(notification.get("read")),
        "createdBy": notification.get("created_by"),
        "createdAt": notification.get("created_at"),
        "details": notification.get("details"),
        "category": notification.get("category"),
        "actionData": notification.get("action_data")
    }


class NotificationService(TenantServiceBase):
    """Sempre opera sobre o usuário autenticado"""

    async def get_all(self) -> list[dict]:
        self.require_permission("read", "notifications")

        rows = await self.conn.fetch(
            "SELECT * FROM ${schema}.notifications WHERE " + VISIBLE_TO_USER
            + " ORDER BY created_at DESC LIMIT 50",
            self.user.id
        )
        return [serialize_notification(row) for row in rows]

    async def get_unread_count(self) -> int:
        count = await self.conn.fetchval(
            "SELECT COUNT(*) FROM ${schema}.notifications WHERE " + VISIBLE_TO_USER
            + " AND read = false",
            self.user.id
        )
        return int(count or 0)

    async def mark_as_read(self, notification_id: str):
        self.require_permission("write", "notifications")

        row = await self.conn.fetchrow(
            "UPDATE ${schema}.notifications SET read = true, updated_at = NOW()"
            " WHERE " + VISIBLE_TO_USER + " AND id = $2 RETURNING id",
            self.user.id,
            notification_id
        )
        if not row:
            raise NotFoundError("Notificação não encontrada")

    async def mark_all_as_read(self) -> int:
        self.require_permission("write", "notifications")

        rows = await self.conn.fetch(
            "UPDATE ${schema}.notifications SET read = true, updated_at = NOW()"
            " WHERE " + VISIBLE_TO_USER + " AND read = false RETURNING id",
            self.user.id
        )
        return len(rows)

    async def delete(self, notification_id: str):
        self.require_permission("write", "notifications")

        row = await self.conn.fetchrow(
            "DELETE FROM ${schema}.notifications"
            " WHERE " + VISIBLE_TO_USER + " AND id = $2 RETURNING id",
            self.user.id,
            notification_id
        )
        if not row:
            raise NotFoundError("Notificação não encontrada")
