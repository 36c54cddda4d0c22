"""
Advocacia SaaS - Notifications API
"""
from uuid import UUID

from fastapi import APIRouter, Depends

from app.database.tenant import TenantConnection
from app.services.base import AuthenticatedUser
from app.services.notifications import NotificationService
from .deps import get_current_user, get_tenant_connection

router = APIRouter(prefix="/notifications", tags=["Notifications"])


def get_service(
    user: AuthenticatedUser = Depends(get_current_user),
    conn: TenantConnection = Depends(get_tenant_connection)
) -> NotificationService:
    return NotificationService(user, conn)


@router.get("")
async def list_notifications(service: NotificationService = Depends(get_service)):
    return await service.get_all()


@router.get("/unread-count")
async def unread_count(service: NotificationService = Depends(get_service)):
    return {"count": await service.get_unread_count()}


# Declarada antes de /{notification_id}/read
@router.patch("/mark-all-read")
async def mark_all_read(service: NotificationService = Depends(get_service)):
    updated = await service.mark_all_as_read()
    return {"message": "Todas as notificações marcadas como lidas", "count": updated}


@router.patch("/{notification_id}/read")
async def mark_read(notification_id: UUID, service: NotificationService = Depends(get_service)):
    await service.mark_as_read(str(notification_id))
    return {"message": "Notificação marcada como lida"}


@router.delete("/{notification_id}")
async def delete_notification(notification_id: UUID, service: NotificationService = Depends(get_service)):
    await service.delete(str(notification_id))
    return {"message": "Notificação excluída com sucesso"}
