"""
Advocacia SaaS - Publications API
Publicações de diários oficiais, isoladas por usuário
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.database.tenant import TenantConnection
from app.schemas import PublicationAssign, PublicationCreate, PublicationStatusUpdate
from app.services.base import AuthenticatedUser
from app.services.publications import PublicationService
from app.services.tenants import find_tenant_user
from .deps import get_current_user, get_tenant_connection

router = APIRouter(prefix="/publications", tags=["Publications"])


def get_service(
    user: AuthenticatedUser = Depends(get_current_user),
    conn: TenantConnection = Depends(get_tenant_connection)
) -> PublicationService:
    return PublicationService(user, conn)


@router.get("")
async def list_publications(
    search: Optional[str] = None,
    status: Optional[str] = None,
    service: PublicationService = Depends(get_service)
):
    """Lista as publicações do usuário autenticado"""
    return await service.get_all(search=search, status=status)


@router.get("/stats")
async def publication_stats(service: PublicationService = Depends(get_service)):
    return await service.get_stats()


@router.get("/{publication_id}")
async def get_publication(publication_id: UUID, service: PublicationService = Depends(get_service)):
    return await service.get_by_id(str(publication_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_publication(data: PublicationCreate, service: PublicationService = Depends(get_service)):
    publication = await service.create(data)
    return {"message": "Publicação criada com sucesso", "publication": publication}


@router.patch("/{publication_id}/status")
async def update_publication_status(
    publication_id: UUID,
    data: PublicationStatusUpdate,
    service: PublicationService = Depends(get_service)
):
    publication = await service.update_status(str(publication_id), data.status, data.observacoes)
    return {"message": "Status da publicação atualizado", "publication": publication}


@router.post("/{publication_id}/assign")
async def assign_publication(
    publication_id: UUID,
    data: PublicationAssign,
    user: AuthenticatedUser = Depends(get_current_user),
    service: PublicationService = Depends(get_service),
    db: AsyncSession = Depends(get_db)
):
    """Atribui a publicação a um usuário ativo do mesmo escritório"""
    assignee = await find_tenant_user(db, user.tenant_id, data.user_id)
    publication = await service.assign(str(publication_id), assignee.id, assignee.name)
    return {"message": f"Publicação atribuída para {assignee.name}", "publication": publication}


@router.delete("/{publication_id}")
async def delete_publication(publication_id: UUID, service: PublicationService = Depends(get_service)):
    await service.delete(str(publication_id))
    return {"message": "Publicação excluída com sucesso"}
