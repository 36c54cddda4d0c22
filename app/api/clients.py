"""
Advocacia SaaS - CRM Clients API
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.database.tenant import TenantConnection
from app.schemas import ClientCreate, ClientUpdate
from app.services.base import AuthenticatedUser
from app.services.clients import ClientService
from .deps import get_current_user, get_tenant_connection

router = APIRouter(prefix="/clients", tags=["CRM"])


def get_service(
    user: AuthenticatedUser = Depends(get_current_user),
    conn: TenantConnection = Depends(get_tenant_connection)
) -> ClientService:
    return ClientService(user, conn)


@router.get("")
async def list_clients(
    search: Optional[str] = None,
    status: Optional[str] = None,
    service: ClientService = Depends(get_service)
):
    """Lista clientes do escritório"""
    return await service.get_all(search=search, status=status)


@router.get("/stats")
async def client_stats(service: ClientService = Depends(get_service)):
    return await service.get_stats()


@router.get("/{client_id}")
async def get_client(client_id: UUID, service: ClientService = Depends(get_service)):
    return await service.get_by_id(str(client_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_client(data: ClientCreate, service: ClientService = Depends(get_service)):
    client = await service.create(data)
    return {"message": "Cliente criado com sucesso", "client": client}


@router.put("/{client_id}")
async def update_client(
    client_id: UUID,
    data: ClientUpdate,
    service: ClientService = Depends(get_service)
):
    client = await service.update(str(client_id), data)
    return {"message": "Cliente atualizado com sucesso", "client": client}


@router.delete("/{client_id}")
async def delete_client(client_id: UUID, service: ClientService = Depends(get_service)):
    await service.delete(str(client_id))
    return {"message": "Cliente excluído com sucesso"}
