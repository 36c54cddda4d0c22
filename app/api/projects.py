"""
Advocacia SaaS - Projects API
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.database.tenant import TenantConnection
from app.schemas import ProjectCreate, ProjectUpdate
from app.services.base import AuthenticatedUser
from app.services.projects import ProjectService
from .deps import get_current_user, get_tenant_connection

router = APIRouter(prefix="/projects", tags=["Projects"])


def get_service(
    user: AuthenticatedUser = Depends(get_current_user),
    conn: TenantConnection = Depends(get_tenant_connection)
) -> ProjectService:
    return ProjectService(user, conn)


@router.get("")
async def list_projects(
    search: Optional[str] = None,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    service: ProjectService = Depends(get_service)
):
    """Lista projetos com filtros de busca, status e prioridade"""
    return await service.get_all(search=search, status=status, priority=priority)


@router.get("/stats")
async def project_stats(service: ProjectService = Depends(get_service)):
    return await service.get_stats()


@router.get("/{project_id}")
async def get_project(project_id: UUID, service: ProjectService = Depends(get_service)):
    return await service.get_by_id(str(project_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_project(data: ProjectCreate, service: ProjectService = Depends(get_service)):
    project = await service.create(data)
    return {"message": "Projeto criado com sucesso", "project": project}


@router.put("/{project_id}")
async def update_project(
    project_id: UUID,
    data: ProjectUpdate,
    service: ProjectService = Depends(get_service)
):
    project = await service.update(str(project_id), data)
    return {"message": "Projeto atualizado com sucesso", "project": project}


@router.delete("/{project_id}")
async def delete_project(project_id: UUID, service: ProjectService = Depends(get_service)):
    await service.delete(str(project_id))
    return {"message": "Projeto excluído com sucesso"}
