"""
Advocacia SaaS - Tasks API
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.database.tenant import TenantConnection
from app.schemas import TaskCreate, TaskUpdate
from app.services.base import AuthenticatedUser
from app.services.tasks import TaskService
from .deps import get_current_user, get_tenant_connection

router = APIRouter(prefix="/tasks", tags=["Tasks"])


def get_service(
    user: AuthenticatedUser = Depends(get_current_user),
    conn: TenantConnection = Depends(get_tenant_connection)
) -> TaskService:
    return TaskService(user, conn)


@router.get("")
async def list_tasks(
    search: Optional[str] = None,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    assigned_to: Optional[str] = None,
    service: TaskService = Depends(get_service)
):
    """Lista tarefas com projeto e cliente vinculados"""
    return await service.get_all(
        search=search,
        status=status,
        priority=priority,
        assigned_to=assigned_to
    )


@router.get("/stats")
async def task_stats(service: TaskService = Depends(get_service)):
    return await service.get_stats()


@router.get("/{task_id}")
async def get_task(task_id: UUID, service: TaskService = Depends(get_service)):
    return await service.get_by_id(str(task_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_task(data: TaskCreate, service: TaskService = Depends(get_service)):
    task = await service.create(data)
    return {"message": "Tarefa criada com sucesso", "task": task}


@router.put("/{task_id}")
async def update_task(
    task_id: UUID,
    data: TaskUpdate,
    service: TaskService = Depends(get_service)
):
    task = await service.update(str(task_id), data)
    return {"message": "Tarefa atualizada com sucesso", "task": task}


@router.delete("/{task_id}")
async def delete_task(task_id: UUID, service: TaskService = Depends(get_service)):
    await service.delete(str(task_id))
    return {"message": "Tarefa excluída com sucesso"}
