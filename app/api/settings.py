"""
Advocacia SaaS - Tenant Settings API
Configurações do escritório (apenas Conta Gerencial)
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas import TenantSettingsUpdate
from app.services.base import AuthenticatedUser
from app.services.tenants import tenant_settings, tenant_users, update_tenant_settings
from .deps import require_account_type

router = APIRouter(prefix="/settings", tags=["Settings"])

manager_user = require_account_type("gerencial")


@router.get("")
async def get_settings(
    user: AuthenticatedUser = Depends(manager_user),
    db: AsyncSession = Depends(get_db)
):
    return await tenant_settings(db, user.tenant_id)


@router.put("")
async def put_settings(
    data: TenantSettingsUpdate,
    user: AuthenticatedUser = Depends(manager_user),
    db: AsyncSession = Depends(get_db)
):
    tenant = await update_tenant_settings(db, user.tenant_id, data)
    return {"message": "Configurações atualizadas com sucesso", "tenant": tenant.to_dict()}


@router.get("/users")
async def list_users(
    user: AuthenticatedUser = Depends(manager_user),
    db: AsyncSession = Depends(get_db)
):
    """Usuários ativos do escritório"""
    return {"users": await tenant_users(db, user.tenant_id, only_active=True)}
