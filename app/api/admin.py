"""
Advocacia SaaS - Admin Console API
Autenticação de administradores, chaves de registro, tenants e métricas
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import settings
from app.core.provisioning import TenantSchemaProvisioner, get_provisioner
from app.database import get_db
from app.models import AdminUser
from app.schemas import AdminLoginRequest, RegistrationKeyCreate, TenantCreate, TenantUpdate
from app.services import registration_keys, tenants
from app.services.auth import AuthService
from .auth import limiter
from .deps import get_current_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


# ============================================================================
# Autenticação
# ============================================================================

@router.post("/auth/login")
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def admin_login(request: Request, data: AdminLoginRequest, db: AsyncSession = Depends(get_db)):
    admin, tokens = await AuthService(db).login_admin(data.email, data.password)
    return {
        "message": "Login realizado com sucesso",
        "admin": admin.to_dict(),
        "tokens": tokens
    }


@router.post("/auth/setup", status_code=status.HTTP_201_CREATED)
async def admin_setup(db: AsyncSession = Depends(get_db)):
    """Cria o super admin padrão (apenas quando não existe nenhum)"""
    admin = await AuthService(db).setup_admin()
    return {"message": "Administrador criado com sucesso", "admin": admin.to_dict()}


@router.get("/auth/me")
async def admin_me(admin: AdminUser = Depends(get_current_admin)):
    return {"admin": admin.to_dict()}


# ============================================================================
# Chaves de registro
# ============================================================================

@router.post("/keys", status_code=status.HTTP_201_CREATED)
async def create_registration_key(
    data: RegistrationKeyCreate,
    admin: AdminUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Gera a chave; o texto puro só é exibido nesta resposta"""
    plain_key, key = await registration_keys.create_key(db, data, created_by=admin.id)
    return {
        "message": "Chave de registro criada com sucesso",
        "id": key.id,
        "key": plain_key,
        "metadata": {
            "accountType": key.account_type,
            "usesAllowed": key.uses_allowed,
            "singleUse": key.single_use,
            "expiresAt": key.expires_at.isoformat() if key.expires_at else None,
            "tenantId": key.tenant_id
        }
    }


@router.get("/keys")
async def list_registration_keys(
    tenantId: Optional[str] = None,
    admin: AdminUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    return {"keys": await registration_keys.list_keys(db, tenantId)}


@router.patch("/keys/{key_id}/revoke")
async def revoke_registration_key(
    key_id: str,
    admin: AdminUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    await registration_keys.revoke_key(db, key_id)
    return {"message": "Chave revogada com sucesso"}


@router.get("/keys/{key_id}/usage")
async def registration_key_usage(
    key_id: str,
    admin: AdminUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    return await registration_keys.key_usage(db, key_id)


# ============================================================================
# Tenants
# ============================================================================

@router.get("/tenants")
async def list_tenants(
    admin: AdminUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
    provisioner: TenantSchemaProvisioner = Depends(get_provisioner)
):
    return {"tenants": await tenants.list_tenants(db, provisioner)}


@router.post("/tenants", status_code=status.HTTP_201_CREATED)
async def create_tenant(
    data: TenantCreate,
    admin: AdminUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
    provisioner: TenantSchemaProvisioner = Depends(get_provisioner)
):
    """Cria o escritório e provisiona o schema"""
    tenant = await tenants.create_tenant_from_request(db, provisioner, data)
    logger.info(f"Tenant {tenant.name} criado por {admin.email}")
    return {"message": "Tenant criado com sucesso", "tenant": tenant.to_dict()}


@router.get("/tenants/{tenant_id}/users")
async def list_tenant_users(
    tenant_id: str,
    admin: AdminUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    await tenants.get_tenant(db, tenant_id)
    return {"users": await tenants.tenant_users(db, tenant_id)}


@router.patch("/tenants/{tenant_id}")
async def update_tenant(
    tenant_id: str,
    data: TenantUpdate,
    admin: AdminUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    tenant = await tenants.update_tenant(db, tenant_id, data)
    return {"message": "Tenant atualizado com sucesso", "tenant": tenant.to_dict()}


@router.delete("/tenants/{tenant_id}")
async def delete_tenant(
    tenant_id: str,
    admin: AdminUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
    provisioner: TenantSchemaProvisioner = Depends(get_provisioner)
):
    """Remove o escritório e todos os seus dados"""
    await tenants.delete_tenant(db, provisioner, tenant_id)
    logger.warning(f"Tenant {tenant_id} removido por {admin.email}")
    return {"message": "Tenant removido com sucesso"}


# ============================================================================
# Métricas
# ============================================================================

@router.get("/metrics")
async def metrics(
    admin: AdminUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    return await tenants.global_metrics(db)
