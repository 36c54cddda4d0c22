"""
Advocacia SaaS - Tenant Management
Escritórios no control plane: criação com schema, gestão pelo admin,
configurações da Conta Gerencial e métricas globais
"""
import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, ProvisioningError
from app.core.provisioning import TenantSchemaProvisioner
from app.database.tenant import schema_name_for
from app.models import RefreshToken, RegistrationKey, SystemLog, Tenant, User
from app.schemas.admin import ACCOUNT_TYPES, TenantCreate, TenantSettingsUpdate, TenantUpdate

logger = logging.getLogger(__name__)

TENANT_UPDATE_FIELDS = {
    "name": "name",
    "domain": "domain",
    "planType": "plan_type",
    "maxUsersSimples": "max_users_simples",
    "maxUsersComposta": "max_users_composta",
    "maxUsersGerencial": "max_users_gerencial",
    "maxStorageGb": "max_storage_gb",
    "isActive": "is_active",
    "trialEndsAt": "trial_ends_at",
}


async def create_tenant(
    db: AsyncSession,
    provisioner: TenantSchemaProvisioner,
    name: str,
    plan_type: str = "basic",
    domain: Optional[str] = None,
    max_users_simples: Optional[int] = None,
    max_users_composta: Optional[int] = None,
    max_users_gerencial: Optional[int] = None,
    max_storage_gb: Optional[int] = None
) -> Tenant:
    """
    Cria o registro do escritório e provisiona o schema tenant_<uuid>.
    Falha no provisionamento desfaz o registro (rollback da sessão).
    """
    tenant_id = str(uuid.uuid4())
    tenant = Tenant(
        id=tenant_id,
        name=name,
        schema_name=schema_name_for(tenant_id),
        domain=domain,
        plan_type=plan_type,
        is_active=True
    )
    for column, value in (
        ("max_users_simples", max_users_simples),
        ("max_users_composta", max_users_composta),
        ("max_users_gerencial", max_users_gerencial),
        ("max_storage_gb", max_storage_gb),
    ):
        if value is not None:
            setattr(tenant, column, value)

    db.add(tenant)
    await db.flush()

    await provisioner.create_schema(tenant.schema_name)
    logger.info(f"Tenant criado: {tenant.name} ({tenant.schema_name})")
    return tenant


@asynccontextmanager
async def provisioned_tenant(
    db: AsyncSession,
    provisioner: TenantSchemaProvisioner,
    name: str,
    **kwargs
) -> AsyncIterator[Tenant]:
    """
    Cria o escritório com schema e confirma tudo ao final do bloco.
    Se o bloco ou o commit falharem, a sessão é desfeita e o schema removido.
    """
    tenant = await create_tenant(db, provisioner, name, **kwargs)
    # O rollback expira a instância
    schema_name = tenant.schema_name
    try:
        yield tenant
        await db.commit()
    except Exception:
        await db.rollback()
        logger.error(f"Cadastro do tenant {name} falhou; removendo {schema_name}")
        try:
            await provisioner.drop_schema(schema_name)
        except ProvisioningError as e:
            logger.error(f"Schema órfão {schema_name}: {e}")
        raise


async def create_tenant_from_request(
    db: AsyncSession,
    provisioner: TenantSchemaProvisioner,
    data: TenantCreate
) -> Tenant:
    async with provisioned_tenant(
        db,
        provisioner,
        data.name,
        plan_type=data.planType,
        domain=data.domain,
        max_users_simples=data.maxUsers,
        max_users_composta=data.maxUsersComposta,
        max_users_gerencial=data.maxUsersGerencial,
        max_storage_gb=data.maxStorage
    ) as tenant:
        pass
    return tenant


async def get_tenant(db: AsyncSession, tenant_id: str) -> Tenant:
    tenant = await db.get(Tenant, tenant_id)
    if not tenant:
        raise NotFoundError("Tenant não encontrado")
    return tenant


async def list_tenants(db: AsyncSession, provisioner: TenantSchemaProvisioner) -> list[dict]:
    """Tenants com contagem de usuários e estatísticas do schema"""
    user_counts = dict((await db.execute(
        select(User.tenant_id, func.count(User.id)).group_by(User.tenant_id)
    )).all())

    result = await db.execute(select(Tenant).order_by(Tenant.created_at.desc()))
    tenants = []
    for tenant in result.scalars().all():
        tenants.append({
            "id": tenant.id,
            "name": tenant.name,
            "schemaName": tenant.schema_name,
            "planType": tenant.plan_type,
            "isActive": tenant.is_active,
            "maxUsers": {
                account_type: tenant.max_users_for(account_type)
                for account_type in ACCOUNT_TYPES
            },
            "userCount": user_counts.get(tenant.id, 0),
            "createdAt": tenant.created_at.isoformat() if tenant.created_at else None,
            "stats": await provisioner.tenant_stats(tenant.schema_name)
        })
    return tenants


async def update_tenant(db: AsyncSession, tenant_id: str, data: TenantUpdate) -> Tenant:
    tenant = await get_tenant(db, tenant_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is not None or field in ("domain", "trialEndsAt"):
            setattr(tenant, TENANT_UPDATE_FIELDS[field], value)
    await db.flush()
    logger.info(f"Tenant atualizado: {tenant.name}")
    return tenant


async def delete_tenant(db: AsyncSession, provisioner: TenantSchemaProvisioner, tenant_id: str):
    """
    Remove o escritório: usuários, tokens, chaves e, após o commit, o schema
    com todos os dados.
    CUIDADO: operação irreversível!
    """
    tenant = await get_tenant(db, tenant_id)
    schema_name = tenant.schema_name

    user_ids = select(User.id).where(User.tenant_id == tenant_id).scalar_subquery()
    await db.execute(delete(RefreshToken).where(RefreshToken.user_id.in_(user_ids)))
    await db.execute(delete(User).where(User.tenant_id == tenant_id))
    await db.execute(delete(RegistrationKey).where(RegistrationKey.tenant_id == tenant_id))
    await db.delete(tenant)
    await db.commit()

    # O registro já não existe: uma falha aqui deixa apenas o schema órfão
    await provisioner.drop_schema(schema_name)
    logger.warning(f"Tenant removido: {tenant.name} ({schema_name})")


async def tenant_users(db: AsyncSession, tenant_id: str, only_active: bool = False) -> list[dict]:
    query = select(User).where(User.tenant_id == tenant_id).order_by(User.created_at)
    if only_active:
        query = query.where(User.is_active == True)  # noqa: E712
    result = await db.execute(query)
    return [
        {
            **user.to_dict(),
            "isActive": user.is_active,
            "lastLogin": user.last_login.isoformat() if user.last_login else None,
            "createdAt": user.created_at.isoformat() if user.created_at else None,
        }
        for user in result.scalars().all()
    ]


async def find_tenant_user(db: AsyncSession, tenant_id: str, user_id: str) -> User:
    """Usuário ativo do mesmo escritório (atribuição de publicações)"""
    result = await db.execute(
        select(User).where(
            User.id == user_id,
            User.tenant_id == tenant_id,
            User.is_active == True  # noqa: E712
        )
    )
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError("Usuário não encontrado neste escritório")
    return user


async def tenant_settings(db: AsyncSession, tenant_id: str) -> dict:
    """Dados do escritório e uso de usuários por tipo de conta"""
    tenant = await get_tenant(db, tenant_id)
    counts = dict((await db.execute(
        select(User.account_type, func.count(User.id))
        .where(User.tenant_id == tenant_id, User.is_active == True)  # noqa: E712
        .group_by(User.account_type)
    )).all())

    return {
        "tenant": tenant.to_dict(),
        "usage": {
            account_type: {
                "used": counts.get(account_type, 0),
                "limit": tenant.max_users_for(account_type)
            }
            for account_type in ACCOUNT_TYPES
        }
    }


async def update_tenant_settings(db: AsyncSession, tenant_id: str, data: TenantSettingsUpdate) -> Tenant:
    tenant = await get_tenant(db, tenant_id)
    if data.name:
        tenant.name = data.name
    if "domain" in data.model_fields_set:
        tenant.domain = data.domain
    await db.flush()
    return tenant


async def global_metrics(db: AsyncSession) -> dict:
    total_tenants = (await db.execute(select(func.count(Tenant.id)))).scalar() or 0
    active_tenants = (await db.execute(
        select(func.count(Tenant.id)).where(Tenant.is_active == True)  # noqa: E712
    )).scalar() or 0
    active_users = (await db.execute(
        select(func.count(User.id)).where(User.is_active == True)  # noqa: E712
    )).scalar() or 0

    key_stats = (await db.execute(
        select(RegistrationKey.account_type, func.count(RegistrationKey.id))
        .where(RegistrationKey.revoked == False)  # noqa: E712
        .group_by(RegistrationKey.account_type)
    )).all()

    recent_logs = (await db.execute(
        select(SystemLog, Tenant.name)
        .outerjoin(Tenant, SystemLog.tenant_id == Tenant.id)
        .order_by(SystemLog.created_at.desc())
        .limit(10)
    )).all()

    return {
        "tenants": {"total": total_tenants, "active": active_tenants},
        "users": {"total": active_users},
        "registrationKeys": [
            {"accountType": account_type, "count": count}
            for account_type, count in key_stats
        ],
        "recentActivity": [
            {
                "id": log.id,
                "level": log.level,
                "message": log.message,
                "tenantName": tenant_name,
                "createdAt": log.created_at.isoformat() if log.created_at else None
            }
            for log, tenant_name in recent_logs
        ]
    }
