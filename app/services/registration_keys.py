"""
Advocacia SaaS - Registration Keys
Emissão, validação e consumo das chaves de cadastro
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update, or_
from sqlalchemy.orm.attributes import set_committed_value
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestError, NotFoundError
from app.core.security import generate_registration_key, get_password_hash, verify_password
from app.models import RegistrationKey, Tenant
from app.schemas.admin import RegistrationKeyCreate

logger = logging.getLogger(__name__)

KEY_PREFIX_LENGTH = 8
INVALID_KEY = "Chave de registro inválida, expirada ou revogada"


async def create_key(
    db: AsyncSession,
    data: RegistrationKeyCreate,
    created_by: Optional[str] = None
) -> tuple[str, RegistrationKey]:
    """
    Gera uma nova chave.
    Retorna (chave em texto puro, registro); o texto puro não é armazenado.
    """
    if data.tenantId and not await db.get(Tenant, data.tenantId):
        raise NotFoundError("Tenant não encontrado")

    plain_key = generate_registration_key()
    key = RegistrationKey(
        key_hash=get_password_hash(plain_key),
        key_prefix=plain_key[:KEY_PREFIX_LENGTH],
        tenant_id=data.tenantId,
        account_type=data.accountType,
        uses_allowed=data.usesAllowed,
        uses_left=data.usesAllowed,
        single_use=data.singleUse,
        expires_at=data.expiresAt,
        revoked=False,
        metadata_=data.metadata or {},
        created_by=created_by,
        used_logs=[]
    )
    db.add(key)
    await db.flush()

    logger.info(f"Chave de registro criada: {key.key_prefix}... ({key.account_type})")
    return plain_key, key


async def find_usable_key(db: AsyncSession, plain_key: str) -> Optional[RegistrationKey]:
    """Localiza pelo prefixo e confirma com bcrypt"""
    now = datetime.utcnow()
    result = await db.execute(
        select(RegistrationKey).where(
            RegistrationKey.key_prefix == plain_key[:KEY_PREFIX_LENGTH],
            RegistrationKey.revoked == False,  # noqa: E712
            RegistrationKey.uses_left > 0,
            or_(RegistrationKey.expires_at.is_(None), RegistrationKey.expires_at > now)
        )
    )
    for candidate in result.scalars().all():
        if verify_password(plain_key, candidate.key_hash):
            return candidate
    return None


async def consume_key(db: AsyncSession, key: RegistrationKey, email: str):
    """
    Registra o uso; chaves de uso único ou esgotadas são revogadas.

    O decremento é condicional (uses_left > 0 e não revogada) e trava a
    linha até o commit, então dois cadastros simultâneos não consomem o
    mesmo último uso.
    """
    uses_left = (await db.execute(
        update(RegistrationKey)
        .where(
            RegistrationKey.id == key.id,
            RegistrationKey.revoked == False,  # noqa: E712
            RegistrationKey.uses_left > 0
        )
        .values(uses_left=RegistrationKey.uses_left - 1)
        .returning(RegistrationKey.uses_left)
        .execution_options(synchronize_session=False)
    )).scalar_one_or_none()

    if uses_left is None:
        logger.warning(f"Chave de registro já consumida: {key.key_prefix}...")
        raise BadRequestError(INVALID_KEY)

    set_committed_value(key, "uses_left", uses_left)
    # Lista nova para o SQLAlchemy detectar a alteração da coluna JSON
    key.used_logs = list(key.used_logs or []) + [
        {"email": email, "usedAt": datetime.utcnow().isoformat()}
    ]
    if key.single_use or uses_left <= 0:
        key.revoked = True


async def list_keys(db: AsyncSession, tenant_id: Optional[str] = None) -> list[dict]:
    query = select(RegistrationKey, Tenant).outerjoin(
        Tenant, RegistrationKey.tenant_id == Tenant.id
    ).order_by(RegistrationKey.created_at.desc())
    if tenant_id:
        query = query.where(RegistrationKey.tenant_id == tenant_id)

    result = await db.execute(query)
    keys = []
    for key, tenant in result.all():
        data = key.to_dict()
        data["tenant"] = {"id": tenant.id, "name": tenant.name} if tenant else None
        keys.append(data)
    return keys


async def get_key(db: AsyncSession, key_id: str) -> RegistrationKey:
    key = await db.get(RegistrationKey, key_id)
    if not key:
        raise NotFoundError("Chave de registro não encontrada")
    return key


async def revoke_key(db: AsyncSession, key_id: str) -> RegistrationKey:
    key = await get_key(db, key_id)
    key.revoked = True
    await db.flush()
    logger.info(f"Chave de registro revogada: {key.key_prefix}...")
    return key


async def key_usage(db: AsyncSession, key_id: str) -> dict:
    key = await get_key(db, key_id)
    return {
        "id": key.id,
        "usesAllowed": key.uses_allowed,
        "usesLeft": key.uses_left,
        "revoked": key.revoked,
        "usedLogs": key.used_logs or []
    }
