"""
Advocacia SaaS - API Dependencies
Autenticação por JWT, isolamento de tenant e controle por tipo de conta
"""
import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import ExpiredSignatureError, JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import ACCESS_TOKEN_TYPE, decode_access_token
from app.database import get_db
from app.database.tenant import TenantConnection, tenant_database
from app.models import AdminUser, SystemLog, User
from app.services.base import AuthenticatedUser

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

INVALID_TOKEN = "Token inválido"


def _bearer_token(credentials: Optional[HTTPAuthorizationCredentials]) -> str:
    if not credentials or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token de acesso necessário"
        )
    return credentials.credentials


def _decode(token: str) -> dict:
    try:
        payload = decode_access_token(token)
    except ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Token expirado", "code": "TOKEN_EXPIRED"}
        )
    except JWTError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=INVALID_TOKEN)

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=INVALID_TOKEN)
    return payload


async def get_current_db_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Usuário do escritório autenticado (modelo do control plane)"""
    payload = _decode(_bearer_token(credentials))

    # Tokens de admin não acessam dados de escritórios
    if payload.get("role"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=INVALID_TOKEN)

    user_id = payload.get("userId") or payload.get("sub")
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuário inativo ou não encontrado"
        )

    if not user.tenant or not user.tenant.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Conta suspensa - contate o suporte"
        )

    # Isolamento: o tenant do token precisa ser o tenant do usuário
    if payload.get("tenantId") != user.tenant_id:
        logger.critical(
            f"Tentativa de acesso entre tenants: usuário {user.id} "
            f"token={payload.get('tenantId')} real={user.tenant_id}"
        )
        db.add(SystemLog(
            tenant_id=user.tenant_id,
            user_id=user.id,
            level="critical",
            message="Tentativa de acesso entre tenants detectada",
            metadata_={
                "tokenTenantId": payload.get("tenantId"),
                "actualTenantId": user.tenant_id
            }
        ))
        await db.commit()
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Acesso entre tenants negado"
        )

    return user


async def get_current_user(user: User = Depends(get_current_db_user)) -> AuthenticatedUser:
    return AuthenticatedUser(
        id=user.id,
        tenant_id=user.tenant_id,
        tenant_name=user.tenant.name,
        email=user.email,
        name=user.name,
        account_type=user.account_type
    )


def require_account_type(*allowed: str):
    """Dependency: restringe a rota aos tipos de conta informados"""
    async def checker(user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
        if user.account_type not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "error": "Acesso negado",
                    "required": list(allowed),
                    "current": user.account_type,
                    "message": f"Apenas contas {', '.join(allowed)} têm acesso a esta funcionalidade"
                }
            )
        return user
    return checker


def get_tenant_connection(user: AuthenticatedUser = Depends(get_current_user)) -> TenantConnection:
    """Conexão com o schema do tenant do usuário autenticado"""
    if not tenant_database.is_connected:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Banco de dados dos escritórios indisponível"
        )
    return tenant_database.connection_for(user.schema_name)


async def get_current_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> AdminUser:
    """Dependency para obter admin autenticado"""
    payload = _decode(_bearer_token(credentials))

    if not payload.get("role"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Acesso restrito a administradores"
        )

    admin = await db.get(AdminUser, payload.get("userId") or payload.get("sub"))
    if not admin or not admin.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Administrador inativo ou não encontrado"
        )
    return admin
