"""
Advocacia SaaS - Auth API
Login, refresh, logout, cadastro por chave e perfil dos usuários dos escritórios
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials
from jose import JWTError
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import settings
from app.core.provisioning import TenantSchemaProvisioner, get_provisioner
from app.core.security import decode_access_token
from app.database import get_db
from app.models import User
from app.schemas import LoginRequest, ProfileUpdate, RefreshRequest, RegisterRequest
from app.services.auth import AuthService, profile_dict
from .deps import get_current_db_user, security

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

# Rate limiter compartilhado com o app (app.state.limiter)
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)


@router.post("/login")
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(request: Request, data: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Login de usuário de escritório"""
    user, tokens = await AuthService(db).login(data.email, data.password)
    return {
        "message": "Login realizado com sucesso",
        "user": user.to_dict(),
        "tokens": tokens
    }


@router.post("/refresh")
async def refresh(data: RefreshRequest, db: AsyncSession = Depends(get_db)):
    """Troca o refresh token por um novo par (rotação)"""
    principal, tokens, _ = await AuthService(db).refresh(data.refreshToken)
    return {
        "message": "Tokens renovados com sucesso",
        "user": principal.to_dict(),
        "tokens": tokens
    }


@router.post("/logout")
async def logout(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
):
    """Revoga todos os refresh tokens do usuário, quando identificado"""
    if credentials and credentials.credentials:
        try:
            payload = decode_access_token(credentials.credentials)
        except JWTError:
            payload = None
        if payload and (payload.get("userId") or payload.get("sub")):
            await AuthService(db).revoke_all_tokens(payload.get("userId") or payload.get("sub"))

    return {"message": "Logout realizado com sucesso"}


@router.post("/register", status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.REGISTER_RATE_LIMIT)
async def register(
    request: Request,
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    provisioner: TenantSchemaProvisioner = Depends(get_provisioner)
):
    """Cadastro com chave de registro"""
    user, tokens, is_new_tenant = await AuthService(db).register(data, provisioner)
    return {
        "message": "Usuário cadastrado com sucesso",
        "user": user.to_dict(),
        "tokens": tokens,
        "isNewTenant": is_new_tenant
    }


@router.get("/me")
async def get_me(user: User = Depends(get_current_db_user)):
    """Perfil do usuário autenticado"""
    return {"user": profile_dict(user)}


@router.put("/me")
async def update_me(
    data: ProfileUpdate,
    user: User = Depends(get_current_db_user),
    db: AsyncSession = Depends(get_db)
):
    """Atualiza nome, email ou senha"""
    user = await AuthService(db).update_profile(user, data)
    return {
        "message": "Perfil atualizado com sucesso",
        "user": profile_dict(user)
    }
