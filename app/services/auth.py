"""
Advocacia SaaS - Auth Service
Login, rotação de refresh tokens, cadastro com chave de registro e perfil
"""
import logging
from datetime import datetime
from typing import Optional, Union

from jose import JWTError
from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import (
    AuthenticationError,
    BadRequestError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
)
from app.core.provisioning import TenantSchemaProvisioner
from app.core.security import (
    REFRESH_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    get_password_hash,
    hash_token,
    verify_password,
)
from app.models import AdminUser, RefreshToken, SystemLog, Tenant, User
from app.schemas.auth import ProfileUpdate, RegisterRequest
from .registration_keys import INVALID_KEY, consume_key, find_usable_key
from .tenants import provisioned_tenant

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Email ou senha incorretos"
INVALID_REFRESH = "Refresh token inválido"
SUSPENDED_ACCOUNT = "Conta suspensa - contate o suporte"


class AuthService:
    """Operações de autenticação sobre o control plane"""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------
    async def issue_tokens(self, principal: Union[User, AdminUser], is_admin: bool = False) -> dict:
        """Gera o par access/refresh e grava o hash do refresh token"""
        claims = {
            "sub": principal.id,
            "userId": principal.id,
            "email": principal.email,
            "name": principal.name,
        }
        if is_admin:
            claims["role"] = principal.role
        else:
            claims["tenantId"] = principal.tenant_id
            claims["accountType"] = principal.account_type

        access_token = create_access_token(claims)
        refresh_token, expires_at = create_refresh_token({"sub": principal.id, "userId": principal.id})

        self.db.add(RefreshToken(
            user_id=principal.id,
            is_admin=is_admin,
            token_hash=hash_token(refresh_token),
            expires_at=expires_at,
            is_active=True
        ))
        await self.db.flush()

        return {"accessToken": access_token, "refreshToken": refresh_token}

    async def revoke_all_tokens(self, user_id: str):
        await self.db.execute(
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id)
            .values(is_active=False)
        )

    async def refresh(self, token: str) -> tuple[Union[User, AdminUser], dict, bool]:
        """
        Rotação do refresh token.
        Um token com assinatura válida mas já desativado indica reuso:
        todos os tokens do usuário são revogados.
        """
        try:
            payload = decode_refresh_token(token)
        except JWTError:
            raise AuthenticationError(INVALID_REFRESH)

        if payload.get("type") != REFRESH_TOKEN_TYPE:
            raise AuthenticationError(INVALID_REFRESH)

        user_id = payload.get("userId") or payload.get("sub")
        result = await self.db.execute(
            select(RefreshToken).where(RefreshToken.token_hash == hash_token(token))
        )
        stored = result.scalar_one_or_none()

        if not stored or stored.user_id != user_id:
            raise AuthenticationError(INVALID_REFRESH)

        if not stored.is_active:
            logger.warning(f"Reuso de refresh token detectado para o usuário {user_id}")
            await self.revoke_all_tokens(user_id)
            self.db.add(SystemLog(
                user_id=user_id,
                level="warning",
                message="Reuso de refresh token detectado",
            ))
            await self.db.commit()
            raise AuthenticationError(INVALID_REFRESH)

        if stored.expires_at <= datetime.utcnow():
            raise AuthenticationError(INVALID_REFRESH)

        stored.is_active = False

        if stored.is_admin:
            admin = await self.db.get(AdminUser, user_id)
            if not admin or not admin.is_active:
                raise AuthenticationError("Usuário inativo ou não encontrado")
            return admin, await self.issue_tokens(admin, is_admin=True), True

        user = await self.get_user(user_id)
        if not user or not user.is_active:
            raise AuthenticationError("Usuário inativo ou não encontrado")
        if not user.tenant or not user.tenant.is_active:
            raise AuthenticationError(SUSPENDED_ACCOUNT)

        return user, await self.issue_tokens(user), False

    # ------------------------------------------------------------------
    # Usuários dos escritórios
    # ------------------------------------------------------------------
    async def get_user(self, user_id: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(func.lower(User.email) == email.lower()))
        return result.scalar_one_or_none()

    async def login(self, email: str, password: str) -> tuple[User, dict]:
        user = await self.get_user_by_email(email)

        if not user or not user.is_active or not verify_password(password, user.password_hash):
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not user.tenant or not user.tenant.is_active:
            raise PermissionDeniedError(SUSPENDED_ACCOUNT)

        user.last_login = datetime.utcnow()
        tokens = await self.issue_tokens(user)
        logger.info(f"Login: {user.email} ({user.account_type})")
        return user, tokens

    async def register(
        self,
        data: RegisterRequest,
        provisioner: TenantSchemaProvisioner
    ) -> tuple[User, dict, bool]:
        """
        Cadastro com chave de registro.

        1. Valida a chave (não revogada, com usos, dentro da validade)
        2. Rejeita email já cadastrado
        3. Cria o escritório e seu schema quando a chave não tem tenant
        4. Respeita o limite de usuários do tipo de conta
        5. Cria o usuário e consome a chave
        """
        key = await find_usable_key(self.db, data.key)
        if not key:
            raise BadRequestError(INVALID_KEY)

        if await self.get_user_by_email(data.email):
            raise ConflictError("Email já cadastrado")

        if key.tenant_id:
            tenant = await self._get_tenant(key.tenant_id)
            if not tenant or not tenant.is_active:
                raise PermissionDeniedError(SUSPENDED_ACCOUNT)
            user, tokens = await self._add_user(tenant, key, data)
            return user, tokens, False

        # Escritório novo: falhas até o commit removem o schema recém-criado
        tenant_name = (key.metadata_ or {}).get("tenantName") or f"Escritório {data.name}"
        async with provisioned_tenant(self.db, provisioner, tenant_name) as tenant:
            user, tokens = await self._add_user(tenant, key, data)
        return user, tokens, True

    async def _add_user(self, tenant: Tenant, key, data: RegisterRequest) -> tuple[User, dict]:
        await self._check_quota(tenant, key.account_type)

        user = User(
            tenant_id=tenant.id,
            email=data.email.lower(),
            password_hash=get_password_hash(data.password),
            name=data.name,
            account_type=key.account_type,
            is_active=True
        )
        user.tenant = tenant
        self.db.add(user)
        await self.db.flush()

        await consume_key(self.db, key, user.email)
        tokens = await self.issue_tokens(user)

        logger.info(f"Usuário cadastrado: {user.email} ({user.account_type}) no tenant {tenant.id}")
        return user, tokens

    async def _get_tenant(self, tenant_id: str) -> Optional[Tenant]:
        return await self.db.get(Tenant, tenant_id)

    async def _check_quota(self, tenant, account_type: str):
        result = await self.db.execute(
            select(func.count(User.id)).where(
                User.tenant_id == tenant.id,
                User.account_type == account_type,
                User.is_active == True  # noqa: E712
            )
        )
        current = result.scalar() or 0
        limit = tenant.max_users_for(account_type)
        if current >= limit:
            raise PermissionDeniedError(
                f"Limite de usuários do tipo {account_type} atingido ({current}/{limit})"
            )

    async def update_profile(self, user: User, data: ProfileUpdate) -> User:
        if data.newPassword:
            if not data.currentPassword:
                raise BadRequestError("Senha atual é obrigatória para alterar a senha")
            if not verify_password(data.currentPassword, user.password_hash):
                raise BadRequestError("Senha atual incorreta")
            user.password_hash = get_password_hash(data.newPassword)
            user.must_change_password = False

        if data.email and data.email.lower() != user.email:
            existing = await self.get_user_by_email(data.email)
            if existing and existing.id != user.id:
                raise ConflictError("Email já está em uso")
            user.email = data.email.lower()

        if data.name:
            user.name = data.name

        user.updated_at = datetime.utcnow()
        await self.db.flush()
        return user

    # ------------------------------------------------------------------
    # Administradores da plataforma
    # ------------------------------------------------------------------
    async def login_admin(self, email: str, password: str) -> tuple[AdminUser, dict]:
        result = await self.db.execute(
            select(AdminUser).where(func.lower(AdminUser.email) == email.lower())
        )
        admin = result.scalar_one_or_none()

        if not admin or not admin.is_active or not verify_password(password, admin.password_hash):
            raise AuthenticationError("Credenciais de administrador inválidas")

        admin.last_login_at = datetime.utcnow()
        tokens = await self.issue_tokens(admin, is_admin=True)
        logger.info(f"Login admin: {admin.email}")
        return admin, tokens

    async def setup_admin(self) -> AdminUser:
        """Cria o super admin padrão quando ainda não existe nenhum"""
        result = await self.db.execute(select(AdminUser).limit(1))
        if result.scalar_one_or_none():
            raise BadRequestError("Setup já realizado")

        admin = AdminUser(
            email=settings.ADMIN_EMAIL.lower(),
            password_hash=get_password_hash(settings.ADMIN_PASSWORD),
            name="Administrador",
            role="super_admin",
            is_active=True
        )
        self.db.add(admin)
        await self.db.flush()
        logger.info(f"Super admin criado: {admin.email}")
        return admin

    async def get_admin(self, admin_id: str) -> AdminUser:
        admin = await self.db.get(AdminUser, admin_id)
        if not admin:
            raise NotFoundError("Administrador não encontrado")
        return admin


def profile_dict(user: User) -> dict:
    """Perfil completo retornado em /api/auth/me"""
    data = user.to_dict()
    data.update({
        "planType": user.tenant.plan_type if user.tenant else None,
        "lastLogin": user.last_login.isoformat() if user.last_login else None,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
    })
    return data
