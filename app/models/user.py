"""
Advocacia SaaS - User Model
Usuários dos escritórios e seus refresh tokens
"""
import uuid
from datetime import datetime
from enum import Enum
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from app.core.config import settings
from app.database import Base


class AccountType(str, Enum):
    """Tipos de conta"""
    SIMPLES = "simples"        # Operacional, sem dados financeiros
    COMPOSTA = "composta"      # Operacional + financeiro
    GERENCIAL = "gerencial"    # Acesso completo, inclusive configurações


class User(Base):
    """Modelo de usuário de um escritório"""
    __tablename__ = "users"
    __table_args__ = {"schema": settings.ADMIN_SCHEMA}

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = Column(
        String(36),
        ForeignKey(f"{settings.ADMIN_SCHEMA}.tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    account_type = Column(String(20), nullable=False, default=AccountType.SIMPLES.value)

    is_active = Column(Boolean, default=True)
    must_change_password = Column(Boolean, default=False)
    last_login = Column(DateTime)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    tenant = relationship("Tenant", lazy="selectin")

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "accountType": self.account_type,
            "tenantId": self.tenant_id,
            "tenantName": self.tenant.name if self.tenant else None,
        }


class RefreshToken(Base):
    """
    Refresh token emitido para usuário ou admin.
    Apenas o hash SHA-256 do JWT é armazenado.
    """
    __tablename__ = "refresh_tokens"
    __table_args__ = {"schema": settings.ADMIN_SCHEMA}

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), nullable=False, index=True)
    is_admin = Column(Boolean, default=False)
    token_hash = Column(String(64), unique=True, nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
