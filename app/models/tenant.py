"""
Advocacia SaaS - Tenant Model
Escritório (tenant) no control plane; cada tenant tem seu próprio schema
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Integer

from app.core.config import settings
from app.database import Base


class Tenant(Base):
    """
    Modelo de Tenant - representa um escritório no sistema multi-tenant.
    Os dados do escritório ficam isolados no schema tenant_<uuid>.
    """
    __tablename__ = "tenants"
    __table_args__ = {"schema": settings.ADMIN_SCHEMA}

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    name = Column(String(255), nullable=False)
    schema_name = Column(String(63), unique=True, nullable=False)
    domain = Column(String(255))

    # Plano e limites de usuários por tipo de conta
    plan_type = Column(String(50), default="basic")
    max_users_simples = Column(Integer, default=2)
    max_users_composta = Column(Integer, default=1)
    max_users_gerencial = Column(Integer, default=1)
    max_storage_gb = Column(Integer, default=5)

    is_active = Column(Boolean, default=True)
    trial_ends_at = Column(DateTime)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def max_users_for(self, account_type: str) -> int:
        """Limite de usuários do tipo de conta informado"""
        return getattr(self, f"max_users_{account_type}", 0) or 0

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "schema_name": self.schema_name,
            "domain": self.domain,
            "plan_type": self.plan_type,
            "max_users_simples": self.max_users_simples,
            "max_users_composta": self.max_users_composta,
            "max_users_gerencial": self.max_users_gerencial,
            "max_storage_gb": self.max_storage_gb,
            "is_active": self.is_active,
            "trial_ends_at": self.trial_ends_at.isoformat() if self.trial_ends_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
