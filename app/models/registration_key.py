"""
Advocacia SaaS - Registration Key Model
Chaves de convite emitidas pelo admin para cadastro de usuários
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Integer, ForeignKey, JSON

from app.core.config import settings
from app.database import Base


class RegistrationKey(Base):
    """
    Chave de registro.
    A chave em texto puro só é mostrada na criação; aqui fica o hash bcrypt
    e o prefixo usado para localizar candidatas.
    """
    __tablename__ = "registration_keys"
    __table_args__ = {"schema": settings.ADMIN_SCHEMA}

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    key_hash = Column(String(255), nullable=False)
    key_prefix = Column(String(8), nullable=False, index=True)

    # Sem tenant: o cadastro cria um novo escritório
    tenant_id = Column(
        String(36),
        ForeignKey(f"{settings.ADMIN_SCHEMA}.tenants.id", ondelete="CASCADE"),
        nullable=True
    )
    account_type = Column(String(20), nullable=False)

    uses_allowed = Column(Integer, default=1)
    uses_left = Column(Integer, default=1)
    single_use = Column(Boolean, default=True)
    expires_at = Column(DateTime)
    revoked = Column(Boolean, default=False)

    metadata_ = Column("metadata", JSON, default=dict)
    created_by = Column(String(36))
    used_logs = Column(JSON, default=list)

    created_at = Column(DateTime, default=datetime.utcnow)

    def is_usable(self, now: datetime = None) -> bool:
        """Não revogada, com usos restantes e dentro da validade"""
        now = now or datetime.utcnow()
        if self.revoked or (self.uses_left or 0) <= 0:
            return False
        return self.expires_at is None or self.expires_at > now

    def to_dict(self):
        return {
            "id": self.id,
            "keyPrefix": self.key_prefix,
            "tenantId": self.tenant_id,
            "accountType": self.account_type,
            "usesAllowed": self.uses_allowed,
            "usesLeft": self.uses_left,
            "singleUse": self.single_use,
            "expiresAt": self.expires_at.isoformat() if self.expires_at else None,
            "revoked": self.revoked,
            "metadata": self.metadata_ or {},
            "createdBy": self.created_by,
            "usageCount": len(self.used_logs or []),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
