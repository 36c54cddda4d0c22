"""
Advocacia SaaS - System Log Model
Eventos relevantes do sistema (erros, alertas de segurança)
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, JSON

from app.core.config import settings
from app.database import Base


class SystemLog(Base):
    __tablename__ = "system_logs"
    __table_args__ = {"schema": settings.ADMIN_SCHEMA}

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = Column(String(36), index=True)
    user_id = Column(String(36))
    level = Column(String(20), nullable=False, default="info")
    message = Column(Text, nullable=False)
    metadata_ = Column("metadata", JSON, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "tenantId": self.tenant_id,
            "userId": self.user_id,
            "level": self.level,
            "message": self.message,
            "metadata": self.metadata_ or {},
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
