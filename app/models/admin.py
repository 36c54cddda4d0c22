"""
Advocacia SaaS - Admin User Model
Administradores da plataforma (console de tenants e chaves)
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime

from app.core.config import settings
from app.database import Base


class AdminUser(Base):
    """Modelo de usuário admin"""
    __tablename__ = "admin_users"
    __table_args__ = {"schema": settings.ADMIN_SCHEMA}

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255))
    role = Column(String(20), default="admin")  # admin | super_admin

    is_active = Column(Boolean, default=True)

    last_login_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "is_active": self.is_active,
            "last_login_at": self.last_login_at.isoformat() if self.last_login_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
