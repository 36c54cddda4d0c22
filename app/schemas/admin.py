"""
Advocacia SaaS - Admin Schemas
Chaves de registro e gestão de tenants
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime, timezone

ACCOUNT_TYPES = ("simples", "composta", "gerencial")


class RegistrationKeyCreate(BaseModel):
    """Request para emissão de chave de registro"""
    tenantId: Optional[str] = Field(None, description="Sem tenant: o cadastro cria um novo escritório")
    accountType: str = Field(..., description="simples, composta ou gerencial")
    usesAllowed: int = Field(1, ge=1)
    expiresAt: Optional[datetime] = None
    singleUse: bool = True
    metadata: Optional[dict] = None

    @field_validator('accountType')
    @classmethod
    def validate_account_type(cls, v):
        # Aceita SIMPLES/COMPOSTA/GERENCIAL do console admin
        normalized = v.strip().lower()
        if normalized not in ACCOUNT_TYPES:
            raise ValueError('Tipo de conta deve ser simples, composta ou gerencial')
        return normalized

    @field_validator('expiresAt')
    @classmethod
    def strip_timezone(cls, v):
        # Datas são gravadas em UTC sem timezone
        if v is not None and v.tzinfo is not None:
            return v.astimezone(timezone.utc).replace(tzinfo=None)
        return v


class TenantCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    planType: str = "basic"
    maxUsers: Optional[int] = Field(None, ge=1, description="Limite de usuários da Conta Simples")
    maxUsersComposta: Optional[int] = Field(None, ge=0)
    maxUsersGerencial: Optional[int] = Field(None, ge=0)
    maxStorage: Optional[int] = Field(None, ge=1, description="Armazenamento em GB")
    domain: Optional[str] = None


class TenantUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    domain: Optional[str] = None
    planType: Optional[str] = None
    maxUsersSimples: Optional[int] = Field(None, ge=0)
    maxUsersComposta: Optional[int] = Field(None, ge=0)
    maxUsersGerencial: Optional[int] = Field(None, ge=0)
    maxStorageGb: Optional[int] = Field(None, ge=1)
    isActive: Optional[bool] = None
    trialEndsAt: Optional[datetime] = None


class TenantSettingsUpdate(BaseModel):
    """Configurações editáveis pela Conta Gerencial"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    domain: Optional[str] = None
