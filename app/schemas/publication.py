"""
Advocacia SaaS - Publication Schemas
"""
import uuid
from datetime import date
from typing import Optional, Literal

from pydantic import BaseModel, Field, field_validator

from .invoice import Urgencia

PublicationStatus = Literal["nova", "pendente", "atribuida", "finalizada", "descartada"]


class PublicationCreate(BaseModel):
    data_publicacao: date
    processo: str = Field(..., min_length=1, max_length=255)
    diario: str = Field(..., min_length=1, max_length=500)
    vara_comarca: str = Field(..., min_length=1, max_length=255)
    nome_pesquisado: str = Field(..., min_length=1, max_length=255)
    status: PublicationStatus = "nova"
    conteudo: Optional[str] = None
    observacoes: Optional[str] = None
    responsavel: Optional[str] = None
    numero_processo: Optional[str] = None
    cliente: Optional[str] = None
    urgencia: Urgencia = "media"
    tags: list[str] = Field(default_factory=list)


class PublicationStatusUpdate(BaseModel):
    status: PublicationStatus
    observacoes: Optional[str] = None


class PublicationAssign(BaseModel):
    user_id: str = Field(..., description="Usuário do mesmo escritório")

    @field_validator('user_id')
    @classmethod
    def validate_user_id(cls, v):
        try:
            return str(uuid.UUID(v))
        except ValueError:
            raise ValueError("ID de usuário inválido")
