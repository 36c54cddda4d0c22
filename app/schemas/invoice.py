"""
Advocacia SaaS - Receivables (Invoice) Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import date
from decimal import Decimal

InvoiceStatus = Literal["nova", "pendente", "atribuida", "paga", "vencida", "cancelada", "processando"]
Urgencia = Literal["baixa", "media", "alta"]


class InvoiceBase(BaseModel):
    cliente_email: Optional[str] = None
    cliente_telefone: Optional[str] = None
    observacoes: Optional[str] = None


class InvoiceCreate(InvoiceBase):
    client_id: Optional[str] = Field(None, max_length=255)
    cliente_nome: str = Field(..., min_length=1, max_length=255)
    numero_fatura: str = Field(..., min_length=1, max_length=50)
    valor: Decimal = Field(..., gt=0)
    descricao: str = Field(..., min_length=1)
    servico_prestado: str = Field(..., min_length=1, max_length=255)
    data_vencimento: date
    urgencia: Urgencia = "media"
    recorrente: bool = False
    intervalo_dias: int = Field(30, ge=1)
    proxima_fatura_data: Optional[date] = None


class InvoiceUpdate(InvoiceBase):
    cliente_nome: Optional[str] = Field(None, min_length=1, max_length=255)
    numero_fatura: Optional[str] = Field(None, min_length=1, max_length=50)
    valor: Optional[Decimal] = Field(None, gt=0)
    descricao: Optional[str] = None
    servico_prestado: Optional[str] = None
    data_vencimento: Optional[date] = None
    urgencia: Optional[Urgencia] = None
    status: Optional[InvoiceStatus] = None
    recorrente: Optional[bool] = None
    intervalo_dias: Optional[int] = Field(None, ge=1)
