"""
Advocacia SaaS - CRM Client Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import date
from decimal import Decimal

ClientStatus = Literal["active", "inactive", "pending"]


class ClientBase(BaseModel):
    organization: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    zip_code: Optional[str] = None
    level: Optional[str] = None
    description: Optional[str] = None

    # Dados jurídicos / previdenciários
    pis: Optional[str] = None
    cei: Optional[str] = None
    professional_title: Optional[str] = None
    marital_status: Optional[str] = None
    birth_date: Optional[date] = None
    cpf: Optional[str] = None
    rg: Optional[str] = None
    inss_status: Optional[str] = None
    referred_by: Optional[str] = None


class ClientCreate(ClientBase):
    name: str = Field(..., min_length=1, max_length=255)
    mobile: str = Field(..., min_length=1, max_length=50)
    country: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    budget: Decimal = Decimal("0")
    currency: str = "BRL"
    tags: list[str] = Field(default_factory=list)
    amount_paid: Decimal = Decimal("0")
    status: ClientStatus = "active"


class ClientUpdate(ClientBase):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    mobile: Optional[str] = None
    country: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    budget: Optional[Decimal] = None
    currency: Optional[str] = None
    tags: Optional[list[str]] = None
    amount_paid: Optional[Decimal] = None
    status: Optional[ClientStatus] = None
