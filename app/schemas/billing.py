"""
Advocacia SaaS - Billing Schemas
Orçamentos (estimate) e faturas (invoice)
"""
import datetime
from decimal import Decimal
from typing import Optional, Literal, Any

from pydantic import BaseModel, EmailStr, Field, field_validator

from .common import validate_link_id

DocumentType = Literal["estimate", "invoice"]
AdjustmentType = Literal["percentage", "fixed"]
DocumentStatus = Literal["DRAFT", "PENDING", "SENT", "VIEWED", "PAID", "OVERDUE", "CANCELLED"]


class BillingItem(BaseModel):
    description: str = Field(..., min_length=1)
    quantity: Decimal = Field(Decimal("1"), ge=0)
    rate: Decimal = Field(Decimal("0"), ge=0)
    amount: Optional[Decimal] = Field(None, description="Padrão: quantidade x valor unitário")


class BillingBase(BaseModel):
    description: Optional[str] = None
    receiver_id: Optional[str] = Field(None, description="Cliente do CRM")
    receiver_name: Optional[str] = None
    receiver_email: Optional[str] = None
    receiver_details: Optional[dict[str, Any]] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None

    @field_validator('receiver_id')
    @classmethod
    def validate_receiver(cls, v):
        return validate_link_id(v)


class BillingCreate(BillingBase):
    type: DocumentType
    title: str = Field(..., min_length=1, max_length=255)
    date: datetime.date
    due_date: datetime.date
    items: list[BillingItem] = Field(default_factory=list)
    currency: str = "BRL"
    discount: Decimal = Field(Decimal("0"), ge=0)
    discount_type: AdjustmentType = "fixed"
    fee: Decimal = Field(Decimal("0"), ge=0)
    fee_type: AdjustmentType = "fixed"
    tax: Decimal = Field(Decimal("0"), ge=0)
    tax_type: AdjustmentType = "percentage"
    status: DocumentStatus = "DRAFT"
    tags: list[str] = Field(default_factory=list)


class BillingUpdate(BillingBase):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    date: Optional[datetime.date] = None
    due_date: Optional[datetime.date] = None
    items: Optional[list[BillingItem]] = None
    currency: Optional[str] = None
    discount: Optional[Decimal] = Field(None, ge=0)
    discount_type: Optional[AdjustmentType] = None
    fee: Optional[Decimal] = Field(None, ge=0)
    fee_type: Optional[AdjustmentType] = None
    tax: Optional[Decimal] = Field(None, ge=0)
    tax_type: Optional[AdjustmentType] = None
    status: Optional[DocumentStatus] = None
    tags: Optional[list[str]] = None


class BillingSendRequest(BaseModel):
    email: Optional[EmailStr] = Field(None, description="Padrão: email do destinatário")
