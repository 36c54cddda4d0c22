"""
Advocacia SaaS - Cash Flow Schemas
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, Literal
import datetime
from decimal import Decimal

from .common import validate_link_id

TransactionType = Literal["income", "expense"]
TransactionStatus = Literal["pending", "confirmed", "cancelled"]


class TransactionBase(BaseModel):
    payment_method: Optional[str] = None
    project_id: Optional[str] = None
    client_id: Optional[str] = None
    recurring_frequency: Optional[str] = None
    notes: Optional[str] = None

    @field_validator('project_id', 'client_id')
    @classmethod
    def validate_links(cls, v):
        return validate_link_id(v)


class TransactionCreate(TransactionBase):
    type: TransactionType
    amount: Decimal = Field(..., gt=0)
    category_id: str = Field(..., min_length=1, max_length=50)
    description: str = Field(..., min_length=1)
    date: datetime.date
    status: TransactionStatus = "confirmed"
    tags: list[str] = Field(default_factory=list)
    is_recurring: bool = False


class TransactionUpdate(TransactionBase):
    type: Optional[TransactionType] = None
    amount: Optional[Decimal] = Field(None, gt=0)
    category_id: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, min_length=1)
    date: Optional[datetime.date] = None
    status: Optional[TransactionStatus] = None
    tags: Optional[list[str]] = None
    is_recurring: Optional[bool] = None
