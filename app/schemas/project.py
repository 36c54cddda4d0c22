"""
Advocacia SaaS - Project Schemas
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, Literal, Any
from datetime import date
from decimal import Decimal

from .common import validate_link_id

ProjectStatus = Literal["contacted", "proposal", "won", "lost"]
Priority = Literal["low", "medium", "high", "urgent"]


class ProjectBase(BaseModel):
    description: Optional[str] = None
    client_name: Optional[str] = None
    client_id: Optional[str] = None
    organization: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None

    @field_validator('client_id')
    @classmethod
    def validate_client_id(cls, v):
        return validate_link_id(v)


class ProjectCreate(ProjectBase):
    title: str = Field(..., min_length=1, max_length=255)
    contacts: list[Any] = Field(default_factory=list)
    budget: Decimal = Decimal("0")
    currency: str = "BRL"
    status: ProjectStatus = "contacted"
    start_date: date
    due_date: date
    tags: list[str] = Field(default_factory=list)
    assigned_to: list[str] = Field(default_factory=list)
    priority: Priority = "medium"
    progress: int = Field(0, ge=0, le=100)
    attachments: list[Any] = Field(default_factory=list)


class ProjectUpdate(ProjectBase):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    contacts: Optional[list[Any]] = None
    budget: Optional[Decimal] = None
    currency: Optional[str] = None
    status: Optional[ProjectStatus] = None
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    tags: Optional[list[str]] = None
    assigned_to: Optional[list[str]] = None
    priority: Optional[Priority] = None
    progress: Optional[int] = Field(None, ge=0, le=100)
    attachments: Optional[list[Any]] = None
