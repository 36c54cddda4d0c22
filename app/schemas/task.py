"""
Advocacia SaaS - Task Schemas
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, Literal, Any
from datetime import date
from decimal import Decimal

from .common import validate_link_id
from .project import Priority

TaskStatus = Literal["not_started", "in_progress", "completed", "on_hold", "cancelled"]


class TaskBase(BaseModel):
    description: Optional[str] = None
    project_id: Optional[str] = None
    client_id: Optional[str] = None
    estimated_hours: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None

    @field_validator('project_id', 'client_id')
    @classmethod
    def validate_links(cls, v):
        return validate_link_id(v)


class TaskCreate(TaskBase):
    title: str = Field(..., min_length=1, max_length=255)
    start_date: date
    end_date: date
    status: TaskStatus = "not_started"
    priority: Priority = "medium"
    assigned_to: str = Field(..., min_length=1)
    tags: list[str] = Field(default_factory=list)
    actual_hours: Decimal = Field(Decimal("0"), ge=0)
    progress: int = Field(0, ge=0, le=100)
    subtasks: list[Any] = Field(default_factory=list)
    attachments: list[Any] = Field(default_factory=list)


class TaskUpdate(TaskBase):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[TaskStatus] = None
    priority: Optional[Priority] = None
    assigned_to: Optional[str] = None
    tags: Optional[list[str]] = None
    actual_hours: Optional[Decimal] = Field(None, ge=0)
    progress: Optional[int] = Field(None, ge=0, le=100)
    subtasks: Optional[list[Any]] = None
    attachments: Optional[list[Any]] = None
