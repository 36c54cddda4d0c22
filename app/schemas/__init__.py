from .auth import (
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    ProfileUpdate,
    TokenPair,
    AdminLoginRequest
)
from .admin import RegistrationKeyCreate, TenantCreate, TenantUpdate, TenantSettingsUpdate
from .client import ClientCreate, ClientUpdate
from .project import ProjectCreate, ProjectUpdate
from .task import TaskCreate, TaskUpdate
from .cash_flow import TransactionCreate, TransactionUpdate
from .billing import BillingItem, BillingCreate, BillingUpdate, BillingSendRequest
from .invoice import InvoiceCreate, InvoiceUpdate
from .publication import PublicationCreate, PublicationStatusUpdate, PublicationAssign

__all__ = [
    "LoginRequest",
    "RefreshRequest",
    "RegisterRequest",
    "ProfileUpdate",
    "TokenPair",
    "AdminLoginRequest",
    "RegistrationKeyCreate",
    "TenantCreate",
    "TenantUpdate",
    "TenantSettingsUpdate",
    "ClientCreate",
    "ClientUpdate",
    "ProjectCreate",
    "ProjectUpdate",
    "TaskCreate",
    "TaskUpdate",
    "TransactionCreate",
    "TransactionUpdate",
    "BillingItem",
    "BillingCreate",
    "BillingUpdate",
    "BillingSendRequest",
    "InvoiceCreate",
    "InvoiceUpdate",
    "PublicationCreate",
    "PublicationStatusUpdate",
    "PublicationAssign"
]
