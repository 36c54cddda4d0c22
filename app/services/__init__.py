from .base import AuthenticatedUser, TenantServiceBase
from .clients import ClientService
from .projects import ProjectService
from .tasks import TaskService
from .cash_flow import CashFlowService
from .billing import BillingService
from .invoices import InvoiceService
from .publications import PublicationService
from .notifications import NotificationService
from .dashboard import DashboardService
from .auth import AuthService

__all__ = [
    "AuthenticatedUser",
    "TenantServiceBase",
    "ClientService",
    "ProjectService",
    "TaskService",
    "CashFlowService",
    "BillingService",
    "InvoiceService",
    "PublicationService",
    "NotificationService",
    "DashboardService",
    "AuthService"
]
