from .auth import router as auth_router
from .admin import router as admin_router
from .clients import router as clients_router
from .projects import router as projects_router
from .tasks import router as tasks_router
from .cashflow import router as cashflow_router
from .billing import router as billing_router
from .invoices import router as invoices_router
from .publications import router as publications_router
from .notifications import router as notifications_router
from .dashboard import router as dashboard_router
from .settings import router as settings_router
from .health import router as health_router

__all__ = [
    "auth_router",
    "admin_router",
    "clients_router",
    "projects_router",
    "tasks_router",
    "cashflow_router",
    "billing_router",
    "invoices_router",
    "publications_router",
    "notifications_router",
    "dashboard_router",
    "settings_router",
    "health_router"
]
