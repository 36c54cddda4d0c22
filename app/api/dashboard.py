"""
Advocacia SaaS - Dashboard API
"""
from fastapi import APIRouter, Depends

from app.database.tenant import TenantConnection
from app.services.base import AuthenticatedUser
from app.services.dashboard import DashboardService
from .deps import get_current_user, get_tenant_connection

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("")
async def get_dashboard(
    user: AuthenticatedUser = Depends(get_current_user),
    conn: TenantConnection = Depends(get_tenant_connection)
):
    """Cards, atividades recentes, projetos urgentes e próximas faturas"""
    return await DashboardService(user, conn).get_dashboard_data()
