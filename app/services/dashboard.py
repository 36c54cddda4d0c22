"""
Advocacia SaaS - Dashboard Service
Consolida as estatísticas de todos os módulos em uma única resposta
"""
import asyncio
import logging

from .base import TenantServiceBase, format_time_ago
from .billing import BillingService
from .cash_flow import CashFlowService
from .clients import ClientService
from .notifications import VISIBLE_TO_USER
from .projects import ProjectService
from .tasks import TaskService

logger = logging.getLogger(__name__)

CATEGORY_ICONS = {
    "client": "Users",
    "project": "FileText",
    "task": "CheckSquare",
    "billing": "DollarSign",
    "cash_flow": "TrendingUp",
}

CATEGORY_COLORS = {
    "client": "text-blue-600",
    "project": "text-purple-600",
    "task": "text-green-600",
    "billing": "text-yellow-600",
    "cash_flow": "text-indigo-600",
}

PROJECT_STATUS_LABELS = {
    "contacted": "Em Contato",
    "proposal": "Com Proposta",
    "won": "Concluído",
    "lost": "Perdido",
}


def trend(condition: bool) -> str:
    return "up" if condition else "down"


class DashboardService(TenantServiceBase):

    async def get_dashboard_data(self) -> dict:
        self.require_permission("read", "dashboard")

        args = (self.user, self.conn)
        client_stats, project_stats, task_stats, financial_stats, billing_stats = await asyncio.gather(
            ClientService(*args).get_stats(),
            ProjectService(*args).get_stats(),
            TaskService(*args).get_stats(),
            CashFlowService(*args).get_financial_stats(),
            BillingService(*args).get_stats()
        )
        recent_activities, urgent_projects, upcoming_invoices = await asyncio.gather(
            self.get_recent_activities(),
            self.get_urgent_projects(),
            self.get_upcoming_invoices()
        )

        growth = financial_stats["growth"]
        return {
            "revenue": {
                "value": financial_stats["monthlyIncome"],
                "change": growth,
                "trend": trend(growth >= 0)
            },
            # Despesas: crescimento do saldo invertido
            "expenses": {
                "value": financial_stats["monthlyExpenses"],
                "change": abs(growth),
                "trend": trend(growth <= 0)
            },
            "balance": {
                "value": financial_stats["monthlyBalance"],
                "change": abs(growth),
                "trend": trend(financial_stats["monthlyBalance"] >= 0)
            },
            "clients": {
                "value": client_stats["total"],
                "change": client_stats["growth"],
                "trend": trend(client_stats["growth"] >= 0),
                "period": "este mês"
            },
            "stats": {
                "clients": client_stats,
                "projects": project_stats,
                "tasks": task_stats,
                "financial": financial_stats,
                "billing": billing_stats
            },
            "recentActivities": recent_activities,
            "urgentProjects": urgent_projects,
            "upcomingInvoices": upcoming_invoices
        }

    async def get_recent_activities(self) -> list[dict]:
        rows = await self.conn.fetch(
            "SELECT id, type, title, message, category, created_at, created_by"
            " FROM ${schema}.notifications"
            " WHERE " + VISIBLE_TO_USER
            + " AND created_at >= NOW() - INTERVAL '7 days'"
            " ORDER BY created_at DESC LIMIT 10",
            self.user.id
        )
        return [
            {
                "id": row["id"],
                "type": row["category"],
                "message": row["message"],
                "time": format_time_ago(row.get("created_at")),
                "icon": CATEGORY_ICONS.get(row["category"], "Bell"),
                "color": CATEGORY_COLORS.get(row["category"], "text-gray-600")
            }
            for row in rows
        ]

    async def get_urgent_projects(self) -> list[dict]:
        rows = await self.conn.fetch(
            """
            SELECT title, due_date, status FROM ${schema}.projects
            WHERE due_date <= CURRENT_DATE + INTERVAL '7 days'
            AND status NOT IN ('won', 'lost')
            ORDER BY due_date ASC
            LIMIT 5
            """
        )
        return [
            {
                "name": row["title"],
                "deadline": row["due_date"],
                "status": PROJECT_STATUS_LABELS.get(row["status"], row["status"])
            }
            for row in rows
        ]

    async def get_upcoming_invoices(self) -> list[dict]:
        # Conta Simples não vê dados financeiros
        if self.user.account_type == "simples":
            return []

        rows = await self.conn.fetch(
            """
            SELECT numero_fatura, cliente_nome, valor, data_vencimento
            FROM ${schema}.invoices
            WHERE data_vencimento <= CURRENT_DATE + INTERVAL '7 days'
            AND status IN ('nova', 'pendente')
            ORDER BY data_vencimento ASC
            LIMIT 5
            """
        )
        return [
            {
                "number": row["numero_fatura"],
                "client": row["cliente_nome"],
                "amount": float(row["valor"] or 0),
                "dueDate": row["data_vencimento"]
            }
            for row in rows
        ]
