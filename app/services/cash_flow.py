"""
Advocacia SaaS - Cash Flow Service
Receitas e despesas do escritório (Conta Composta e Gerencial)
"""
import asyncio
import csv
import io
from datetime import date, datetime
from decimal import Decimal

from app.core.exceptions import NotFoundError
from app.schemas.cash_flow import TransactionCreate, TransactionUpdate
from .base import TenantServiceBase, changed_fields, link_value

CATEGORIES = {
    # Receitas
    "honorarios": "Honorários advocatícios",
    "consultorias": "Consultorias jurídicas",
    "acordos": "Acordos e mediações",
    "custas_reemb": "Custas judiciais reembolsadas",
    "outros_servicos": "Outros serviços jurídicos",
    # Despesas
    "salarios": "Salários e encargos trabalhistas",
    "aluguel": "Aluguel / condomínio",
    "contas": "Contas (água, luz, internet)",
    "material": "Material de escritório",
    "marketing": "Marketing e publicidade",
    "custas_judiciais": "Custas judiciais",
    "treinamentos": "Treinamentos e cursos",
    "transporte": "Transporte e viagens",
    "manutencao": "Manutenção e equipamentos",
    "impostos": "Impostos e taxas",
    "oab": "Associações profissionais (OAB)",
    "seguro": "Seguro profissional",
}

STATUS_LABELS = {
    "confirmed": "Confirmado",
    "pending": "Pendente",
    "cancelled": "Cancelado",
}

CSV_HEADERS = [
    "Data", "Tipo", "Descrição", "Categoria", "Valor", "Método Pagamento",
    "Status", "Projeto", "Cliente", "Criado por", "Observações"
]

EMPTY_FINANCIAL_STATS = {
    "totalIncome": 0,
    "totalExpenses": 0,
    "balance": 0,
    "monthlyIncome": 0,
    "monthlyExpenses": 0,
    "monthlyBalance": 0,
    "growth": 0,
}

BALANCE_GROWTH_SQL = """
    WITH monthly_data AS (
        SELECT
            DATE_TRUNC('month', date) AS month,
            SUM(CASE WHEN type = 'income' THEN amount ELSE -amount END) AS balance
        FROM ${schema}.cash_flow
        WHERE date >= DATE_TRUNC('month', NOW() - INTERVAL '1 month')
        GROUP BY DATE_TRUNC('month', date)
    )
    SELECT
        COALESCE(
            ROUND(
                ((current_month.balance - previous_month.balance) * 100.0 /
                 NULLIF(ABS(previous_month.balance), 0)), 2
            ), 0
        ) AS growth_percentage
    FROM monthly_data current_month
    CROSS JOIN monthly_data previous_month
    WHERE current_month.month = DATE_TRUNC('month', NOW())
    AND previous_month.month = DATE_TRUNC('month', NOW() - INTERVAL '1 month')
"""


def category_name(category_id: str) -> str:
    return CATEGORIES.get(category_id or "", category_id or "")


def format_brl_amount(value) -> str:
    return f"{Decimal(str(value or 0)):.2f}".replace(".", ",")


def format_br_date(value) -> str:
    if not value:
        return "-"
    if isinstance(value, str):
        value = date.fromisoformat(value[:10])
    elif isinstance(value, datetime):
        value = value.date()
    return value.strftime("%d/%m/%Y")


class CashFlowService(TenantServiceBase):

    async def get_all(
        self,
        search: str = None,
        type: str = None,
        category: str = None,
        status: str = None,
        date_start: date = None,
        date_end: date = None
    ) -> list[dict]:
        self.require_permission("read", "cash_flow")

        sql = "SELECT * FROM ${schema}.cash_flow WHERE 1=1"
        params = []

        if search:
            params.append(f"%{search}%")
            sql += f" AND description ILIKE ${len(params)}"

        if type:
            params.append(type)
            sql += f" AND type = ${len(params)}"

        if category:
            params.append(category)
            sql += f" AND category_id = ${len(params)}"

        if status:
            params.append(status)
            sql += f" AND status = ${len(params)}"

        if date_start:
            params.append(date_start)
            sql += f" AND date >= ${len(params)}"

        if date_end:
            params.append(date_end)
            sql += f" AND date <= ${len(params)}"

        sql += " ORDER BY date DESC, created_at DESC"

        return await self.conn.fetch(sql, *params)

    async def get_by_id(self, transaction_id: str) -> dict:
        self.require_permission("read", "cash_flow")

        transaction = await self.conn.fetchrow(
            "SELECT * FROM ${schema}.cash_flow WHERE id = $1",
            transaction_id
        )
        if not transaction:
            raise NotFoundError("Transação não encontrada")
        return transaction

    async def create(self, data: TransactionCreate) -> dict:
        self.require_permission("write", "cash_flow")

        project_id = link_value(data.project_id)
        client_id = link_value(data.client_id)
        project_title, client_name = await self.lookup_project(project_id)

        transaction = await self.conn.fetchrow(
            """
            INSERT INTO ${schema}.cash_flow (
                type, amount, category_id, category_name, description, date,
                payment_method, status, tags, project_id, project_title,
                client_id, client_name, is_recurring, recurring_frequency,
                notes, created_by, created_at, updated_at
            ) VALUES (
                $1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14, $15, $16, $17,
                NOW(), NOW()
            ) RETURNING *
            """,
            data.type, data.amount, data.category_id, category_name(data.category_id),
            data.description, data.date, data.payment_method, data.status, data.tags,
            project_id, project_title, client_id, client_name, data.is_recurring,
            data.recurring_frequency, data.notes, self.user.name
        )

        label = "Receita" if data.type == "income" else "Despesa"
        await self.audit_log("cash_flow", "CREATE", transaction["id"], None, transaction)
        await self.create_notification(
            "info",
            f"Nova {label} Registrada",
            f"{self.user.name} registrou: {data.description}",
            "cash_flow",
            "transaction",
            transaction["id"],
            {"transaction_id": transaction["id"], "page": "/fluxo-caixa"}
        )
        return transaction

    async def update(self, transaction_id: str, data: TransactionUpdate) -> dict:
        self.require_permission("write", "cash_flow")

        old_transaction = await self.get_by_id(transaction_id)
        fields = changed_fields(data)

        if "category_id" in fields:
            fields["category_name"] = category_name(fields["category_id"])

        if "project_id" in fields:
            fields["project_id"] = link_value(fields["project_id"])
            project_title, client_name = await self.lookup_project(fields["project_id"])
            fields["project_title"] = project_title
            fields["client_name"] = client_name

        if "client_id" in fields:
            fields["client_id"] = link_value(fields["client_id"])

        transaction = await self.update_record("cash_flow", transaction_id, fields)
        if not transaction:
            raise NotFoundError("Transação não encontrada")

        await self.audit_log("cash_flow", "UPDATE", transaction_id, old_transaction, transaction)
        return transaction

    async def delete(self, transaction_id: str):
        self.require_permission("write", "cash_flow")

        transaction = await self.get_by_id(transaction_id)
        await self.conn.execute("DELETE FROM ${schema}.cash_flow WHERE id = $1", transaction_id)
        await self.audit_log("cash_flow", "DELETE", transaction_id, transaction, None)

    async def get_financial_stats(self) -> dict:
        # Conta Simples sempre recebe zeros nos dados financeiros
        if self.user.account_type == "simples":
            return dict(EMPTY_FINANCIAL_STATS)

        self.require_permission("read", "cash_flow")

        totals, monthly, growth = await asyncio.gather(
            self.conn.fetchrow(
                """
                SELECT
                    COALESCE(SUM(CASE WHEN type = 'income' THEN amount ELSE 0 END), 0) AS total_income,
                    COALESCE(SUM(CASE WHEN type = 'expense' THEN amount ELSE 0 END), 0) AS total_expenses
                FROM ${schema}.cash_flow
                """
            ),
            self.conn.fetchrow(
                """
                SELECT
                    COALESCE(SUM(CASE WHEN type = 'income' THEN amount ELSE 0 END), 0) AS monthly_income,
                    COALESCE(SUM(CASE WHEN type = 'expense' THEN amount ELSE 0 END), 0) AS monthly_expenses
                FROM ${schema}.cash_flow
                WHERE date >= DATE_TRUNC('month', NOW())
                AND date < DATE_TRUNC('month', NOW()) + INTERVAL '1 month'
                """
            ),
            self.conn.fetchval(BALANCE_GROWTH_SQL)
        )

        totals = totals or {}
        monthly = monthly or {}
        total_income = float(totals.get("total_income") or 0)
        total_expenses = float(totals.get("total_expenses") or 0)
        monthly_income = float(monthly.get("monthly_income") or 0)
        monthly_expenses = float(monthly.get("monthly_expenses") or 0)

        return {
            "totalIncome": total_income,
            "totalExpenses": total_expenses,
            "balance": round(total_income - total_expenses, 2),
            "monthlyIncome": monthly_income,
            "monthlyExpenses": monthly_expenses,
            "monthlyBalance": round(monthly_income - monthly_expenses, 2),
            "growth": float(growth or 0)
        }

    async def export_csv(self, **filters) -> str:
        transactions = await self.get_all(**filters)

        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(CSV_HEADERS)
        for transaction in transactions:
            writer.writerow([
                format_br_date(transaction.get("date")),
                "Receita" if transaction.get("type") == "income" else "Despesa",
                transaction.get("description") or "-",
                transaction.get("category_name") or "-",
                format_brl_amount(transaction.get("amount")),
                transaction.get("payment_method") or "-",
                STATUS_LABELS.get(transaction.get("status"), "Cancelado"),
                transaction.get("project_title") or "-",
                transaction.get("client_name") or "-",
                transaction.get("created_by") or "-",
                transaction.get("notes") or "-",
            ])
        return buffer.getvalue()
