"""
Advocacia SaaS - Tenant Service Base
Comportamento comum dos serviços que operam no schema do tenant
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Optional, Union
from zoneinfo import ZoneInfo

from pydantic import BaseModel

from app.core.config import settings
from app.core.exceptions import AppError, PermissionDeniedError
from app.database.tenant import TenantConnection, schema_name_for

logger = logging.getLogger(__name__)

FINANCIAL_MODULES = ("cash_flow", "financial_dashboard")


@dataclass
class AuthenticatedUser:
    """Usuário autenticado de um escritório (extraído do control plane)"""
    id: str
    tenant_id: str
    tenant_name: str
    email: str
    name: str
    account_type: str

    @property
    def schema_name(self) -> str:
        return schema_name_for(self.tenant_id)


def tenant_now() -> datetime:
    """Agora, sem tzinfo, no fuso em que os schemas gravam NOW()"""
    return datetime.now(ZoneInfo(settings.TENANT_DB_TIMEZONE)).replace(tzinfo=None)


def format_time_ago(value: Union[str, datetime, None], now: Optional[datetime] = None) -> str:
    """Tempo relativo em português ("5 minutos atrás")"""
    if not value:
        return ""
    moment = datetime.fromisoformat(value) if isinstance(value, str) else value
    if moment.tzinfo is not None:
        moment = moment.astimezone(ZoneInfo(settings.TENANT_DB_TIMEZONE)).replace(tzinfo=None)
    now = now or tenant_now()
    seconds = int((now - moment).total_seconds())

    if seconds < 60:
        return "Agora mesmo"
    if seconds < 3600:
        return f"{seconds // 60} minutos atrás"
    if seconds < 86400:
        return f"{seconds // 3600} horas atrás"
    if seconds < 2592000:
        return f"{seconds // 86400} dias atrás"
    return moment.strftime("%d/%m/%Y")


def changed_fields(data: BaseModel, exclude: Iterable[str] = ()) -> dict:
    """Campos enviados no corpo e não nulos (semântica COALESCE)"""
    return {
        key: value
        for key, value in data.model_dump(exclude_unset=True).items()
        if value is not None and key not in exclude
    }


class TenantServiceBase:
    """
    Serviço base: recebe o usuário autenticado e a conexão já
    vinculada ao schema do seu tenant.
    """

    def __init__(self, user: AuthenticatedUser, conn: TenantConnection):
        self.user = user
        self.conn = conn

    def require_permission(self, action: str, module: str) -> bool:
        account_type = self.user.account_type

        # Conta Simples: sem acesso financeiro
        if account_type == "simples" and module in FINANCIAL_MODULES:
            raise PermissionDeniedError("Conta Simples não tem acesso a dados financeiros")

        # Apenas Conta Gerencial pode acessar configurações
        if module == "settings" and account_type != "gerencial":
            raise PermissionDeniedError("Apenas Conta Gerencial pode acessar configurações")

        return True

    async def audit_log(
        self,
        table_name: str,
        operation: str,
        record_id: str,
        old_data: Optional[dict] = None,
        new_data: Optional[dict] = None
    ):
        try:
            await self.conn.execute(
                """
                INSERT INTO ${schema}.audit_log (
                    user_id, table_name, record_id, operation, old_data, new_data, created_at
                ) VALUES ($1, $2, $3, $4, $5, $6, NOW())
                """,
                self.user.id,
                table_name,
                record_id,
                operation,
                old_data,
                new_data
            )
        except AppError as e:
            logger.error(f"Erro ao gravar auditoria ({table_name}/{operation}): {e}")

    async def create_notification(
        self,
        type: str,
        title: str,
        message: str,
        category: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        action_data: Optional[dict] = None,
        user_id: Optional[str] = None
    ):
        try:
            await self.conn.execute(
                """
                INSERT INTO ${schema}.notifications (
                    type, title, message, category, entity_type, entity_id,
                    action_data, user_id, created_by, created_at
                ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, NOW())
                """,
                type,
                title,
                message,
                category,
                entity_type,
                entity_id,
                action_data,
                user_id,
                self.user.name
            )
        except AppError as e:
            logger.error(f"Erro ao criar notificação '{title}': {e}")

    async def update_record(
        self,
        table: str,
        record_id: str,
        fields: dict[str, Any],
        raw_assignments: Iterable[str] = (),
        scope: Optional[dict[str, Any]] = None,
        timestamp_column: str = "updated_at"
    ) -> Optional[dict]:
        """
        UPDATE dinâmico apenas com as colunas informadas.
        scope restringe o WHERE (ex.: user_id nas publicações).
        """
        params: list[Any] = []
        assignments = []
        for column, value in fields.items():
            params.append(value)
            assignments.append(f"{column} = ${len(params)}")
        assignments.extend(raw_assignments)
        assignments.append(f"{timestamp_column} = NOW()")

        params.append(record_id)
        conditions = [f"id = ${len(params)}"]
        for column, value in (scope or {}).items():
            params.append(value)
            conditions.append(f"{column} = ${len(params)}")

        sql = (
            "UPDATE ${schema}." + table
            + " SET " + ", ".join(assignments)
            + " WHERE " + " AND ".join(conditions)
            + " RETURNING *"
        )
        return await self.conn.fetchrow(sql, *params)

    async def lookup_project(self, project_id: Optional[str]) -> tuple[Optional[str], Optional[str]]:
        """Título do projeto e nome do cliente vinculado (desnormalizados)"""
        if not project_id or project_id == "none":
            return None, None
        row = await self.conn.fetchrow(
            """
            SELECT p.title, c.name AS client_name
            FROM ${schema}.projects p
            LEFT JOIN ${schema}.clients c ON p.client_id = c.id
            WHERE p.id = $1
            """,
            project_id
        )
        if not row:
            return None, None
        return row["title"], row["client_name"]


def link_value(value: Optional[str]) -> Optional[str]:
    """'none' remove o vínculo"""
    return None if value in (None, "none") else value
