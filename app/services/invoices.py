"""
Advocacia SaaS - Receivables Service
Faturas a receber (recebíveis), recorrência e painel de cobrança
"""
import logging
import time
from datetime import timedelta

from app.core.exceptions import NotFoundError
from app.schemas.invoice import InvoiceCreate, InvoiceUpdate
from .base import TenantServiceBase, changed_fields, tenant_now

logger = logging.getLogger(__name__)

INVOICE_DASHBOARD_SQL = """
    SELECT
        COUNT(*) FILTER (WHERE status = 'paga') AS faturas_pagas,
        COUNT(*) FILTER (WHERE status IN ('nova', 'pendente')) AS faturas_pendentes,
        COUNT(*) FILTER (WHERE status = 'vencida') AS faturas_vencidas,
        COUNT(*) FILTER (
            WHERE status IN ('nova', 'pendente')
            AND data_vencimento BETWEEN CURRENT_DATE AND CURRENT_DATE + INTERVAL '3 days'
        ) AS faturas_proximo_vencimento,
        COALESCE(SUM(valor) FILTER (WHERE status = 'paga'), 0) AS valor_pago,
        COALESCE(SUM(valor) FILTER (WHERE status IN ('nova', 'pendente')), 0) AS valor_pendente,
        COALESCE(SUM(valor) FILTER (WHERE status = 'vencida'), 0) AS valor_vencido,
        COUNT(*) FILTER (WHERE status <> 'cancelada') AS faturas_validas,
        COALESCE(AVG(data_pagamento::date - data_emissao) FILTER (
            WHERE status = 'paga' AND data_pagamento IS NOT NULL
        ), 0) AS tempo_medio_pagamento,
        COUNT(*) FILTER (WHERE proxima_notificacao > NOW()) AS notificacoes_agendadas,
        COALESCE(SUM(valor) FILTER (
            WHERE status = 'paga' AND data_pagamento >= DATE_TRUNC('month', NOW())
        ), 0) AS faturamento_mensal,
        COALESCE(SUM(valor) FILTER (
            WHERE status = 'paga'
            AND data_pagamento >= DATE_TRUNC('month', NOW() - INTERVAL '1 month')
            AND data_pagamento < DATE_TRUNC('month', NOW())
        ), 0) AS faturamento_mes_anterior,
        COUNT(DISTINCT cliente_nome) FILTER (WHERE status <> 'cancelada') AS clientes_ativos
    FROM ${schema}.invoices
"""

NEW_CLIENTS_SQL = """
    SELECT COUNT(*) FROM (
        SELECT cliente_nome
        FROM ${schema}.invoices
        WHERE cliente_nome IS NOT NULL
        GROUP BY cliente_nome
        HAVING MIN(criado_em) >= DATE_TRUNC('month', NOW())
    ) novos
"""


def client_slug(name: str) -> str:
    return "_".join(name.split()).lower()


def percentage(part, whole, digits: int = 1) -> float:
    if not whole:
        return 0
    return round(float(part) * 100 / float(whole), digits)


class InvoiceService(TenantServiceBase):

    async def get_all(self, search: str = None, status: str = None) -> list[dict]:
        self.require_permission("read", "receivables")

        sql = "SELECT * FROM ${schema}.invoices WHERE 1=1"
        params = []

        if search:
            params.append(f"%{search}%")
            n = len(params)
            sql += f" AND (numero_fatura ILIKE ${n} OR cliente_nome ILIKE ${n})"

        if status:
            params.append(status)
            sql += f" AND status = ${len(params)}"

        sql += """
            ORDER BY
                CASE
                    WHEN status = 'pendente' THEN 1
                    WHEN status = 'nova' THEN 2
                    WHEN status = 'processando' THEN 3
                    WHEN status = 'atribuida' THEN 4
                    WHEN status = 'paga' THEN 5
                    ELSE 6
                END,
                data_vencimento ASC
        """

        return await self.conn.fetch(sql, *params)

    async def get_by_id(self, invoice_id: str) -> dict:
        self.require_permission("read", "receivables")

        invoice = await self.conn.fetchrow(
            "SELECT * FROM ${schema}.invoices WHERE id = $1",
            invoice_id
        )
        if not invoice:
            raise NotFoundError("Fatura não encontrada")
        return invoice

    async def create(self, data: InvoiceCreate) -> dict:
        self.require_permission("write", "receivables")

        client_id = data.client_id or f"generated_{int(time.time() * 1000)}"
        proxima_fatura_data = data.proxima_fatura_data
        if data.recorrente and proxima_fatura_data is None:
            proxima_fatura_data = data.data_vencimento + timedelta(days=data.intervalo_dias)

        invoice = await self.conn.fetchrow(
            """
            INSERT INTO ${schema}.invoices (
                client_id, numero_fatura, valor, descricao, servico_prestado,
                data_emissao, data_vencimento, status, tentativas_cobranca,
                recorrente, intervalo_dias, proxima_fatura_data, cliente_nome,
                cliente_email, cliente_telefone, criado_por, criado_em,
                atualizado_em, observacoes, urgencia
            ) VALUES (
                $1, $2, $3, $4, $5, $6, $7, 'nova', 0,
                $8, $9, $10, $11, $12, $13, $14, NOW(), NOW(), $15, $16
            ) RETURNING *
            """,
            client_id, data.numero_fatura, data.valor, data.descricao,
            data.servico_prestado, tenant_now().date(), data.data_vencimento,
            data.recorrente, data.intervalo_dias, proxima_fatura_data,
            data.cliente_nome, data.cliente_email, data.cliente_telefone,
            self.user.name, data.observacoes, data.urgencia
        )

        await self.audit_log("invoices", "CREATE", invoice["id"], None, invoice)
        await self.create_notification(
            "warning",
            "Nova Fatura Criada",
            f"{self.user.name} criou a fatura {invoice['numero_fatura']}",
            "billing",
            "invoice",
            invoice["id"],
            {"invoice_id": invoice["id"], "page": "/recebiveis"}
        )
        return invoice

    async def update(self, invoice_id: str, data: InvoiceUpdate) -> dict:
        self.require_permission("write", "receivables")

        old_invoice = await self.get_by_id(invoice_id)
        fields = changed_fields(data)

        raw_assignments = []
        if fields.get("status") == "paga" and old_invoice.get("status") != "paga":
            raw_assignments.append("data_pagamento = NOW()")

        invoice = await self.update_record(
            "invoices", invoice_id, fields, raw_assignments, timestamp_column="atualizado_em"
        )
        if not invoice:
            raise NotFoundError("Fatura não encontrada")

        await self.audit_log("invoices", "UPDATE", invoice_id, old_invoice, invoice)
        return invoice

    async def delete(self, invoice_id: str):
        self.require_permission("write", "receivables")

        invoice = await self.get_by_id(invoice_id)
        await self.conn.execute("DELETE FROM ${schema}.invoices WHERE id = $1", invoice_id)
        await self.audit_log("invoices", "DELETE", invoice_id, invoice, None)

    async def mark_overdue(self) -> int:
        """Faturas nova/pendente com vencimento passado viram vencida"""
        self.require_permission("write", "receivables")

        rows = await self.conn.fetch(
            """
            UPDATE ${schema}.invoices
            SET status = 'vencida', atualizado_em = NOW()
            WHERE status IN ('nova', 'pendente')
            AND data_vencimento < CURRENT_DATE
            RETURNING id
            """
        )
        if rows:
            logger.info(f"{len(rows)} faturas marcadas como vencidas")
        return len(rows)

    async def get_dashboard_stats(self) -> dict:
        self.require_permission("read", "receivables")

        stats = await self.conn.fetchrow(INVOICE_DASHBOARD_SQL) or {}
        novos_clientes = await self.conn.fetchval(NEW_CLIENTS_SQL)

        valor_pago = float(stats.get("valor_pago") or 0)
        valor_pendente = float(stats.get("valor_pendente") or 0)
        valor_vencido = float(stats.get("valor_vencido") or 0)
        faturamento_mensal = float(stats.get("faturamento_mensal") or 0)
        faturamento_anterior = float(stats.get("faturamento_mes_anterior") or 0)

        return {
            "faturasPagas": int(stats.get("faturas_pagas") or 0),
            "faturasPendentes": int(stats.get("faturas_pendentes") or 0),
            "faturasVencidas": int(stats.get("faturas_vencidas") or 0),
            "faturasProximoVencimento": int(stats.get("faturas_proximo_vencimento") or 0),
            "valorTotal": round(valor_pago + valor_pendente + valor_vencido, 2),
            "valorPago": valor_pago,
            "valorPendente": valor_pendente,
            "valorVencido": valor_vencido,
            "novosClientes": int(novos_clientes or 0),
            "taxaCobrancas": percentage(stats.get("faturas_pagas") or 0, stats.get("faturas_validas")),
            "tempoMedioPagamento": round(float(stats.get("tempo_medio_pagamento") or 0), 1),
            "notificacoesAgendadas": int(stats.get("notificacoes_agendadas") or 0),
            "faturamentoMensal": faturamento_mensal,
            "crescimentoMensal": percentage(
                faturamento_mensal - faturamento_anterior, faturamento_anterior
            ),
            "clientesAtivos": int(stats.get("clientes_ativos") or 0)
        }

    async def get_clients(self) -> list[dict]:
        """Clientes agregados a partir das faturas"""
        self.require_permission("read", "receivables")

        rows = await self.conn.fetch(
            """
            SELECT
                cliente_nome AS nome,
                MAX(cliente_email) AS email,
                MAX(cliente_telefone) AS telefone,
                COUNT(*) AS total_faturas,
                COALESCE(SUM(valor), 0) AS total_faturado,
                COALESCE(SUM(CASE WHEN status = 'paga' THEN valor ELSE 0 END), 0) AS total_pago,
                SUM(CASE WHEN status IN ('nova', 'pendente') THEN 1 ELSE 0 END) AS faturas_pendentes,
                MAX(CASE WHEN status = 'paga' THEN data_pagamento END) AS ultimo_pagamento
            FROM ${schema}.invoices
            WHERE cliente_nome IS NOT NULL AND cliente_nome <> ''
            GROUP BY cliente_nome
            ORDER BY total_faturado DESC
            """
        )

        return [
            {
                "id": client_slug(row["nome"]),
                "nome": row["nome"],
                "email": row.get("email"),
                "telefone": row.get("telefone"),
                "whatsapp": row.get("telefone"),
                "totalFaturado": float(row.get("total_faturado") or 0),
                "totalPago": float(row.get("total_pago") or 0),
                "faturasPendentes": int(row.get("faturas_pendentes") or 0),
                "ultimoPagamento": row.get("ultimo_pagamento"),
                "ativo": True,
                "bloqueado": False
            }
            for row in rows
        ]
