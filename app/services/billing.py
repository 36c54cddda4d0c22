"""
Advocacia SaaS - Billing Service
Orçamentos (EST-NNN) e faturas (INV-NNN) com PDF e envio por email
"""
import asyncio
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from fastapi.concurrency import run_in_threadpool

from app.core.email import EmailService
from app.core.exceptions import BadRequestError, EmailNotConfiguredError, NotFoundError
from app.schemas.billing import BillingCreate, BillingUpdate
from app.utils.billing_pdf import DOCUMENT_LABELS, format_currency, format_date, generate_billing_pdf
from .base import TenantServiceBase, changed_fields, link_value

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
NUMBER_PREFIXES = {"estimate": "EST", "invoice": "INV"}
PRICING_FIELDS = ("items", "discount", "discount_type", "fee", "fee_type", "tax", "tax_type")
RECEIVER_FIELDS = ("receiver_id", "receiver_name", "receiver_email", "receiver_details")


def to_decimal(value) -> Decimal:
    return Decimal(str(value if value is not None else 0))


def item_amount(item: dict) -> Decimal:
    if item.get("amount") is not None:
        return to_decimal(item["amount"])
    return to_decimal(item.get("quantity", 1)) * to_decimal(item.get("rate", 0))


def adjustment(subtotal: Decimal, value, kind: str) -> Decimal:
    value = to_decimal(value)
    if kind == "percentage":
        return subtotal * value / 100
    return value


def calculate_totals(
    items: list[dict],
    discount=0,
    discount_type: str = "fixed",
    fee=0,
    fee_type: str = "fixed",
    tax=0,
    tax_type: str = "percentage"
) -> tuple[list[dict], Decimal, Decimal]:
    """
    Normaliza os itens e calcula (itens, subtotal, total).
    total = subtotal - desconto + taxa + impostos, arredondado em centavos.
    """
    normalized = []
    for item in items:
        amount = item_amount(item).quantize(CENTS, rounding=ROUND_HALF_UP)
        normalized.append({
            "description": item.get("description", ""),
            "quantity": to_decimal(item.get("quantity", 1)),
            "rate": to_decimal(item.get("rate", 0)),
            "amount": amount
        })

    subtotal = sum((item["amount"] for item in normalized), Decimal("0"))
    total = (
        subtotal
        - adjustment(subtotal, discount, discount_type)
        + adjustment(subtotal, fee, fee_type)
        + adjustment(subtotal, tax, tax_type)
    )
    return (
        normalized,
        subtotal.quantize(CENTS, rounding=ROUND_HALF_UP),
        total.quantize(CENTS, rounding=ROUND_HALF_UP)
    )


def format_document_number(doc_type: str, sequence: int) -> str:
    return f"{NUMBER_PREFIXES[doc_type]}-{sequence:03d}"


class BillingService(TenantServiceBase):

    async def get_all(self, search: str = None, type: str = None, status: str = None) -> list[dict]:
        self.require_permission("read", "billing")

        sql = "SELECT * FROM ${schema}.billing WHERE 1=1"
        params = []

        if search:
            params.append(f"%{search}%")
            n = len(params)
            sql += f" AND (number ILIKE ${n} OR title ILIKE ${n} OR receiver_name ILIKE ${n})"

        if type:
            params.append(type)
            sql += f" AND type = ${len(params)}"

        if status:
            params.append(status)
            sql += f" AND status = ${len(params)}"

        sql += " ORDER BY created_at DESC"

        return await self.conn.fetch(sql, *params)

    async def get_by_id(self, document_id: str) -> dict:
        self.require_permission("read", "billing")

        document = await self.conn.fetchrow(
            "SELECT * FROM ${schema}.billing WHERE id = $1",
            document_id
        )
        if not document:
            raise NotFoundError("Documento não encontrado")
        return document

    async def next_number(self, doc_type: str) -> str:
        """Próximo número da sequência do tipo (EST-001, INV-002...)"""
        last = await self.conn.fetchval(
            """
            SELECT COALESCE(MAX(CAST(SUBSTRING(number FROM '[0-9]+$') AS INTEGER)), 0)
            FROM ${schema}.billing
            WHERE type = $1
            """,
            doc_type
        )
        return format_document_number(doc_type, int(last or 0) + 1)

    def sender(self) -> tuple[str, dict]:
        name = self.user.tenant_name
        return name, {"name": name, "email": self.user.email}

    async def resolve_receiver(
        self,
        receiver_id: Optional[str],
        receiver_name: Optional[str] = None,
        receiver_email: Optional[str] = None,
        receiver_details: Optional[dict] = None
    ) -> tuple[Optional[str], str, dict]:
        """Destinatário a partir do cliente do CRM ou dos campos informados"""
        details = dict(receiver_details or {})

        if receiver_id:
            client = await self.conn.fetchrow(
                """
                SELECT id, name, email, mobile, address, city, state
                FROM ${schema}.clients WHERE id = $1
                """,
                receiver_id
            )
            if not client:
                raise NotFoundError("Cliente não encontrado")
            for key in ("email", "mobile", "address", "city", "state"):
                if client.get(key) and key not in details:
                    details[key] = client[key]
            name = receiver_name or client["name"]
        else:
            name = receiver_name or details.get("name") or "Cliente não informado"

        if receiver_email:
            details["email"] = receiver_email
        details["name"] = name
        return receiver_id, name, details

    async def create(self, data: BillingCreate) -> dict:
        self.require_permission("write", "billing")

        items, subtotal, total = calculate_totals(
            [item.model_dump() for item in data.items],
            data.discount, data.discount_type,
            data.fee, data.fee_type,
            data.tax, data.tax_type
        )
        number = await self.next_number(data.type)
        sender_name, sender_details = self.sender()
        receiver_id, receiver_name, receiver_details = await self.resolve_receiver(
            link_value(data.receiver_id),
            data.receiver_name,
            data.receiver_email,
            data.receiver_details
        )

        document = await self.conn.fetchrow(
            """
            INSERT INTO ${schema}.billing (
                type, number, title, description, date, due_date,
                sender_name, sender_details, receiver_id, receiver_name, receiver_details,
                items, subtotal, discount, discount_type, fee, fee_type,
                tax, tax_type, total, currency, status, payment_method, tags, notes,
                created_by, last_modified_by, created_at, updated_at
            ) VALUES (
                $1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14,
                $15, $16, $17, $18, $19, $20, $21, $22, $23, $24, $25, $26, $26,
                NOW(), NOW()
            ) RETURNING *
            """,
            data.type, number, data.title, data.description, data.date, data.due_date,
            sender_name, sender_details, receiver_id, receiver_name, receiver_details,
            items, subtotal, data.discount, data.discount_type, data.fee, data.fee_type,
            data.tax, data.tax_type, total, data.currency, data.status, data.payment_method,
            data.tags, data.notes, self.user.name
        )

        label = "Orçamento" if data.type == "estimate" else "Fatura"
        await self.audit_log("billing", "CREATE", document["id"], None, document)
        await self.create_notification(
            "info",
            f"Novo {label} Criado",
            f"{self.user.name} criou {document['number']}",
            "billing",
            "document",
            document["id"],
            {"document_id": document["id"], "page": "/cobranca"}
        )
        return document

    async def update(self, document_id: str, data: BillingUpdate) -> dict:
        self.require_permission("write", "billing")

        old_document = await self.get_by_id(document_id)
        fields = changed_fields(data, exclude=RECEIVER_FIELDS)

        if any(field in fields for field in PRICING_FIELDS):
            pricing = {field: fields.get(field, old_document.get(field)) for field in PRICING_FIELDS}
            items, subtotal, total = calculate_totals(
                pricing["items"] or [],
                pricing["discount"], pricing["discount_type"] or "fixed",
                pricing["fee"], pricing["fee_type"] or "fixed",
                pricing["tax"], pricing["tax_type"] or "percentage"
            )
            fields["items"] = items
            fields["subtotal"] = subtotal
            fields["total"] = total

        sent = changed_fields(data)
        if any(field in sent for field in RECEIVER_FIELDS):
            if "receiver_id" in sent:
                receiver_id = link_value(sent["receiver_id"])
                details = sent.get("receiver_details")
            else:
                receiver_id = old_document.get("receiver_id")
                details = sent.get("receiver_details", old_document.get("receiver_details"))
            receiver = await self.resolve_receiver(
                receiver_id,
                sent.get("receiver_name"),
                sent.get("receiver_email"),
                details
            )
            fields["receiver_id"], fields["receiver_name"], fields["receiver_details"] = receiver

        raw_assignments = []
        if fields.get("status") == "PAID" and old_document.get("status") != "PAID":
            fields["payment_status"] = "paid"
            raw_assignments.append("payment_date = NOW()")

        fields["last_modified_by"] = self.user.name

        document = await self.update_record("billing", document_id, fields, raw_assignments)
        if not document:
            raise NotFoundError("Documento não encontrado")

        await self.audit_log("billing", "UPDATE", document_id, old_document, document)
        return document

    async def delete(self, document_id: str):
        self.require_permission("write", "billing")

        document = await self.get_by_id(document_id)
        await self.conn.execute("DELETE FROM ${schema}.billing WHERE id = $1", document_id)
        await self.audit_log("billing", "DELETE", document_id, document, None)

    async def get_stats(self) -> dict:
        self.require_permission("read", "billing")

        estimates, invoices, pending, paid, overdue, this_month = await asyncio.gather(
            self.conn.fetchval("SELECT COUNT(*) FROM ${schema}.billing WHERE type = 'estimate'"),
            self.conn.fetchval("SELECT COUNT(*) FROM ${schema}.billing WHERE type = 'invoice'"),
            self.conn.fetchval(
                """
                SELECT COALESCE(SUM(total), 0) FROM ${schema}.billing
                WHERE status IN ('PENDING', 'SENT', 'VIEWED')
                """
            ),
            self.conn.fetchval(
                """
                SELECT COALESCE(SUM(total), 0) FROM ${schema}.billing
                WHERE status = 'PAID' AND payment_date >= DATE_TRUNC('month', NOW())
                """
            ),
            self.conn.fetchval(
                """
                SELECT COALESCE(SUM(total), 0) FROM ${schema}.billing
                WHERE due_date < CURRENT_DATE AND status NOT IN ('PAID', 'CANCELLED')
                """
            ),
            self.conn.fetchval(
                """
                SELECT COALESCE(SUM(total), 0) FROM ${schema}.billing
                WHERE DATE_TRUNC('month', due_date) = DATE_TRUNC('month', NOW())
                """
            )
        )

        return {
            "totalEstimates": int(estimates or 0),
            "totalInvoices": int(invoices or 0),
            "pendingAmount": float(pending or 0),
            "paidAmount": float(paid or 0),
            "overdueAmount": float(overdue or 0),
            "thisMonthAmount": float(this_month or 0)
        }

    async def render_pdf(self, document_id: str) -> tuple[dict, bytes]:
        document = await self.get_by_id(document_id)
        pdf = await run_in_threadpool(generate_billing_pdf, document)
        return document, pdf

    async def send(self, document_id: str, email_service: EmailService, to_email: Optional[str] = None) -> dict:
        """Envia o PDF ao destinatário e marca o documento como enviado"""
        self.require_permission("write", "billing")

        if not email_service.is_configured():
            raise EmailNotConfiguredError()

        document, pdf = await self.render_pdf(document_id)
        recipient = to_email or (document.get("receiver_details") or {}).get("email")
        if not recipient:
            raise BadRequestError("Destinatário sem email cadastrado")

        label = DOCUMENT_LABELS.get(document["type"], "Documento").capitalize()
        sent = await run_in_threadpool(
            email_service.send_billing_document,
            recipient,
            document["receiver_name"],
            document["sender_name"],
            label,
            document["number"],
            document["title"],
            format_currency(document.get("total"), document.get("currency") or "BRL"),
            format_date(document.get("due_date")),
            pdf
        )
        if not sent:
            raise BadRequestError("Falha ao enviar email")

        updated = await self.conn.fetchrow(
            """
            UPDATE ${schema}.billing SET
                email_sent = true,
                email_sent_at = NOW(),
                status = CASE WHEN status IN ('DRAFT', 'PENDING') THEN 'SENT' ELSE status END,
                last_modified_by = $1,
                updated_at = NOW()
            WHERE id = $2
            RETURNING *
            """,
            self.user.name,
            document_id
        )
        logger.info(f"Documento {document['number']} enviado para {recipient}")
        await self.audit_log("billing", "UPDATE", document_id, document, updated)
        return updated
