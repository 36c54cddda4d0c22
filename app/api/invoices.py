"""
Advocacia SaaS - Receivables API
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.database.tenant import TenantConnection
from app.schemas import InvoiceCreate, InvoiceUpdate
from app.services.base import AuthenticatedUser
from app.services.invoices import InvoiceService
from .deps import get_current_user, get_tenant_connection

router = APIRouter(prefix="/invoices", tags=["Receivables"])


def get_service(
    user: AuthenticatedUser = Depends(get_current_user),
    conn: TenantConnection = Depends(get_tenant_connection)
) -> InvoiceService:
    return InvoiceService(user, conn)


@router.get("")
async def list_invoices(
    search: Optional[str] = None,
    status: Optional[str] = None,
    service: InvoiceService = Depends(get_service)
):
    """Lista faturas a receber, pendentes primeiro"""
    return await service.get_all(search=search, status=status)


@router.get("/dashboard")
async def invoice_dashboard(service: InvoiceService = Depends(get_service)):
    return await service.get_dashboard_stats()


@router.get("/clients")
async def invoice_clients(service: InvoiceService = Depends(get_service)):
    return await service.get_clients()


@router.post("/mark-overdue")
async def mark_overdue(service: InvoiceService = Depends(get_service)):
    """Marca como vencidas as faturas em aberto com vencimento passado"""
    updated = await service.mark_overdue()
    return {"message": f"{updated} faturas marcadas como vencidas", "count": updated}


@router.get("/{invoice_id}")
async def get_invoice(invoice_id: UUID, service: InvoiceService = Depends(get_service)):
    return await service.get_by_id(str(invoice_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_invoice(data: InvoiceCreate, service: InvoiceService = Depends(get_service)):
    invoice = await service.create(data)
    return {"message": "Fatura criada com sucesso", "invoice": invoice}


@router.put("/{invoice_id}")
async def update_invoice(
    invoice_id: UUID,
    data: InvoiceUpdate,
    service: InvoiceService = Depends(get_service)
):
    invoice = await service.update(str(invoice_id), data)
    return {"message": "Fatura atualizada com sucesso", "invoice": invoice}


@router.delete("/{invoice_id}")
async def delete_invoice(invoice_id: UUID, service: InvoiceService = Depends(get_service)):
    await service.delete(str(invoice_id))
    return {"message": "Fatura excluída com sucesso"}
