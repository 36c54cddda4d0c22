"""
Advocacia SaaS - Billing API
Orçamentos e faturas: CRUD, estatísticas, PDF e envio por email
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response

from app.core.email import EmailService, get_email_service
from app.database.tenant import TenantConnection
from app.schemas import BillingCreate, BillingSendRequest, BillingUpdate
from app.services.base import AuthenticatedUser
from app.services.billing import BillingService
from .deps import get_current_user, get_tenant_connection

router = APIRouter(prefix="/billing", tags=["Billing"])


def get_service(
    user: AuthenticatedUser = Depends(get_current_user),
    conn: TenantConnection = Depends(get_tenant_connection)
) -> BillingService:
    return BillingService(user, conn)


@router.get("")
async def list_documents(
    search: Optional[str] = None,
    type: Optional[str] = None,
    status: Optional[str] = None,
    service: BillingService = Depends(get_service)
):
    """Lista orçamentos e faturas"""
    return await service.get_all(search=search, type=type, status=status)


@router.get("/stats")
async def billing_stats(service: BillingService = Depends(get_service)):
    return await service.get_stats()


@router.get("/{document_id}")
async def get_document(document_id: UUID, service: BillingService = Depends(get_service)):
    return await service.get_by_id(str(document_id))


@router.get("/{document_id}/pdf")
async def document_pdf(document_id: UUID, service: BillingService = Depends(get_service)):
    """Gera o PDF do documento"""
    document, pdf = await service.render_pdf(str(document_id))
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f"inline; filename={document['number']}.pdf"}
    )


@router.post("/{document_id}/send")
async def send_document(
    document_id: UUID,
    data: Optional[BillingSendRequest] = None,
    service: BillingService = Depends(get_service),
    email_service: EmailService = Depends(get_email_service)
):
    """Envia o PDF por email ao destinatário"""
    to_email = data.email if data else None
    document = await service.send(str(document_id), email_service, to_email)
    return {"message": "Documento enviado com sucesso", "document": document}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_document(data: BillingCreate, service: BillingService = Depends(get_service)):
    document = await service.create(data)
    return {"message": "Documento criado com sucesso", "document": document}


@router.put("/{document_id}")
async def update_document(
    document_id: UUID,
    data: BillingUpdate,
    service: BillingService = Depends(get_service)
):
    document = await service.update(str(document_id), data)
    return {"message": "Documento atualizado com sucesso", "document": document}


@router.delete("/{document_id}")
async def delete_document(document_id: UUID, service: BillingService = Depends(get_service)):
    await service.delete(str(document_id))
    return {"message": "Documento excluído com sucesso"}
