"""
Advocacia SaaS - Cash Flow API
Fluxo de caixa: apenas Conta Composta e Gerencial (exceto /stats)
"""
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response

from app.database.tenant import TenantConnection
from app.schemas import TransactionCreate, TransactionUpdate
from app.services.base import AuthenticatedUser
from app.services.cash_flow import CashFlowService
from .deps import get_current_user, get_tenant_connection, require_account_type

router = APIRouter(prefix="/cashflow", tags=["Cash Flow"])

financial_user = require_account_type("composta", "gerencial")


def get_service(
    user: AuthenticatedUser = Depends(financial_user),
    conn: TenantConnection = Depends(get_tenant_connection)
) -> CashFlowService:
    return CashFlowService(user, conn)


@router.get("")
async def list_transactions(
    search: Optional[str] = None,
    type: Optional[str] = None,
    category: Optional[str] = None,
    status: Optional[str] = None,
    date_start: Optional[date] = None,
    date_end: Optional[date] = None,
    service: CashFlowService = Depends(get_service)
):
    """Lista receitas e despesas"""
    return await service.get_all(
        search=search,
        type=type,
        category=category,
        status=status,
        date_start=date_start,
        date_end=date_end
    )


@router.get("/stats")
async def financial_stats(
    user: AuthenticatedUser = Depends(get_current_user),
    conn: TenantConnection = Depends(get_tenant_connection)
):
    """Resumo financeiro (zerado para Conta Simples)"""
    return await CashFlowService(user, conn).get_financial_stats()


@router.get("/export")
async def export_transactions(
    search: Optional[str] = None,
    type: Optional[str] = None,
    category: Optional[str] = None,
    status: Optional[str] = None,
    date_start: Optional[date] = None,
    date_end: Optional[date] = None,
    service: CashFlowService = Depends(get_service)
):
    """Exporta as transações filtradas em CSV"""
    csv_content = await service.export_csv(
        search=search,
        type=type,
        category=category,
        status=status,
        date_start=date_start,
        date_end=date_end
    )
    filename = f"fluxo_caixa_{date.today().isoformat()}.csv"
    return Response(
        content=csv_content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.get("/{transaction_id}")
async def get_transaction(transaction_id: UUID, service: CashFlowService = Depends(get_service)):
    return await service.get_by_id(str(transaction_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_transaction(data: TransactionCreate, service: CashFlowService = Depends(get_service)):
    transaction = await service.create(data)
    return {"message": "Transação criada com sucesso", "transaction": transaction}


@router.put("/{transaction_id}")
async def update_transaction(
    transaction_id: UUID,
    data: TransactionUpdate,
    service: CashFlowService = Depends(get_service)
):
    transaction = await service.update(str(transaction_id), data)
    return {"message": "Transação atualizada com sucesso", "transaction": transaction}


@router.delete("/{transaction_id}")
async def delete_transaction(transaction_id: UUID, service: CashFlowService = Depends(get_service)):
    await service.delete(str(transaction_id))
    return {"message": "Transação excluída com sucesso"}
