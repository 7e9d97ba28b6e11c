"""
Invoice API Endpoints.

Students read their own invoices; admins may read any invoice.
"""

from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from coursestore.app.db.session import get_db
from coursestore.app.core.dependencies import get_current_user
from coursestore.app.core.guards import is_admin
from coursestore.app.core.exceptions import ResourceNotFoundError
from coursestore.app.domain.checkout.invoice_store import InvoiceStore
from coursestore.app.schemas.invoice import (
    InvoiceResponse,
    InvoiceSummaryResponse,
    build_invoice_response,
    build_invoice_summary,
)
from coursestore.app.schemas.envelope import ApiResult

router = APIRouter(prefix="/invoices", tags=["Invoices"])


@router.get("/user", response_model=ApiResult[List[InvoiceSummaryResponse]])
async def list_my_invoices(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    The caller's invoices, newest first, with their course count.

    Returns 404 when the caller has no invoice yet.
    """
    user_id = current_user["user_id"]
    rows = await InvoiceStore.list_by_user(db, user_id)
    if not rows:
        raise ResourceNotFoundError("Invoice", message=f"No invoices found for user {user_id}")

    return ApiResult.success_result(
        [build_invoice_summary(invoice, total_courses) for invoice, total_courses in rows],
        message="Invoices retrieved"
    )


@router.get("/{invoice_id}", response_model=ApiResult[InvoiceResponse])
async def get_invoice(
    invoice_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    One invoice with its numbered details.

    Invoices of other users are reported as not found.
    """
    invoice = await InvoiceStore.get_by_id(db, invoice_id)
    if invoice is None or (invoice.user_id != current_user["user_id"] and not is_admin(current_user)):
        raise ResourceNotFoundError("Invoice", invoice_id)

    return ApiResult.success_result(build_invoice_response(invoice), message="Invoice retrieved")
