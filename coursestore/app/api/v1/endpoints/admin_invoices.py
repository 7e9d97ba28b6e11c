"""
Admin Invoice API Endpoints.

Admin-initiated invoice creation from a user's cart and administrative
status correction. Admin-created invoices are unpaid unless ``is_paid`` is
sent explicitly.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from coursestore.app.db.session import get_db
from coursestore.app.core.guards import require_role
from coursestore.app.core.exceptions import InvalidRequestError, ResourceNotFoundError
from coursestore.app.domain.checkout.invoice_store import InvoiceStore
from coursestore.app.domain.checkout.settlement_service import SettlementService
from coursestore.app.models.user import UserRole
from coursestore.app.schemas.invoice import (
    AdminInvoiceCreate,
    InvoiceResponse,
    InvoiceUpdate,
    build_invoice_response,
)
from coursestore.app.schemas.envelope import ApiResult
from coursestore.app.services.audit import log_event, AuditAction
from coursestore.app.services.payment_methods import PaymentMethodLookup

router = APIRouter(prefix="/admin/invoices", tags=["Admin Invoices"])


@router.post("", response_model=ApiResult[InvoiceResponse], status_code=status.HTTP_201_CREATED)
async def create_invoice(
    payload: AdminInvoiceCreate,
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    """Create an invoice from the selected cart lines of ``payload.user_id``."""
    invoice = await SettlementService.create_for_admin(
        db,
        user_id=payload.user_id,
        payment_method_id=payload.payment_method_id,
        selected_cart_line_ids=payload.cart_line_ids,
        is_paid=payload.is_paid
    )
    response = build_invoice_response(invoice)

    await log_event(
        db=db,
        action=AuditAction.INVOICE_CREATED,
        actor_id=current_user["user_id"],
        actor_username=current_user.get("sub"),
        entity_type="invoice",
        entity_id=invoice.id,
        metadata={"for_user_id": payload.user_id, "is_paid": payload.is_paid}
    )

    return ApiResult.success_result(response, message="Invoice created", status_code=status.HTTP_201_CREATED)


@router.put("/{invoice_id}", response_model=ApiResult[InvoiceResponse])
async def update_invoice(
    invoice_id: int,
    payload: InvoiceUpdate,
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    """Change payment method and paid flag of an invoice."""
    if await InvoiceStore.get_by_id(db, invoice_id) is None:
        raise ResourceNotFoundError("Invoice", invoice_id)

    if await PaymentMethodLookup.get_active(db, payload.payment_method_id) is None:
        raise InvalidRequestError(f"Payment method {payload.payment_method_id} is not available")

    await InvoiceStore.update(db, invoice_id, payload.payment_method_id, payload.is_paid)
    await db.commit()

    invoice = await InvoiceStore.get_by_id(db, invoice_id)
    response = build_invoice_response(invoice)

    await log_event(
        db=db,
        action=AuditAction.INVOICE_UPDATED,
        actor_id=current_user["user_id"],
        actor_username=current_user.get("sub"),
        entity_type="invoice",
        entity_id=invoice_id,
        metadata={"payment_method_id": payload.payment_method_id, "is_paid": payload.is_paid}
    )

    return ApiResult.success_result(response, message="Invoice updated")


@router.delete("/{invoice_id}", response_model=ApiResult[None])
async def delete_invoice(
    invoice_id: int,
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    """Delete an invoice and its details."""
    deleted = await InvoiceStore.delete(db, invoice_id)
    if not deleted:
        raise ResourceNotFoundError("Invoice", invoice_id)
    await db.commit()

    await log_event(
        db=db,
        action=AuditAction.INVOICE_DELETED,
        actor_id=current_user["user_id"],
        actor_username=current_user.get("sub"),
        entity_type="invoice",
        entity_id=invoice_id
    )

    return ApiResult.success_result(message="Invoice deleted")
