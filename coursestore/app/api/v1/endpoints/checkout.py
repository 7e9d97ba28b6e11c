"""
Checkout API Endpoints.

The caller's cart and the settlement of selected cart lines into an
invoice. The caller is always identified through the identity resolver;
no endpoint accepts a user id from the client.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from coursestore.app.db.session import get_db
from coursestore.app.core.dependencies import resolve_user_id
from coursestore.app.core.exceptions import DuplicateEntryError, ResourceNotFoundError
from coursestore.app.domain.checkout.cart_store import CartStore
from coursestore.app.domain.checkout.settlement_service import SettlementService
from coursestore.app.models.cart_line import CartLine
from coursestore.app.schemas.checkout import (
    CartAddRequest,
    CartAddResponse,
    CartLineResponse,
    CartResponse,
    SettleRequest,
)
from coursestore.app.schemas.invoice import InvoiceResponse, build_invoice_response
from coursestore.app.schemas.envelope import ApiResult
from coursestore.app.services.catalog import CatalogLookup
from coursestore.app.services.audit import log_event, AuditAction

router = APIRouter(prefix="/checkout", tags=["Checkout"])


@router.post("/add", response_model=ApiResult[CartAddResponse])
async def add_to_cart(
    payload: CartAddRequest,
    user_id: int = Depends(resolve_user_id),
    db: AsyncSession = Depends(get_db)
):
    """
    Add an offering to the caller's cart at its current catalog price.

    Adding the same offering twice is rejected with 400.
    """
    quote = await CatalogLookup.resolve_offering(db, payload.offering_id)

    try:
        cart_line_id = await CartStore.add(db, CartLine(
            user_id=user_id,
            offering_id=quote.offering_id,
            course_id=quote.course_id,
            unit_price=quote.unit_price
        ))
    except DuplicateEntryError as exc:
        raise DuplicateEntryError(exc.message, status_code=status.HTTP_400_BAD_REQUEST)
    await db.commit()

    await log_event(
        db=db,
        action=AuditAction.CART_ITEM_ADDED,
        actor_id=user_id,
        entity_type="cart_line",
        entity_id=cart_line_id,
        metadata={"offering_id": quote.offering_id, "unit_price": quote.unit_price}
    )

    return ApiResult.success_result(
        CartAddResponse(
            cart_line_id=cart_line_id,
            offering_id=quote.offering_id,
            course_id=quote.course_id,
            course_name=quote.course_name,
            unit_price=quote.unit_price
        ),
        message="Course added to cart"
    )


@router.get("", response_model=ApiResult[CartResponse])
async def get_cart(
    user_id: int = Depends(resolve_user_id),
    db: AsyncSession = Depends(get_db)
):
    """The caller's cart lines and their total."""
    items = await CartStore.list_by_user(db, user_id)
    total = await CartStore.total_price(db, user_id)
    return ApiResult.success_result(
        CartResponse(items=[CartLineResponse(**item) for item in items], total=total),
        message="Cart retrieved"
    )


@router.delete("/{cart_line_id}", response_model=ApiResult[None])
async def remove_from_cart(
    cart_line_id: int,
    user_id: int = Depends(resolve_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Remove one line from the caller's cart."""
    removed = await CartStore.remove(db, user_id, cart_line_id)
    if not removed:
        raise ResourceNotFoundError("Cart item", message=f"Cart item {cart_line_id} not found in your cart")
    await db.commit()

    await log_event(
        db=db,
        action=AuditAction.CART_ITEM_REMOVED,
        actor_id=user_id,
        entity_type="cart_line",
        entity_id=cart_line_id
    )

    return ApiResult.success_result(message="Cart item removed")


@router.delete("", response_model=ApiResult[None])
async def clear_cart(
    user_id: int = Depends(resolve_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Empty the caller's cart."""
    removed = await CartStore.clear(db, user_id)
    await db.commit()

    await log_event(
        db=db,
        action=AuditAction.CART_CLEARED,
        actor_id=user_id,
        metadata={"removed": removed}
    )

    return ApiResult.success_result(message=f"{removed} cart item(s) removed")


@router.post("/settle", response_model=ApiResult[InvoiceResponse], status_code=status.HTTP_201_CREATED)
async def settle(
    payload: SettleRequest,
    user_id: int = Depends(resolve_user_id),
    db: AsyncSession = Depends(get_db)
):
    """
    Pay for the selected cart lines.

    Selected ids that are not in the caller's cart are ignored; if none
    match, nothing is created and 400 is returned. The created invoice is
    marked as paid.
    """
    invoice = await SettlementService.settle_for_user(
        db,
        user_id=user_id,
        payment_method_id=payload.payment_method_id,
        selected_cart_line_ids=payload.cart_line_ids
    )
    response = build_invoice_response(invoice)

    await log_event(
        db=db,
        action=AuditAction.INVOICE_CREATED,
        actor_id=user_id,
        entity_type="invoice",
        entity_id=invoice.id,
        metadata={"invoice_number": invoice.invoice_number, "total_price": invoice.total_price}
    )

    return ApiResult.success_result(
        response,
        message="Invoice created",
        status_code=status.HTTP_201_CREATED
    )
