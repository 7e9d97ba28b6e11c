"""
Payment method API endpoints.

Checkout lists the active methods; admins maintain the list. A method that
invoices already use cannot be deleted, only deactivated.
"""

from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from coursestore.app.db.session import get_db
from coursestore.app.core.guards import require_role
from coursestore.app.models.payment_method import PaymentMethod
from coursestore.app.models.user import UserRole
from coursestore.app.schemas.payment_method import PaymentMethodResponse, PaymentMethodWrite
from coursestore.app.schemas.envelope import ApiResult
from coursestore.app.services.audit import log_event, AuditAction
from coursestore.app.services.catalog_admin import CatalogAdmin
from coursestore.app.services.payment_methods import PaymentMethodLookup

router = APIRouter(prefix="/payment-methods", tags=["Payment Methods"])


@router.get("", response_model=ApiResult[List[PaymentMethodResponse]])
async def list_payment_methods(db: AsyncSession = Depends(get_db)):
    """Active payment methods offered at checkout."""
    methods = await PaymentMethodLookup.list_active(db)
    return ApiResult.success_result(
        [PaymentMethodResponse.model_validate(method) for method in methods],
        message="Payment methods retrieved"
    )


@router.post("", response_model=ApiResult[PaymentMethodResponse], status_code=status.HTTP_201_CREATED)
async def create_payment_method(
    payload: PaymentMethodWrite,
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    method = await CatalogAdmin.save(db, PaymentMethod, payload.model_dump(), label="Payment method")
    await db.commit()
    response = PaymentMethodResponse.model_validate(method)

    await log_event(
        db=db,
        action=AuditAction.CATALOG_CREATED,
        actor_id=current_user["user_id"],
        actor_username=current_user.get("sub"),
        entity_type="payment_method",
        entity_id=response.id
    )

    return ApiResult.success_result(response, message="Payment method created", status_code=status.HTTP_201_CREATED)


@router.put("/{payment_method_id}", response_model=ApiResult[PaymentMethodResponse])
async def update_payment_method(
    payment_method_id: int,
    payload: PaymentMethodWrite,
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    """Replace a payment method; ``is_active: false`` hides it from checkout."""
    method = await CatalogAdmin.save(
        db, PaymentMethod, payload.model_dump(), payment_method_id, label="Payment method"
    )
    await db.commit()
    response = PaymentMethodResponse.model_validate(method)

    await log_event(
        db=db,
        action=AuditAction.CATALOG_UPDATED,
        actor_id=current_user["user_id"],
        actor_username=current_user.get("sub"),
        entity_type="payment_method",
        entity_id=payment_method_id,
        metadata={"is_active": payload.is_active}
    )

    return ApiResult.success_result(response, message="Payment method updated")


@router.delete("/{payment_method_id}", response_model=ApiResult[None])
async def delete_payment_method(
    payment_method_id: int,
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    await CatalogAdmin.remove(db, PaymentMethod, payment_method_id, label="Payment method")
    await db.commit()

    await log_event(
        db=db,
        action=AuditAction.CATALOG_DELETED,
        actor_id=current_user["user_id"],
        actor_username=current_user.get("sub"),
        entity_type="payment_method",
        entity_id=payment_method_id
    )

    return ApiResult.success_result(message="Payment method deleted")
