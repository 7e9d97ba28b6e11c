"""
Checkout Settlement Service (Domain Logic).

Turns a user's selected cart lines into an invoice.

Flow:
1. Reject an empty selection
2. Pick the next invoice number
3. Load the user's cart lines (row-locked)
4. Keep only selected ids that are in this user's cart
5. Validate the payment method
6. Total = sum of frozen unit prices
7. Write the header, then for each line: write the detail, remove the cart line
8. Commit once and return the invoice with its details

Steps 2-7 share one transaction, so a failure leaves neither a partial
invoice nor a half-emptied cart. Two settlements that pick the same
invoice number collide on the unique constraint; the loser rolls back and
runs the whole flow again with a number above the one that collided.
"""

import logging
from typing import Iterable, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError

from coursestore.app.core.config import settings
from coursestore.app.core.exceptions import InvalidRequestError, InternalError
from coursestore.app.domain.checkout.cart_store import CartStore
from coursestore.app.domain.checkout.invoice_numbering import InvoiceNumbering
from coursestore.app.domain.checkout.invoice_store import InvoiceStore
from coursestore.app.models.cart_line import CartLine
from coursestore.app.models.invoice import Invoice
from coursestore.app.services.payment_methods import PaymentMethodLookup

logger = logging.getLogger(__name__)


class SettlementService:

    @staticmethod
    async def settle_for_user(
        db: AsyncSession,
        user_id: int,
        payment_method_id: int,
        selected_cart_line_ids: Iterable[int]
    ) -> Invoice:
        """Authenticated checkout: the invoice is recorded as paid."""
        return await SettlementService.settle(
            db, user_id, payment_method_id, selected_cart_line_ids, is_paid=True
        )

    @staticmethod
    async def create_for_admin(
        db: AsyncSession,
        user_id: int,
        payment_method_id: int,
        selected_cart_line_ids: Iterable[int],
        is_paid: bool = False
    ) -> Invoice:
        """Admin-initiated invoice for a user's cart; unpaid unless stated otherwise."""
        return await SettlementService.settle(
            db, user_id, payment_method_id, selected_cart_line_ids, is_paid=is_paid
        )

    @staticmethod
    async def settle(
        db: AsyncSession,
        user_id: int,
        payment_method_id: int,
        selected_cart_line_ids: Iterable[int],
        *,
        is_paid: bool
    ) -> Invoice:
        """
        Settle the selected cart lines of ``user_id`` into one invoice.

        The service owns the transaction: it commits on success and rolls
        back on any failure.

        Raises:
            InvalidRequestError: empty selection, no selected id in the user's
                cart, or unusable payment method
            InternalError: no free invoice number after the configured retries
        """
        selection = set(selected_cart_line_ids or ())
        if not selection:
            raise InvalidRequestError("Select at least one cart item to pay for")

        logger.info("Settling %d selected cart line(s) for user %s", len(selection), user_id)
        attempts = settings.invoice_number_max_retries + 1
        last_tried = 0
        for attempt in range(1, attempts + 1):
            try:
                # never re-offer a number that already collided
                number = max(await InvoiceNumbering.next_number(db), last_tried + 1)
                last_tried = number
                invoice_id = await SettlementService._settle_once(
                    db, user_id, payment_method_id, selection, is_paid,
                    InvoiceNumbering.format(number)
                )
                await db.commit()
            except IntegrityError:
                await db.rollback()
                if attempt == attempts:
                    logger.error(
                        "Settlement for user %s gave up after %d invoice number collisions",
                        user_id, attempts
                    )
                    raise InternalError("Could not allocate an invoice number, please retry")
                logger.warning(
                    "Invoice number collision for user %s (attempt %d/%d), retrying",
                    user_id, attempt, attempts
                )
                continue
            except Exception:
                await db.rollback()
                raise

            invoice = await InvoiceStore.get_by_id(db, invoice_id)
            logger.info(
                "Settled invoice %s for user %s: %d item(s), total %s",
                invoice.invoice_number, user_id, len(invoice.details), invoice.total_price
            )
            return invoice

    @staticmethod
    async def _settle_once(
        db: AsyncSession,
        user_id: int,
        payment_method_id: int,
        selection: set,
        is_paid: bool,
        invoice_number: str
    ) -> int:
        cart_lines = await CartStore.lines_for_update(db, user_id)
        selected = SettlementService.select_lines(cart_lines, selection)
        if not selected:
            raise InvalidRequestError("No matching items in the cart for the selected ids")

        payment_method = await PaymentMethodLookup.get_active(db, payment_method_id)
        if payment_method is None:
            raise InvalidRequestError(f"Payment method {payment_method_id} is not available")

        total_price = sum(line.unit_price for line in selected)
        logger.debug("Trying invoice number %s for user %s", invoice_number, user_id)

        invoice_id = await InvoiceStore.create_header(db, Invoice(
            invoice_number=invoice_number,
            user_id=user_id,
            total_price=total_price,
            payment_method_id=payment_method_id,
            is_paid=is_paid
        ))

        for line in selected:
            # detail first: a failure in between never loses the line's price
            line_id = line.id
            await InvoiceStore.add_detail(
                db,
                invoice_id=invoice_id,
                cart_line_id=line_id,
                course_id=line.course_id,
                offering_id=line.offering_id,
                sub_total_price=line.unit_price
            )
            if not await CartStore.remove(db, user_id, line_id):
                raise InternalError(f"Cart line {line_id} disappeared during settlement")

        return invoice_id

    @staticmethod
    def select_lines(cart_lines: Sequence[CartLine], selection: set) -> list:
        """Cart lines whose id was selected, in cart order. Foreign ids are ignored."""
        return [line for line in cart_lines if line.id in selection]
