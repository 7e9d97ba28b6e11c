"""
Invoice Store.

Persists invoice headers and details and answers the read queries of the
invoice endpoints. Nothing here commits.
"""

from datetime import datetime, timezone
from typing import List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, update, delete
from sqlalchemy.orm import selectinload

from coursestore.app.models.invoice import Invoice, InvoiceDetail
from coursestore.app.models.schedule import ScheduleCourse


class InvoiceStore:

    @staticmethod
    async def create_header(db: AsyncSession, invoice: Invoice) -> int:
        """
        Persist invoice header fields and return the generated id.

        Raises:
            IntegrityError: invoice_number already taken
        """
        db.add(invoice)
        await db.flush()
        return invoice.id

    @staticmethod
    async def add_detail(
        db: AsyncSession,
        invoice_id: int,
        cart_line_id: Optional[int],
        course_id: int,
        offering_id: int,
        sub_total_price: int
    ) -> InvoiceDetail:
        """Append one detail row to an invoice."""
        detail = InvoiceDetail(
            invoice_id=invoice_id,
            cart_line_id=cart_line_id,
            course_id=course_id,
            offering_id=offering_id,
            sub_total_price=sub_total_price
        )
        db.add(detail)
        await db.flush()
        return detail

    @staticmethod
    async def get_by_id(db: AsyncSession, invoice_id: int) -> Optional[Invoice]:
        """
        Load an invoice with its payment method and its details (insertion
        order) including course and schedule data. None if absent.
        """
        query = (
            select(Invoice)
            .options(
                selectinload(Invoice.payment_method),
                selectinload(Invoice.details).selectinload(InvoiceDetail.course),
                selectinload(Invoice.details)
                .selectinload(InvoiceDetail.offering)
                .selectinload(ScheduleCourse.schedule),
            )
            .where(Invoice.id == invoice_id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_by_user(db: AsyncSession, user_id: int) -> List[Tuple[Invoice, int]]:
        """
        List a user's invoices, newest first, each paired with its number of
        details. Details themselves are not loaded.
        """
        total_courses = (
            select(func.count(InvoiceDetail.id))
            .where(InvoiceDetail.invoice_id == Invoice.id)
            .correlate(Invoice)
            .scalar_subquery()
        )
        query = (
            select(Invoice, total_courses)
            .options(selectinload(Invoice.payment_method))
            .where(Invoice.user_id == user_id)
            .order_by(Invoice.created_at.desc(), Invoice.id.desc())
        )
        result = await db.execute(query)
        return [(invoice, count) for invoice, count in result.all()]

    @staticmethod
    async def update(
        db: AsyncSession,
        invoice_id: int,
        payment_method_id: int,
        is_paid: bool
    ) -> bool:
        """
        Administrative status correction. Number, owner, total and details
        stay as settled.
        """
        result = await db.execute(
            update(Invoice)
            .where(Invoice.id == invoice_id)
            .values(payment_method_id=payment_method_id, is_paid=is_paid, updated_at=datetime.now(timezone.utc))
        )
        return result.rowcount > 0

    @staticmethod
    async def delete(db: AsyncSession, invoice_id: int) -> bool:
        """Delete an invoice together with its details."""
        await db.execute(delete(InvoiceDetail).where(InvoiceDetail.invoice_id == invoice_id))
        result = await db.execute(delete(Invoice).where(Invoice.id == invoice_id))
        return result.rowcount > 0
