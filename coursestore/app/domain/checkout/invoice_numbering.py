"""
Invoice Numbering.

Derives the next sequential invoice number from the last issued one.
Invoice numbers look like ``DLA00042``: a fixed prefix followed by a
zero-padded counter.
"""

import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from coursestore.app.core.config import settings
from coursestore.app.models.invoice import Invoice

logger = logging.getLogger(__name__)


class InvoiceNumbering:

    @staticmethod
    def parse(invoice_number: Optional[str], prefix: Optional[str] = None) -> Optional[int]:
        """Counter value of a stored invoice number, or None if it is malformed."""
        prefix = settings.invoice_number_prefix if prefix is None else prefix
        if not invoice_number or not invoice_number.startswith(prefix):
            return None
        digits = invoice_number[len(prefix):]
        if not digits.isdigit():
            return None
        return int(digits)

    @staticmethod
    def format(number: int) -> str:
        """Render a counter value, e.g. 43 -> ``DLA00043``."""
        return f"{settings.invoice_number_prefix}{number:0{settings.invoice_number_width}d}"

    @staticmethod
    async def next_number(db: AsyncSession) -> int:
        """
        Next counter value: last issued number + 1.

        When the most recent number cannot be parsed, continues after the
        highest well-formed number instead; returns 1 when there is none.
        Not atomic on its own: two transactions may read the same value.
        The unique constraint on ``invoices.invoice_number`` rejects the
        loser, which the settlement service retries.
        """
        result = await db.execute(
            select(Invoice.invoice_number).order_by(Invoice.id.desc()).limit(1)
        )
        last_number = result.scalar_one_or_none()
        if last_number is None:
            return 1

        counter = InvoiceNumbering.parse(last_number)
        if counter is None:
            counter = await InvoiceNumbering._highest_well_formed(db)
            logger.warning(
                "Malformed invoice number %r, continuing after %s",
                last_number, InvoiceNumbering.format(counter) if counter else "nothing"
            )
        return counter + 1

    @staticmethod
    async def _highest_well_formed(db: AsyncSession) -> int:
        prefix = settings.invoice_number_prefix
        result = await db.execute(
            select(Invoice.invoice_number).where(Invoice.invoice_number.startswith(prefix, autoescape=True))
        )
        counters = (InvoiceNumbering.parse(value) for value in result.scalars())
        return max((counter for counter in counters if counter is not None), default=0)
