"""
Payment method lookup.
"""

from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from coursestore.app.models.payment_method import PaymentMethod


class PaymentMethodLookup:

    @staticmethod
    async def get_active(db: AsyncSession, payment_method_id: int) -> Optional[PaymentMethod]:
        """Active payment method by id, None if unknown or disabled."""
        result = await db.execute(
            select(PaymentMethod).where(
                PaymentMethod.id == payment_method_id,
                PaymentMethod.is_active == True
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def list_active(db: AsyncSession) -> List[PaymentMethod]:
        result = await db.execute(
            select(PaymentMethod)
            .where(PaymentMethod.is_active == True)
            .order_by(PaymentMethod.id)
        )
        return list(result.scalars().all())
