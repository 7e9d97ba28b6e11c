"""
Cart Store.

Persists per-user cart lines. Every method works inside the caller's
session; nothing here commits.
"""

from typing import List, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, update, delete
from sqlalchemy.exc import IntegrityError

from coursestore.app.models.cart_line import CartLine
from coursestore.app.models.course import Course
from coursestore.app.models.category import Category
from coursestore.app.models.schedule import Schedule, ScheduleCourse
from coursestore.app.models.invoice import InvoiceDetail
from coursestore.app.core.exceptions import DuplicateEntryError


class CartStore:

    @staticmethod
    async def add(db: AsyncSession, line: CartLine) -> int:
        """
        Insert a cart line and return its generated id.

        Raises:
            DuplicateEntryError: the user already has this offering in the cart
        """
        if await CartStore.exists(db, line.user_id, line.offering_id):
            raise DuplicateEntryError("Course offering is already in the cart")

        db.add(line)
        try:
            await db.flush()
        except IntegrityError:
            # a concurrent add won the unique (user_id, offering_id) constraint
            raise DuplicateEntryError("Course offering is already in the cart")
        return line.id

    @staticmethod
    async def list_by_user(db: AsyncSession, user_id: int) -> List[dict]:
        """
        List a user's cart lines in insertion order, enriched with course,
        category and schedule display fields.
        """
        query = (
            select(
                CartLine,
                Course.course_name,
                Course.course_image,
                Category.category_name,
                Schedule.schedule_date,
            )
            .join(Course, CartLine.course_id == Course.id)
            .outerjoin(Category, Course.category_id == Category.id)
            .outerjoin(ScheduleCourse, CartLine.offering_id == ScheduleCourse.id)
            .outerjoin(Schedule, ScheduleCourse.schedule_id == Schedule.id)
            .where(CartLine.user_id == user_id)
            .order_by(CartLine.id)
        )
        result = await db.execute(query)

        items = []
        for line, course_name, course_image, category_name, schedule_date in result.all():
            items.append({
                "cart_line_id": line.id,
                "user_id": line.user_id,
                "offering_id": line.offering_id,
                "course_id": line.course_id,
                "course_name": course_name,
                "course_image": course_image or "",
                "category_name": category_name or "",
                "schedule_date": schedule_date,
                "unit_price": line.unit_price,
                "created_at": line.created_at,
                "updated_at": line.updated_at,
            })
        return items

    @staticmethod
    async def lines_for_update(db: AsyncSession, user_id: int) -> Sequence[CartLine]:
        """
        Load a user's cart lines in insertion order and lock them for the
        rest of the transaction (no-op on SQLite).
        """
        result = await db.execute(
            select(CartLine)
            .where(CartLine.user_id == user_id)
            .order_by(CartLine.id)
            .with_for_update()
        )
        return result.scalars().all()

    @staticmethod
    async def total_price(db: AsyncSession, user_id: int) -> int:
        """Sum of unit prices of the user's remaining lines (0 when empty)."""
        result = await db.execute(
            select(func.coalesce(func.sum(CartLine.unit_price), 0)).where(CartLine.user_id == user_id)
        )
        return int(result.scalar())

    @staticmethod
    async def exists(db: AsyncSession, user_id: int, offering_id: int) -> bool:
        result = await db.execute(
            select(func.count(CartLine.id)).where(
                CartLine.user_id == user_id,
                CartLine.offering_id == offering_id
            )
        )
        return result.scalar() > 0

    @staticmethod
    async def remove(db: AsyncSession, user_id: int, cart_line_id: int) -> bool:
        """
        Delete one of the user's cart lines.

        Invoice details pointing at the line are detached (cart_line_id set
        to NULL) before the delete so no detail references a missing row.

        Returns:
            False if the line does not exist or belongs to another user
        """
        result = await db.execute(
            select(CartLine.id).where(
                CartLine.id == cart_line_id,
                CartLine.user_id == user_id
            )
        )
        if result.scalar_one_or_none() is None:
            return False

        await db.execute(
            update(InvoiceDetail)
            .where(InvoiceDetail.cart_line_id == cart_line_id)
            .values(cart_line_id=None)
        )
        deleted = await db.execute(
            delete(CartLine).where(
                CartLine.id == cart_line_id,
                CartLine.user_id == user_id
            )
        )
        return deleted.rowcount > 0

    @staticmethod
    async def clear(db: AsyncSession, user_id: int) -> int:
        """Delete every cart line of the user. Returns the number of lines removed."""
        user_lines = select(CartLine.id).where(CartLine.user_id == user_id)

        await db.execute(
            update(InvoiceDetail)
            .where(InvoiceDetail.cart_line_id.in_(user_lines))
            .values(cart_line_id=None)
        )
        deleted = await db.execute(delete(CartLine).where(CartLine.user_id == user_id))
        return deleted.rowcount
