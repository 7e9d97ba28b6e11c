"""
Catalog lookup.

Resolves what a student is about to buy: an offering (course on a
schedule date) and its current price. Used when a line is added to the
cart; settlement relies on the price frozen on the cart line instead.
"""

from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from coursestore.app.models.category import Category
from coursestore.app.models.course import Course
from coursestore.app.models.schedule import Schedule, ScheduleCourse
from coursestore.app.schemas.catalog import OfferingQuote
from coursestore.app.core.exceptions import ResourceNotFoundError


class CatalogLookup:

    @staticmethod
    async def resolve_offering(db: AsyncSession, offering_id: int) -> OfferingQuote:
        """
        Current name and price of an offering.

        Raises:
            ResourceNotFoundError: unknown offering
        """
        result = await db.execute(
            select(ScheduleCourse, Course, Schedule.schedule_date)
            .join(Course, ScheduleCourse.course_id == Course.id)
            .join(Schedule, ScheduleCourse.schedule_id == Schedule.id)
            .where(ScheduleCourse.id == offering_id)
        )
        row = result.first()
        if row is None:
            raise ResourceNotFoundError("Course offering", offering_id)

        offering, course, schedule_date = row
        return OfferingQuote(
            offering_id=offering.id,
            course_id=course.id,
            course_name=course.course_name,
            unit_price=course.course_price,
            schedule_date=schedule_date
        )

    @staticmethod
    async def list_categories(db: AsyncSession) -> List[Category]:
        result = await db.execute(select(Category).order_by(Category.category_name))
        return list(result.scalars().all())

    @staticmethod
    async def list_courses(db: AsyncSession, category_id: Optional[int] = None) -> List[Course]:
        query = select(Course).order_by(Course.id)
        if category_id is not None:
            query = query.where(Course.category_id == category_id)
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def get_course(db: AsyncSession, course_id: int) -> Optional[Course]:
        return await db.get(Course, course_id)

    @staticmethod
    async def list_offerings(db: AsyncSession, course_id: int) -> List[OfferingQuote]:
        """All offerings of a course, earliest schedule date first."""
        result = await db.execute(
            select(ScheduleCourse.id, Course, Schedule.schedule_date)
            .join(Course, ScheduleCourse.course_id == Course.id)
            .join(Schedule, ScheduleCourse.schedule_id == Schedule.id)
            .where(ScheduleCourse.course_id == course_id)
            .order_by(Schedule.schedule_date, ScheduleCourse.id)
        )
        return [
            OfferingQuote(
                offering_id=offering_id,
                course_id=course.id,
                course_name=course.course_name,
                unit_price=course.course_price,
                schedule_date=schedule_date
            )
            for offering_id, course, schedule_date in result.all()
        ]

    @staticmethod
    async def list_schedules(db: AsyncSession) -> List[Schedule]:
        result = await db.execute(select(Schedule).order_by(Schedule.schedule_date, Schedule.id))
        return list(result.scalars().all())
