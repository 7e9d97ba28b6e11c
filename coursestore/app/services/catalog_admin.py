"""
Catalog administration.

Create, replace and delete categories, courses, schedules, offerings and
payment methods. Every method flushes inside the caller's session; the
endpoint commits. Rows that other records still reference (a course with
offerings, an offering in a cart or on an invoice, a payment method used
by an invoice) cannot be deleted.
"""

import logging
from typing import Any, Dict, Optional, Type
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError

from coursestore.app.db.session import Base
from coursestore.app.models.category import Category
from coursestore.app.models.course import Course
from coursestore.app.models.schedule import Schedule, ScheduleCourse
from coursestore.app.core.exceptions import (
    DuplicateEntryError,
    InvalidRequestError,
    ResourceInUseError,
    ResourceNotFoundError,
)

logger = logging.getLogger(__name__)


class CatalogAdmin:

    @staticmethod
    async def save(
        db: AsyncSession,
        model: Type[Base],
        values: Dict[str, Any],
        entity_id: Optional[int] = None,
        label: str = "Record"
    ):
        """
        Insert a row, or fully replace the fields of row ``entity_id``.

        Returns the flushed and refreshed instance.

        Raises:
            ResourceNotFoundError: ``entity_id`` given but absent
        """
        if entity_id is None:
            instance = model(**values)
            db.add(instance)
        else:
            instance = await db.get(model, entity_id)
            if instance is None:
                raise ResourceNotFoundError(label, entity_id)
            for field, value in values.items():
                setattr(instance, field, value)

        await db.flush()
        # server-side timestamps
        await db.refresh(instance)
        return instance

    @staticmethod
    async def remove(db: AsyncSession, model: Type[Base], entity_id: int, label: str = "Record") -> None:
        """
        Delete row ``entity_id``.

        Raises:
            ResourceNotFoundError: absent
            ResourceInUseError: still referenced by another table
        """
        if await db.get(model, entity_id) is None:
            raise ResourceNotFoundError(label, entity_id)

        try:
            await db.execute(delete(model).where(model.id == entity_id))
        except IntegrityError:
            await db.rollback()
            logger.info("Refused to delete %s %s: still referenced", label, entity_id)
            raise ResourceInUseError(label, entity_id)

    @staticmethod
    async def save_course(db: AsyncSession, values: Dict[str, Any], course_id: Optional[int] = None) -> Course:
        if await db.get(Category, values["category_id"]) is None:
            raise InvalidRequestError(f"Category {values['category_id']} does not exist")
        return await CatalogAdmin.save(db, Course, values, course_id, label="Course")

    @staticmethod
    async def save_offering(
        db: AsyncSession,
        values: Dict[str, Any],
        offering_id: Optional[int] = None
    ) -> ScheduleCourse:
        """
        Raises:
            InvalidRequestError: unknown course or schedule
            DuplicateEntryError: the course is already on that schedule
        """
        if await db.get(Course, values["course_id"]) is None:
            raise InvalidRequestError(f"Course {values['course_id']} does not exist")
        if await db.get(Schedule, values["schedule_id"]) is None:
            raise InvalidRequestError(f"Schedule {values['schedule_id']} does not exist")

        result = await db.execute(
            select(ScheduleCourse.id).where(
                ScheduleCourse.course_id == values["course_id"],
                ScheduleCourse.schedule_id == values["schedule_id"]
            )
        )
        existing_id = result.scalar_one_or_none()
        if existing_id is not None and existing_id != offering_id:
            raise DuplicateEntryError("Course is already offered on this schedule")

        return await CatalogAdmin.save(db, ScheduleCourse, values, offering_id, label="Course offering")
