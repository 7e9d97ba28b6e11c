"""
Catalog API Endpoints.

Categories, courses, schedules and offerings. Reads are public; changes
require the ADMIN role.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from coursestore.app.db.session import get_db
from coursestore.app.schemas.catalog import (
    CategoryResponse,
    CategoryWrite,
    CourseResponse,
    CourseWrite,
    OfferingQuote,
    OfferingResponse,
    OfferingWrite,
    ScheduleResponse,
    ScheduleWrite,
)
from coursestore.app.schemas.envelope import ApiResult
from coursestore.app.services.catalog import CatalogLookup
from coursestore.app.services.catalog_admin import CatalogAdmin
from coursestore.app.services.audit import log_event, AuditAction
from coursestore.app.core.guards import require_role
from coursestore.app.models.user import UserRole
from coursestore.app.models.category import Category
from coursestore.app.models.course import Course
from coursestore.app.models.schedule import Schedule, ScheduleCourse
from coursestore.app.core.exceptions import ResourceNotFoundError

router = APIRouter(prefix="/catalog", tags=["Catalog"])


@router.get("/categories", response_model=ApiResult[List[CategoryResponse]])
async def list_categories(db: AsyncSession = Depends(get_db)):
    categories = await CatalogLookup.list_categories(db)
    return ApiResult.success_result(
        [CategoryResponse.model_validate(category) for category in categories],
        message="Categories retrieved"
    )


@router.get("/courses", response_model=ApiResult[List[CourseResponse]])
async def list_courses(
    category_id: Optional[int] = Query(None, ge=1, description="Filter by category"),
    db: AsyncSession = Depends(get_db)
):
    courses = await CatalogLookup.list_courses(db, category_id=category_id)
    return ApiResult.success_result(
        [CourseResponse.model_validate(course) for course in courses],
        message="Courses retrieved"
    )


@router.get("/courses/{course_id}", response_model=ApiResult[CourseResponse])
async def get_course(course_id: int, db: AsyncSession = Depends(get_db)):
    course = await CatalogLookup.get_course(db, course_id)
    if course is None:
        raise ResourceNotFoundError("Course", course_id)
    return ApiResult.success_result(CourseResponse.model_validate(course), message="Course retrieved")


@router.get("/courses/{course_id}/offerings", response_model=ApiResult[List[OfferingQuote]])
async def list_offerings(course_id: int, db: AsyncSession = Depends(get_db)):
    """Scheduled offerings of a course, earliest first."""
    if await CatalogLookup.get_course(db, course_id) is None:
        raise ResourceNotFoundError("Course", course_id)
    offerings = await CatalogLookup.list_offerings(db, course_id)
    return ApiResult.success_result(offerings, message="Offerings retrieved")


@router.get("/schedules", response_model=ApiResult[List[ScheduleResponse]])
async def list_schedules(db: AsyncSession = Depends(get_db)):
    schedules = await CatalogLookup.list_schedules(db)
    return ApiResult.success_result(
        [ScheduleResponse.model_validate(schedule) for schedule in schedules],
        message="Schedules retrieved"
    )


# Administration

async def _audit(db: AsyncSession, current_user: dict, action: str, entity_type: str, entity_id: int):
    await log_event(
        db=db,
        action=action,
        actor_id=current_user["user_id"],
        actor_username=current_user.get("sub"),
        entity_type=entity_type,
        entity_id=entity_id
    )


@router.post("/categories", response_model=ApiResult[CategoryResponse], status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryWrite,
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    category = await CatalogAdmin.save(db, Category, payload.model_dump(), label="Category")
    await db.commit()
    response = CategoryResponse.model_validate(category)
    await _audit(db, current_user, AuditAction.CATALOG_CREATED, "category", category.id)
    return ApiResult.success_result(
        response,
        message="Category created",
        status_code=status.HTTP_201_CREATED
    )


@router.put("/categories/{category_id}", response_model=ApiResult[CategoryResponse])
async def update_category(
    category_id: int,
    payload: CategoryWrite,
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    category = await CatalogAdmin.save(db, Category, payload.model_dump(), category_id, label="Category")
    await db.commit()
    response = CategoryResponse.model_validate(category)
    await _audit(db, current_user, AuditAction.CATALOG_UPDATED, "category", category_id)
    return ApiResult.success_result(response, message="Category updated")


@router.delete("/categories/{category_id}", response_model=ApiResult[None])
async def delete_category(
    category_id: int,
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    """Only categories without courses can be deleted."""
    await CatalogAdmin.remove(db, Category, category_id, label="Category")
    await db.commit()
    await _audit(db, current_user, AuditAction.CATALOG_DELETED, "category", category_id)
    return ApiResult.success_result(message="Category deleted")


@router.post("/courses", response_model=ApiResult[CourseResponse], status_code=status.HTTP_201_CREATED)
async def create_course(
    payload: CourseWrite,
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    course = await CatalogAdmin.save_course(db, payload.model_dump())
    await db.commit()
    response = CourseResponse.model_validate(course)
    await _audit(db, current_user, AuditAction.CATALOG_CREATED, "course", course.id)
    return ApiResult.success_result(
        response,
        message="Course created",
        status_code=status.HTTP_201_CREATED
    )


@router.put("/courses/{course_id}", response_model=ApiResult[CourseResponse])
async def update_course(
    course_id: int,
    payload: CourseWrite,
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    """Replace a course. Cart lines keep the price they were added with."""
    course = await CatalogAdmin.save_course(db, payload.model_dump(), course_id)
    await db.commit()
    response = CourseResponse.model_validate(course)
    await _audit(db, current_user, AuditAction.CATALOG_UPDATED, "course", course_id)
    return ApiResult.success_result(response, message="Course updated")


@router.delete("/courses/{course_id}", response_model=ApiResult[None])
async def delete_course(
    course_id: int,
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    await CatalogAdmin.remove(db, Course, course_id, label="Course")
    await db.commit()
    await _audit(db, current_user, AuditAction.CATALOG_DELETED, "course", course_id)
    return ApiResult.success_result(message="Course deleted")


@router.post("/schedules", response_model=ApiResult[ScheduleResponse], status_code=status.HTTP_201_CREATED)
async def create_schedule(
    payload: ScheduleWrite,
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    schedule = await CatalogAdmin.save(db, Schedule, payload.model_dump(), label="Schedule")
    await db.commit()
    response = ScheduleResponse.model_validate(schedule)
    await _audit(db, current_user, AuditAction.CATALOG_CREATED, "schedule", schedule.id)
    return ApiResult.success_result(
        response,
        message="Schedule created",
        status_code=status.HTTP_201_CREATED
    )


@router.put("/schedules/{schedule_id}", response_model=ApiResult[ScheduleResponse])
async def update_schedule(
    schedule_id: int,
    payload: ScheduleWrite,
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    schedule = await CatalogAdmin.save(db, Schedule, payload.model_dump(), schedule_id, label="Schedule")
    await db.commit()
    response = ScheduleResponse.model_validate(schedule)
    await _audit(db, current_user, AuditAction.CATALOG_UPDATED, "schedule", schedule_id)
    return ApiResult.success_result(response, message="Schedule updated")


@router.delete("/schedules/{schedule_id}", response_model=ApiResult[None])
async def delete_schedule(
    schedule_id: int,
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    await CatalogAdmin.remove(db, Schedule, schedule_id, label="Schedule")
    await db.commit()
    await _audit(db, current_user, AuditAction.CATALOG_DELETED, "schedule", schedule_id)
    return ApiResult.success_result(message="Schedule deleted")


@router.post("/offerings", response_model=ApiResult[OfferingResponse], status_code=status.HTTP_201_CREATED)
async def create_offering(
    payload: OfferingWrite,
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    offering = await CatalogAdmin.save_offering(db, payload.model_dump())
    await db.commit()
    response = OfferingResponse.model_validate(offering)
    await _audit(db, current_user, AuditAction.CATALOG_CREATED, "offering", offering.id)
    return ApiResult.success_result(
        response,
        message="Course offering created",
        status_code=status.HTTP_201_CREATED
    )


@router.put("/offerings/{offering_id}", response_model=ApiResult[OfferingResponse])
async def update_offering(
    offering_id: int,
    payload: OfferingWrite,
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    offering = await CatalogAdmin.save_offering(db, payload.model_dump(), offering_id)
    await db.commit()
    response = OfferingResponse.model_validate(offering)
    await _audit(db, current_user, AuditAction.CATALOG_UPDATED, "offering", offering_id)
    return ApiResult.success_result(response, message="Course offering updated")


@router.delete("/offerings/{offering_id}", response_model=ApiResult[None])
async def delete_offering(
    offering_id: int,
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    """Offerings in a cart or on an invoice cannot be deleted."""
    await CatalogAdmin.remove(db, ScheduleCourse, offering_id, label="Course offering")
    await db.commit()
    await _audit(db, current_user, AuditAction.CATALOG_DELETED, "offering", offering_id)
    return ApiResult.success_result(message="Course offering deleted")
