"""
Catalog Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional


class OfferingQuote(BaseModel):
    """An offering and its current catalog price."""
    offering_id: int
    course_id: int
    course_name: str
    unit_price: int
    schedule_date: Optional[date] = None


class CategoryResponse(BaseModel):
    id: int
    category_name: str
    category_description: str
    category_image: str

    class Config:
        from_attributes = True


class CourseResponse(BaseModel):
    id: int
    category_id: int
    course_name: str
    course_price: int
    course_image: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CategoryWrite(BaseModel):
    """Create or fully replace a category."""
    category_name: str = Field(..., min_length=1, max_length=100)
    category_description: str = Field("", max_length=255)
    category_image: str = Field("", max_length=255)


class CourseWrite(BaseModel):
    """
    Create or fully replace a course.

    A new price applies to lines added afterwards; lines already in a cart
    keep the price they were added with.
    """
    category_id: int = Field(..., gt=0)
    course_name: str = Field(..., min_length=1, max_length=100)
    course_price: int = Field(..., ge=0, description="Price in currency minor units")
    course_image: str = Field("", max_length=255)


class ScheduleWrite(BaseModel):
    schedule_date: date


class ScheduleResponse(BaseModel):
    id: int
    schedule_date: date

    class Config:
        from_attributes = True


class OfferingWrite(BaseModel):
    """Put a course on a schedule date."""
    course_id: int = Field(..., gt=0)
    schedule_id: int = Field(..., gt=0)


class OfferingResponse(BaseModel):
    id: int
    course_id: int
    schedule_id: int

    class Config:
        from_attributes = True
