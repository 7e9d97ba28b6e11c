"""
Cart and settlement Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional, List


class CartAddRequest(BaseModel):
    """Schema for adding an offering to the caller's cart."""
    offering_id: int = Field(..., gt=0, description="Schedule-course (offering) ID")


class CartLineResponse(BaseModel):
    """One cart line with catalog display fields."""
    cart_line_id: int
    user_id: int
    offering_id: int
    course_id: int
    course_name: str
    course_image: str = ""
    category_name: str = ""
    schedule_date: Optional[date] = None
    unit_price: int
    created_at: datetime
    updated_at: datetime


class CartResponse(BaseModel):
    items: List[CartLineResponse]
    total: int


class CartAddResponse(BaseModel):
    cart_line_id: int
    offering_id: int
    course_id: int
    course_name: str
    unit_price: int


class SettleRequest(BaseModel):
    """
    Schema for settling part of the cart.

    An empty ``cart_line_ids`` is accepted here and rejected by the
    settlement service with a 400.
    """
    payment_method_id: int = Field(..., gt=0)
    cart_line_ids: List[int] = Field(default_factory=list, description="Cart lines to pay for")
