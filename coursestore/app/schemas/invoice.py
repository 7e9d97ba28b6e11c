"""
Invoice Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional, List

from coursestore.app.models.invoice import Invoice


class InvoiceDetailResponse(BaseModel):
    """One invoice line; ``detail_no`` is 1-based in insertion order."""
    detail_no: int
    cart_line_id: Optional[int] = None
    course_id: int
    offering_id: int
    course_name: str = ""
    schedule_date: Optional[date] = None
    sub_total_price: int


class InvoiceResponse(BaseModel):
    """Invoice header with its details."""
    id: int
    invoice_number: str
    user_id: int
    total_price: int
    payment_method_id: int
    payment_method_name: str = ""
    is_paid: bool
    total_courses: int
    detail: List[InvoiceDetailResponse] = []
    created_at: datetime
    updated_at: datetime


class InvoiceSummaryResponse(BaseModel):
    """Invoice header as listed per user; details are not expanded."""
    id: int
    invoice_number: str
    user_id: int
    total_price: int
    payment_method_id: int
    payment_method_name: str = ""
    is_paid: bool
    total_courses: int
    created_at: datetime
    updated_at: datetime


class AdminInvoiceCreate(BaseModel):
    """Schema for an admin creating an invoice from a user's cart."""
    user_id: int = Field(..., gt=0)
    payment_method_id: int = Field(..., gt=0)
    cart_line_ids: List[int] = Field(default_factory=list)
    is_paid: bool = False


class InvoiceUpdate(BaseModel):
    """Administrative status correction."""
    payment_method_id: int = Field(..., gt=0)
    is_paid: bool


def _payment_method_name(invoice: Invoice) -> str:
    return invoice.payment_method.payment_method_name if invoice.payment_method else ""


def build_invoice_response(invoice: Invoice) -> InvoiceResponse:
    """Invoice loaded by InvoiceStore.get_by_id -> response model."""
    details = [
        InvoiceDetailResponse(
            detail_no=number,
            cart_line_id=detail.cart_line_id,
            course_id=detail.course_id,
            offering_id=detail.offering_id,
            course_name=detail.course.course_name if detail.course else "",
            schedule_date=detail.offering.schedule.schedule_date if detail.offering and detail.offering.schedule else None,
            sub_total_price=detail.sub_total_price,
        )
        for number, detail in enumerate(invoice.details, start=1)
    ]
    return InvoiceResponse(
        id=invoice.id,
        invoice_number=invoice.invoice_number,
        user_id=invoice.user_id,
        total_price=invoice.total_price,
        payment_method_id=invoice.payment_method_id,
        payment_method_name=_payment_method_name(invoice),
        is_paid=invoice.is_paid,
        total_courses=len(details),
        detail=details,
        created_at=invoice.created_at,
        updated_at=invoice.updated_at,
    )


def build_invoice_summary(invoice: Invoice, total_courses: int) -> InvoiceSummaryResponse:
    return InvoiceSummaryResponse(
        id=invoice.id,
        invoice_number=invoice.invoice_number,
        user_id=invoice.user_id,
        total_price=invoice.total_price,
        payment_method_id=invoice.payment_method_id,
        payment_method_name=_payment_method_name(invoice),
        is_paid=invoice.is_paid,
        total_courses=total_courses or 0,
        created_at=invoice.created_at,
        updated_at=invoice.updated_at,
    )
