"""
Invoice header and detail models.

An invoice is written once by a settlement and owns its details. A detail
keeps a weak, nullable reference to the cart line it was migrated from:
once that cart line is deleted the reference becomes NULL while the
frozen course/offering/price data stays.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from coursestore.app.db.session import Base


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    invoice_number = Column(String(32), unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Sum of detail sub-totals at creation time, never client-supplied
    total_price = Column(Integer, nullable=False)

    payment_method_id = Column(Integer, ForeignKey("payment_methods.id"), nullable=False)
    is_paid = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    details = relationship(
        "InvoiceDetail",
        back_populates="invoice",
        order_by="InvoiceDetail.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )
    payment_method = relationship("PaymentMethod", lazy="raise")

    def __repr__(self):
        return f"<Invoice(id={self.id}, number='{self.invoice_number}', total={self.total_price}, paid={self.is_paid})>"


class InvoiceDetail(Base):
    __tablename__ = "invoice_details"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    cart_line_id = Column(Integer, ForeignKey("cart_lines.id", ondelete="SET NULL"), nullable=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False)
    offering_id = Column(Integer, ForeignKey("schedule_courses.id"), nullable=False)

    # Frozen at settlement time
    sub_total_price = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    invoice = relationship("Invoice", back_populates="details", lazy="raise")
    course = relationship("Course", lazy="raise")
    offering = relationship("ScheduleCourse", lazy="raise")

    def __repr__(self):
        return f"<InvoiceDetail(id={self.id}, invoice_id={self.invoice_id}, price={self.sub_total_price})>"
