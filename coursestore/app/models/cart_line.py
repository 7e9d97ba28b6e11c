"""
Cart line model.

One pending purchase candidate per (user, offering). The unit price is
captured when the line is added and never updated in place.
"""

from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from coursestore.app.db.session import Base


class CartLine(Base):
    __tablename__ = "cart_lines"
    __table_args__ = (
        UniqueConstraint("user_id", "offering_id", name="uq_cart_line_user_offering"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    offering_id = Column(Integer, ForeignKey("schedule_courses.id"), nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False)
    unit_price = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    course = relationship("Course", lazy="raise")
    offering = relationship("ScheduleCourse", lazy="raise")

    def __repr__(self):
        return f"<CartLine(id={self.id}, user_id={self.user_id}, offering_id={self.offering_id}, price={self.unit_price})>"
