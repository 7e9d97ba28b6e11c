"""
Course catalog model.

Prices are stored in integer currency minor units.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from coursestore.app.db.session import Base


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    course_name = Column(String(100), nullable=False)
    course_price = Column(Integer, nullable=False)
    course_image = Column(String(255), nullable=False, default="")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    category = relationship("Category", lazy="raise")

    def __repr__(self):
        return f"<Course(id={self.id}, name='{self.course_name}', price={self.course_price})>"
