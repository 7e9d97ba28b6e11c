"""
Course category model.
"""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from coursestore.app.db.session import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    category_name = Column(String(100), nullable=False)
    category_description = Column(String(255), nullable=False, default="")
    category_image = Column(String(255), nullable=False, default="")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Category(id={self.id}, name='{self.category_name}')>"
