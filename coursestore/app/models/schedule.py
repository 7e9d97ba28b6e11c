"""
Schedule and offering models.

An offering (ScheduleCourse) is a course on a given schedule date; it is
the unit a student adds to the cart.
"""

from sqlalchemy import Column, Integer, Date, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from coursestore.app.db.session import Base


class Schedule(Base):
    __tablename__ = "schedules"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    schedule_date = Column(Date, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class ScheduleCourse(Base):
    __tablename__ = "schedule_courses"
    __table_args__ = (
        UniqueConstraint("course_id", "schedule_id", name="uq_schedule_course"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    schedule_id = Column(Integer, ForeignKey("schedules.id"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    course = relationship("Course", lazy="raise")
    schedule = relationship("Schedule", lazy="raise")

    def __repr__(self):
        return f"<ScheduleCourse(id={self.id}, course_id={self.course_id}, schedule_id={self.schedule_id})>"
