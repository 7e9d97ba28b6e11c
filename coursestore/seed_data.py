"""
Database seeding script for development.

Creates an ADMIN account, a small course catalog with scheduled offerings,
and the payment methods offered at checkout. Safe to run twice.
"""

import asyncio
from datetime import date, timedelta

from sqlalchemy import select

from coursestore.app.db.session import AsyncSessionLocal, init_models
from coursestore.app.models.user import User, UserRole
from coursestore.app.models.category import Category
from coursestore.app.models.course import Course
from coursestore.app.models.schedule import Schedule, ScheduleCourse
from coursestore.app.models.payment_method import PaymentMethod
# registered so create_all covers every table
from coursestore.app.models.audit_log import AuditLog
from coursestore.app.models.cart_line import CartLine
from coursestore.app.models.invoice import Invoice, InvoiceDetail
from coursestore.app.core.security import get_password_hash

CATALOG = {
    "English": [("Basic English for Adults", 450000), ("TOEFL Preparation", 750000)],
    "Japanese": [("Japanese N5", 500000)],
    "Arabic": [("Arabic for Beginners", 400000)],
}

PAYMENT_METHODS = ["Bank Transfer", "Credit Card", "E-Wallet"]


async def seed_data():
    await init_models()

    async with AsyncSessionLocal() as db:
        print("🌱 Starting seeding...")

        result = await db.execute(select(User).where(User.username == "admin"))
        if result.scalar_one_or_none():
            print("ℹ️  ADMIN user already exists, skipping seeding")
            return

        db.add(User(
            email="admin@coursestore.local",
            username="admin",
            hashed_password=get_password_hash("admin123"),
            role=UserRole.ADMIN,
            is_active=True
        ))
        print("✅ Created ADMIN user (username: admin, password: admin123)")

        first_date = date.today() + timedelta(days=14)
        schedules = [Schedule(schedule_date=first_date + timedelta(weeks=week)) for week in range(3)]
        db.add_all(schedules)

        for category_name, courses in CATALOG.items():
            category = Category(category_name=category_name, category_description=f"{category_name} courses")
            db.add(category)
            await db.flush()
            for course_name, price in courses:
                course = Course(category_id=category.id, course_name=course_name, course_price=price)
                db.add(course)
                await db.flush()
                for schedule in schedules:
                    db.add(ScheduleCourse(course_id=course.id, schedule_id=schedule.id))
            print(f"✅ Created category {category_name} with {len(courses)} course(s)")

        db.add_all([PaymentMethod(payment_method_name=name) for name in PAYMENT_METHODS])
        print(f"✅ Created {len(PAYMENT_METHODS)} payment methods")

        await db.commit()
        print("\n🎉 Seeding completed successfully!")


if __name__ == "__main__":
    asyncio.run(seed_data())
