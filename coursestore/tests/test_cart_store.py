"""
Tests for the cart store and catalog price capture.
"""

import pytest
from sqlalchemy import select

from coursestore.app.core.exceptions import DuplicateEntryError, ResourceNotFoundError
from coursestore.app.domain.checkout.cart_store import CartStore
from coursestore.app.models.cart_line import CartLine
from coursestore.app.models.course import Course
from coursestore.app.services.catalog import CatalogLookup


async def add_offering(db, user_id, offering_id):
    quote = await CatalogLookup.resolve_offering(db, offering_id)
    line_id = await CartStore.add(db, CartLine(
        user_id=user_id,
        offering_id=quote.offering_id,
        course_id=quote.course_id,
        unit_price=quote.unit_price
    ))
    await db.commit()
    return line_id


@pytest.mark.asyncio
async def test_add_captures_catalog_price(db_session, student, catalog):
    line_id = await add_offering(db_session, student.id, catalog["offering_a"])

    items = await CartStore.list_by_user(db_session, student.id)
    assert [item["cart_line_id"] for item in items] == [line_id]
    assert items[0]["unit_price"] == 50000
    assert items[0]["course_name"] == "Basic English"
    assert items[0]["category_name"] == "English"
    assert items[0]["schedule_date"] == catalog["schedule_date"]


@pytest.mark.asyncio
async def test_price_change_does_not_touch_cart(db_session, student, catalog):
    user_id = student.id
    await add_offering(db_session, user_id, catalog["offering_a"])

    course = await db_session.get(Course, catalog["course_a"])
    course.course_price = 99000
    await db_session.commit()

    assert await CartStore.total_price(db_session, user_id) == 50000


@pytest.mark.asyncio
async def test_same_offering_twice_is_rejected(db_session, student, catalog):
    user_id = student.id
    await add_offering(db_session, user_id, catalog["offering_a"])

    with pytest.raises(DuplicateEntryError):
        await CartStore.add(db_session, CartLine(
            user_id=user_id,
            offering_id=catalog["offering_a"],
            course_id=catalog["course_a"],
            unit_price=50000
        ))


@pytest.mark.asyncio
async def test_unknown_offering_is_not_found(db_session):
    with pytest.raises(ResourceNotFoundError):
        await CatalogLookup.resolve_offering(db_session, 999)


@pytest.mark.asyncio
async def test_total_price_of_empty_cart_is_zero(db_session, student):
    assert await CartStore.total_price(db_session, student.id) == 0


@pytest.mark.asyncio
async def test_list_is_in_insertion_order(db_session, student, catalog):
    user_id = student.id
    second = await add_offering(db_session, user_id, catalog["offering_b"])
    first_added_later = await add_offering(db_session, user_id, catalog["offering_a"])

    items = await CartStore.list_by_user(db_session, user_id)
    assert [item["cart_line_id"] for item in items] == [second, first_added_later]
    assert await CartStore.total_price(db_session, user_id) == 125000


@pytest.mark.asyncio
async def test_remove_only_own_lines(db_session, student, other_student, catalog):
    user_id, other_id = student.id, other_student.id
    line_id = await add_offering(db_session, user_id, catalog["offering_a"])

    assert await CartStore.remove(db_session, other_id, line_id) is False
    assert await CartStore.remove(db_session, user_id, line_id) is True
    await db_session.commit()

    assert await CartStore.list_by_user(db_session, user_id) == []
    assert await CartStore.remove(db_session, user_id, line_id) is False


@pytest.mark.asyncio
async def test_clear_leaves_other_users_alone(db_session, student, other_student, catalog):
    user_id, other_id = student.id, other_student.id
    await add_offering(db_session, user_id, catalog["offering_a"])
    await add_offering(db_session, user_id, catalog["offering_b"])
    await add_offering(db_session, other_id, catalog["offering_a"])

    removed = await CartStore.clear(db_session, user_id)
    await db_session.commit()

    assert removed == 2
    assert await CartStore.total_price(db_session, user_id) == 0
    result = await db_session.execute(select(CartLine.user_id))
    assert result.scalars().all() == [other_id]
