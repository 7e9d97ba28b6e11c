"""
Tests for sequential invoice numbering.
"""

import pytest

from coursestore.app.domain.checkout.invoice_numbering import InvoiceNumbering
from coursestore.app.models.invoice import Invoice


def test_format_pads_counter():
    assert InvoiceNumbering.format(1) == "DLA00001"
    assert InvoiceNumbering.format(43) == "DLA00043"


def test_format_does_not_truncate_wide_counters():
    assert InvoiceNumbering.format(123456) == "DLA123456"


@pytest.mark.parametrize("value, expected", [
    ("DLA00042", 42),
    ("DLA123456", 123456),
    ("XYZ00042", None),
    ("DLA", None),
    ("DLA00A42", None),
    ("", None),
    (None, None),
])
def test_parse(value, expected):
    assert InvoiceNumbering.parse(value) == expected


async def add_invoice(db, user_id, payment_method_id, number):
    db.add(Invoice(
        invoice_number=number,
        user_id=user_id,
        total_price=1000,
        payment_method_id=payment_method_id,
        is_paid=True
    ))
    await db.commit()


@pytest.mark.asyncio
async def test_first_invoice_starts_at_one(db_session):
    assert await InvoiceNumbering.next_number(db_session) == 1


@pytest.mark.asyncio
async def test_next_follows_last_issued(db_session, student, payment_methods):
    await add_invoice(db_session, student.id, payment_methods["active"], "DLA00042")

    number = await InvoiceNumbering.next_number(db_session)
    assert InvoiceNumbering.format(number) == "DLA00043"


@pytest.mark.asyncio
async def test_malformed_last_number_continues_after_highest_well_formed(db_session, student, payment_methods):
    for number in ("DLA00007", "DLA00003", "LEGACY-7"):
        await add_invoice(db_session, student.id, payment_methods["active"], number)

    assert await InvoiceNumbering.next_number(db_session) == 8


@pytest.mark.asyncio
async def test_only_malformed_numbers_start_at_one(db_session, student, payment_methods):
    await add_invoice(db_session, student.id, payment_methods["active"], "LEGACY-7")

    assert await InvoiceNumbering.next_number(db_session) == 1
