"""
Integration tests for invoice reads and admin invoice management.
"""

import pytest


async def settle(client, headers, offering_ids, payment_method_id):
    line_ids = []
    for offering_id in offering_ids:
        response = await client.post("/v1/checkout/add", json={"offering_id": offering_id}, headers=headers)
        line_ids.append(response.json()["data"]["cart_line_id"])
    response = await client.post(
        "/v1/checkout/settle",
        json={"payment_method_id": payment_method_id, "cart_line_ids": line_ids},
        headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.mark.asyncio
async def test_no_invoices_is_404(client, student, headers_for):
    response = await client.get("/v1/invoices/user", headers=headers_for(student))

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_my_invoices_newest_first(client, student, catalog, payment_methods, headers_for):
    headers = headers_for(student)
    await settle(client, headers, [catalog["offering_a"]], payment_methods["active"])
    await settle(client, headers, [catalog["offering_b"]], payment_methods["active"])

    response = await client.get("/v1/invoices/user", headers=headers)

    assert response.status_code == 200
    invoices = response.json()["data"]
    assert [i["invoice_number"] for i in invoices] == ["DLA00002", "DLA00001"]
    assert all(i["total_courses"] == 1 for i in invoices)


@pytest.mark.asyncio
async def test_get_invoice_detail(client, student, catalog, payment_methods, headers_for):
    headers = headers_for(student)
    created = await settle(client, headers, [catalog["offering_a"], catalog["offering_b"]], payment_methods["active"])

    response = await client.get(f"/v1/invoices/{created['id']}", headers=headers)

    assert response.status_code == 200
    invoice = response.json()["data"]
    assert invoice["total_price"] == 125000
    assert [d["course_name"] for d in invoice["detail"]] == ["Basic English", "TOEFL Preparation"]
    assert invoice["detail"][0]["schedule_date"] == "2030-01-15"


@pytest.mark.asyncio
async def test_other_users_invoice_is_404(client, student, other_student, catalog, payment_methods, headers_for):
    created = await settle(client, headers_for(student), [catalog["offering_a"]], payment_methods["active"])

    response = await client.get(f"/v1/invoices/{created['id']}", headers=headers_for(other_student))

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_admin_reads_any_invoice(client, student, admin, catalog, payment_methods, headers_for):
    created = await settle(client, headers_for(student), [catalog["offering_a"]], payment_methods["active"])

    response = await client.get(f"/v1/invoices/{created['id']}", headers=headers_for(admin))

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_admin_creates_unpaid_invoice(client, student, admin, catalog, payment_methods, headers_for):
    add = await client.post(
        "/v1/checkout/add", json={"offering_id": catalog["offering_a"]}, headers=headers_for(student)
    )
    line_id = add.json()["data"]["cart_line_id"]

    response = await client.post(
        "/v1/admin/invoices",
        json={"user_id": student.id, "payment_method_id": payment_methods["active"], "cart_line_ids": [line_id]},
        headers=headers_for(admin)
    )

    assert response.status_code == 201, response.text
    invoice = response.json()["data"]
    assert invoice["user_id"] == student.id
    assert invoice["is_paid"] is False
    assert invoice["total_price"] == 50000


@pytest.mark.asyncio
async def test_student_cannot_use_admin_endpoints(client, student, headers_for):
    response = await client.post(
        "/v1/admin/invoices",
        json={"user_id": student.id, "payment_method_id": 1, "cart_line_ids": [1]},
        headers=headers_for(student)
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_admin_updates_and_deletes_invoice(client, db_session, student, admin, catalog, payment_methods, headers_for):
    created = await settle(client, headers_for(student), [catalog["offering_a"]], payment_methods["active"])
    admin_headers = headers_for(admin)

    response = await client.put(
        f"/v1/admin/invoices/{created['id']}",
        json={"payment_method_id": payment_methods["active"], "is_paid": False},
        headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["data"]["is_paid"] is False
    assert response.json()["data"]["invoice_number"] == created["invoice_number"]

    response = await client.put(
        f"/v1/admin/invoices/{created['id']}",
        json={"payment_method_id": payment_methods["inactive"], "is_paid": True},
        headers=admin_headers
    )
    assert response.status_code == 400

    response = await client.delete(f"/v1/admin/invoices/{created['id']}", headers=admin_headers)
    assert response.status_code == 200

    response = await client.delete(f"/v1/admin/invoices/{created['id']}", headers=admin_headers)
    assert response.status_code == 404
