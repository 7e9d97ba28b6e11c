"""
Integration tests for the checkout endpoints.
"""

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.exc import SQLAlchemyError

from coursestore.app.core.dependencies import resolve_user_id
from coursestore.app.domain.checkout.cart_store import CartStore
from coursestore.app.main import app
from coursestore.app.services.audit import get_audit_trail, AuditAction


async def add(client, headers, offering_id):
    response = await client.post("/v1/checkout/add", json={"offering_id": offering_id}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()["data"]["cart_line_id"]


@pytest.mark.asyncio
async def test_checkout_requires_identity(client):
    response = await client.get("/v1/checkout")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_add_and_view_cart(client, student, catalog, headers_for):
    headers = headers_for(student)
    await add(client, headers, catalog["offering_a"])
    await add(client, headers, catalog["offering_b"])

    response = await client.get("/v1/checkout", headers=headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total"] == 125000
    assert [item["course_name"] for item in data["items"]] == ["Basic English", "TOEFL Preparation"]
    assert data["items"][0]["schedule_date"] == "2030-01-15"


@pytest.mark.asyncio
async def test_add_duplicate_offering_is_400(client, student, catalog, headers_for):
    headers = headers_for(student)
    await add(client, headers, catalog["offering_a"])

    response = await client.post("/v1/checkout/add", json={"offering_id": catalog["offering_a"]}, headers=headers)

    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_add_unknown_offering_is_404(client, student, catalog, headers_for):
    response = await client.post("/v1/checkout/add", json={"offering_id": 999}, headers=headers_for(student))

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_remove_and_clear(client, student, catalog, headers_for):
    headers = headers_for(student)
    line_a = await add(client, headers, catalog["offering_a"])
    await add(client, headers, catalog["offering_b"])

    response = await client.delete(f"/v1/checkout/{line_a}", headers=headers)
    assert response.status_code == 200

    response = await client.delete(f"/v1/checkout/{line_a}", headers=headers)
    assert response.status_code == 404

    response = await client.delete("/v1/checkout", headers=headers)
    assert response.status_code == 200
    assert response.json()["message"] == "1 cart item(s) removed"

    cart = await client.get("/v1/checkout", headers=headers)
    assert cart.json()["data"] == {"items": [], "total": 0}


@pytest.mark.asyncio
async def test_cannot_remove_someone_elses_line(client, student, other_student, catalog, headers_for):
    line_a = await add(client, headers_for(student), catalog["offering_a"])

    response = await client.delete(f"/v1/checkout/{line_a}", headers=headers_for(other_student))

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_settle_creates_paid_invoice(client, student, catalog, payment_methods, headers_for):
    headers = headers_for(student)
    line_a = await add(client, headers, catalog["offering_a"])
    line_b = await add(client, headers, catalog["offering_b"])

    response = await client.post(
        "/v1/checkout/settle",
        json={"payment_method_id": payment_methods["active"], "cart_line_ids": [line_a, line_b]},
        headers=headers
    )

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["statusCode"] == 201
    invoice = body["data"]
    assert invoice["invoice_number"] == "DLA00001"
    assert invoice["total_price"] == 125000
    assert invoice["is_paid"] is True
    assert invoice["total_courses"] == 2
    assert [d["detail_no"] for d in invoice["detail"]] == [1, 2]
    assert invoice["payment_method_name"] == "Bank Transfer"

    cart = await client.get("/v1/checkout", headers=headers)
    assert cart.json()["data"]["items"] == []


@pytest.mark.asyncio
async def test_settle_with_empty_selection_is_400(client, student, catalog, payment_methods, headers_for):
    headers = headers_for(student)
    await add(client, headers, catalog["offering_a"])

    response = await client.post(
        "/v1/checkout/settle",
        json={"payment_method_id": payment_methods["active"], "cart_line_ids": []},
        headers=headers
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_settle_with_unknown_payment_method_is_400(client, student, catalog, payment_methods, headers_for):
    headers = headers_for(student)
    line_a = await add(client, headers, catalog["offering_a"])

    response = await client.post(
        "/v1/checkout/settle",
        json={"payment_method_id": 999, "cart_line_ids": [line_a]},
        headers=headers
    )

    assert response.status_code == 400
    cart = await client.get("/v1/checkout", headers=headers)
    assert cart.json()["data"]["total"] == 50000


@pytest.mark.asyncio
async def test_resolver_can_be_overridden(client, student, catalog):
    app.dependency_overrides[resolve_user_id] = lambda: student.id

    await client.post("/v1/checkout/add", json={"offering_id": catalog["offering_a"]})
    response = await client.get("/v1/checkout")

    assert response.status_code == 200
    assert response.json()["data"]["total"] == 50000


@pytest.mark.asyncio
async def test_settlement_is_audited(client, db_session, student, catalog, payment_methods, headers_for):
    user_id = student.id
    headers = headers_for(student)
    line_a = await add(client, headers, catalog["offering_a"])
    await client.post(
        "/v1/checkout/settle",
        json={"payment_method_id": payment_methods["active"], "cart_line_ids": [line_a]},
        headers=headers
    )

    trail = await get_audit_trail(db_session, actor_id=user_id)

    assert [entry.action for entry in trail][:2] == [AuditAction.INVOICE_CREATED, AuditAction.CART_ITEM_ADDED]
    assert trail[0].meta_data["invoice_number"] == "DLA00001"


@pytest.mark.asyncio
async def test_unexpected_error_uses_envelope_without_traceback(student, headers_for, mocker):
    mocker.patch.object(CartStore, "list_by_user", side_effect=RuntimeError("database exploded"))

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as raw_client:
        response = await raw_client.get("/v1/checkout", headers=headers_for(student))

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("application/json")
    body = response.json()
    assert body["success"] is False
    assert body["statusCode"] == 500
    assert body["message"] == "An internal server error occurred"
    assert "Traceback" not in response.text
    assert "database exploded" not in response.text


@pytest.mark.asyncio
async def test_audit_failure_does_not_fail_settlement(client, student, catalog, payment_methods, headers_for, mocker):
    headers = headers_for(student)
    line_a = await add(client, headers, catalog["offering_a"])
    mocker.patch(
        "coursestore.app.services.audit.AuditLog",
        side_effect=SQLAlchemyError("audit store unavailable")
    )

    response = await client.post(
        "/v1/checkout/settle",
        json={"payment_method_id": payment_methods["active"], "cart_line_ids": [line_a]},
        headers=headers
    )

    assert response.status_code == 201, response.text
    assert response.json()["data"]["invoice_number"] == "DLA00001"
    invoices = await client.get("/v1/invoices/user", headers=headers)
    assert [i["invoice_number"] for i in invoices.json()["data"]] == ["DLA00001"]
