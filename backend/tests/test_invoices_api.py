from decimal import Decimal

import pytest
from sqlalchemy import event

from app.models.invoice import InvoiceItem
from app.services.invoices.invoice_service import compute_totals
from app.services.numbering import DocumentPrefix, bucket_for

pytestmark = pytest.mark.anyio


@pytest.fixture
def foreign_keys(engine):
    """SQLite leaves foreign keys unenforced unless asked per connection."""

    @event.listens_for(engine.sync_engine, "checkout")
    def enable(dbapi_connection, connection_record, connection_proxy):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


INVOICE = {
    "vendor": "Facilities Co",
    "customer": "Acme Corp",
    "items": [
        {"description": "Monthly cleaning", "quantity": "2", "price": "450.00"},
        {"description": "Carpet shampoo", "quantity": "1", "price": "99.99"},
    ],
    "tax_rate": "0.08",
}


def test_compute_totals_rounds_to_cents():
    items = [
        InvoiceItem(description="Filters", quantity=Decimal("3"), price=Decimal("12.345")),
        InvoiceItem(description="Labour", quantity=Decimal("1.5"), price=Decimal("80")),
    ]

    subtotal, tax, total = compute_totals(items, Decimal("0.0825"))

    assert subtotal == Decimal("157.04")
    assert tax == Decimal("12.96")
    assert total == Decimal("170.00")


def test_compute_totals_without_tax():
    items = [InvoiceItem(description="Inspection", quantity=Decimal("1"), price=Decimal("250"))]

    assert compute_totals(items, Decimal("0")) == (Decimal("250.00"), Decimal("0.00"), Decimal("250.00"))


class TestInvoicesApi:
    async def test_create_invoice(self, client, admin, auth_headers):
        response = await client.post("/api/v1/invoices", json=INVOICE, headers=auth_headers(admin))

        assert response.status_code == 201
        body = response.json()
        assert body["invoice_number"] == f"INV-{bucket_for(DocumentPrefix.INVOICE)}-0001"
        assert Decimal(body["subtotal"]) == Decimal("999.99")
        assert Decimal(body["tax"]) == Decimal("80.00")
        assert Decimal(body["total"]) == Decimal("1079.99")
        assert body["status"] == "pending"
        assert [item["description"] for item in body["items"]] == ["Monthly cleaning", "Carpet shampoo"]
        assert body["updated_at"] is not None

    async def test_invoice_numbers_increase(self, client, admin, auth_headers):
        headers = auth_headers(admin)
        await client.post("/api/v1/invoices", json=INVOICE, headers=headers)
        await client.post("/api/v1/invoices", json=INVOICE, headers=headers)

        listed = (await client.get("/api/v1/invoices", headers=headers)).json()

        series = f"INV-{bucket_for(DocumentPrefix.INVOICE)}"
        assert listed["total"] == 2
        assert sorted(inv["invoice_number"] for inv in listed["invoices"]) == [f"{series}-0001", f"{series}-0002"]

    async def test_invoices_are_admin_only(self, client, client_user, subcontractor, auth_headers):
        for user in (client_user, subcontractor):
            created = await client.post("/api/v1/invoices", json=INVOICE, headers=auth_headers(user))
            listed = await client.get("/api/v1/invoices", headers=auth_headers(user))

            assert created.status_code == 403
            assert listed.status_code == 403

    @pytest.mark.parametrize(
        "overrides",
        [
            {"items": []},
            {"tax_rate": "1.5"},
            {"vendor": ""},
            {"items": [{"description": "Bad", "quantity": "0", "price": "1"}]},
        ],
    )
    async def test_invalid_payload(self, client, admin, auth_headers, overrides):
        response = await client.post("/api/v1/invoices", json={**INVOICE, **overrides}, headers=auth_headers(admin))

        assert response.status_code == 422

    async def test_invoice_for_work_order(self, client, admin, auth_headers, foreign_keys):
        headers = auth_headers(admin)
        created = await client.post("/api/v1/work-orders", json={"title": "Boiler service"}, headers=headers)
        work_order = created.json()

        response = await client.post(
            "/api/v1/invoices", json={**INVOICE, "work_order_id": work_order["id"]}, headers=headers
        )

        assert response.status_code == 201
        assert response.json()["work_order_id"] == work_order["id"]

    async def test_unknown_work_order_is_not_found(self, client, admin, auth_headers, foreign_keys):
        headers = auth_headers(admin)

        response = await client.post(
            "/api/v1/invoices", json={**INVOICE, "work_order_id": "does-not-exist"}, headers=headers
        )

        assert response.status_code == 404
        assert "does-not-exist" in response.json()["detail"]
        listed = (await client.get("/api/v1/invoices", headers=headers)).json()
        assert listed["total"] == 0
        # The failed request burned no number
        created = (await client.post("/api/v1/invoices", json=INVOICE, headers=headers)).json()
        assert created["invoice_number"] == f"INV-{bucket_for(DocumentPrefix.INVOICE)}-0001"
