import asyncio
from datetime import timedelta

import jwt
import pytest

from app.config import settings
from app.models import UserRole
from app.services.numbering import DocumentPrefix, SqlRecordStore, StoreUnavailable, bucket_for, series_locks
from tests.conftest import make_token

pytestmark = pytest.mark.anyio


def current_series() -> str:
    return f"WO-{bucket_for(DocumentPrefix.WORK_ORDER)}"


async def create_work_order(client, headers, **overrides):
    payload = {"title": "Leaking faucet", "client_id": "acme", **overrides}
    return await client.post("/api/v1/work-orders", json=payload, headers=headers)


class TestAuthentication:
    async def test_missing_token(self, client):
        response = await client.get("/api/v1/work-orders")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    async def test_token_with_wrong_secret(self, client, admin):
        token = make_token(admin.id, secret="not-the-secret")

        response = await client.get("/api/v1/work-orders", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    async def test_expired_token(self, client, admin):
        token = make_token(admin.id, expires_in=timedelta(minutes=-5))

        response = await client.get("/api/v1/work-orders", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    async def test_wrong_audience(self, client, admin):
        token = jwt.encode({"sub": admin.id, "aud": "someone-else"}, settings.jwt_secret, algorithm="HS256")

        response = await client.get("/api/v1/work-orders", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    async def test_unknown_profile(self, client):
        token = make_token("ghost")

        response = await client.get("/api/v1/work-orders", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    async def test_inactive_profile(self, client, create_user, auth_headers):
        user = await create_user("former-1", UserRole.CLIENT, client_id="acme", is_active=False)

        response = await client.get("/api/v1/work-orders", headers=auth_headers(user))

        assert response.status_code == 401


class TestCreateWorkOrder:
    async def test_first_work_order_of_month(self, client, admin, auth_headers):
        response = await create_work_order(client, auth_headers(admin), priority="high")

        assert response.status_code == 201
        body = response.json()
        assert body["order_number"] == f"{current_series()}-0001"
        assert body["status"] == "pending"
        assert body["priority"] == "high"
        assert body["client_id"] == "acme"
        assert body["created_by"] == admin.id

    async def test_numbers_increase(self, client, admin, auth_headers):
        headers = auth_headers(admin)

        numbers = []
        for _ in range(3):
            response = await create_work_order(client, headers)
            numbers.append(response.json()["order_number"])

        series = current_series()
        assert numbers == [f"{series}-0001", f"{series}-0002", f"{series}-0003"]

    async def test_concurrent_requests_get_unique_numbers(self, client, admin, auth_headers):
        headers = auth_headers(admin)

        responses = await asyncio.gather(*(create_work_order(client, headers) for _ in range(8)))

        assert [r.status_code for r in responses] == [201] * 8
        numbers = sorted(r.json()["order_number"] for r in responses)
        assert numbers == [f"{current_series()}-{n:04d}" for n in range(1, 9)]

    async def test_client_creates_for_own_organisation(self, client, client_user, auth_headers):
        response = await create_work_order(client, auth_headers(client_user), client_id="someone-else")

        assert response.status_code == 201
        assert response.json()["client_id"] == "acme"

    async def test_subcontractor_cannot_create(self, client, subcontractor, auth_headers):
        response = await create_work_order(client, auth_headers(subcontractor))

        assert response.status_code == 403

    async def test_validation_error(self, client, admin, auth_headers):
        response = await client.post("/api/v1/work-orders", json={"title": ""}, headers=auth_headers(admin))

        assert response.status_code == 422

    async def test_assignment_notifies_assignee(self, client, admin, subcontractor, auth_headers):
        response = await create_work_order(client, auth_headers(admin), assigned_to=subcontractor.id)

        body = response.json()
        assert body["status"] == "assigned"
        assert body["assigned_at"] is not None

        notifications = await client.get("/api/v1/notifications", headers=auth_headers(subcontractor))
        [notification] = notifications.json()["notifications"]
        assert notification["type"] == "work_order"
        assert notification["title"] == "New Work Order Assigned"
        assert body["order_number"] in notification["message"]
        assert notification["data"] == {"work_order_id": body["id"]}


class TestListAndGet:
    async def test_visibility_by_role(self, client, admin, client_user, subcontractor, create_user, auth_headers):
        other_client = await create_user("client-2", UserRole.CLIENT, client_id="globex")
        admin_headers = auth_headers(admin)
        await create_work_order(client, admin_headers, client_id="acme")
        await create_work_order(client, admin_headers, client_id="globex", assigned_to=subcontractor.id)

        admin_list = (await client.get("/api/v1/work-orders", headers=admin_headers)).json()
        acme_list = (await client.get("/api/v1/work-orders", headers=auth_headers(client_user))).json()
        globex_list = (await client.get("/api/v1/work-orders", headers=auth_headers(other_client))).json()
        sub_list = (await client.get("/api/v1/work-orders", headers=auth_headers(subcontractor))).json()

        assert admin_list["total"] == 2
        assert [wo["client_id"] for wo in acme_list["work_orders"]] == ["acme"]
        assert [wo["client_id"] for wo in globex_list["work_orders"]] == ["globex"]
        assert [wo["assigned_to"] for wo in sub_list["work_orders"]] == [subcontractor.id]

    async def test_client_without_organisation_sees_nothing(self, client, admin, create_user, auth_headers):
        orphan = await create_user("client-3", UserRole.CLIENT)
        await create_work_order(client, auth_headers(admin), client_id=None)

        response = await client.get("/api/v1/work-orders", headers=auth_headers(orphan))

        assert response.json() == {"work_orders": [], "total": 0}

    async def test_filter_by_status(self, client, admin, subcontractor, auth_headers):
        headers = auth_headers(admin)
        await create_work_order(client, headers)
        await create_work_order(client, headers, assigned_to=subcontractor.id)

        response = await client.get("/api/v1/work-orders", params={"status": "assigned"}, headers=headers)

        body = response.json()
        assert body["total"] == 1
        assert body["work_orders"][0]["status"] == "assigned"

    async def test_get_hidden_work_order_is_not_found(self, client, admin, create_user, auth_headers):
        created = (await create_work_order(client, auth_headers(admin), client_id="globex")).json()
        outsider = await create_user("client-4", UserRole.CLIENT, client_id="acme")

        visible = await client.get(f"/api/v1/work-orders/{created['id']}", headers=auth_headers(admin))
        hidden = await client.get(f"/api/v1/work-orders/{created['id']}", headers=auth_headers(outsider))

        assert visible.status_code == 200
        assert visible.json()["order_number"] == created["order_number"]
        assert hidden.status_code == 404


class TestUpdateWorkOrder:
    async def test_status_progression_stamps_times(self, client, admin, subcontractor, auth_headers):
        created = (await create_work_order(client, auth_headers(admin), assigned_to=subcontractor.id)).json()
        url = f"/api/v1/work-orders/{created['id']}"
        headers = auth_headers(subcontractor)

        started = (await client.put(url, json={"status": "in_progress"}, headers=headers)).json()
        completed = (
            await client.put(url, json={"status": "completed", "completion_notes": "Washer replaced"}, headers=headers)
        ).json()

        assert started["actual_start_time"] is not None
        assert completed["status"] == "completed"
        assert completed["completed_by"] == subcontractor.id
        assert completed["completed_at"] is not None
        assert completed["completion_notes"] == "Washer replaced"
        assert completed["order_number"] == created["order_number"]

    async def test_reassignment_notifies(self, client, admin, subcontractor, auth_headers):
        created = (await create_work_order(client, auth_headers(admin))).json()

        response = await client.put(
            f"/api/v1/work-orders/{created['id']}",
            json={"assigned_to": subcontractor.id},
            headers=auth_headers(admin),
        )

        assert response.json()["status"] == "assigned"
        notifications = (await client.get("/api/v1/notifications", headers=auth_headers(subcontractor))).json()
        assert [n["title"] for n in notifications["notifications"]] == ["Work Order Assigned"]

    async def test_hidden_work_order_update_is_not_found(self, client, admin, subcontractor, auth_headers):
        created = (await create_work_order(client, auth_headers(admin))).json()

        response = await client.put(
            f"/api/v1/work-orders/{created['id']}",
            json={"status": "cancelled"},
            headers=auth_headers(subcontractor),
        )

        assert response.status_code == 404
        unchanged = (await client.get(f"/api/v1/work-orders/{created['id']}", headers=auth_headers(admin))).json()
        assert unchanged["status"] == "pending"

    async def test_colleague_of_creator_cannot_update(self, client, client_user, create_user, auth_headers):
        colleague = await create_user("client-6", UserRole.CLIENT, client_id="acme")
        created = (await create_work_order(client, auth_headers(client_user))).json()

        response = await client.put(
            f"/api/v1/work-orders/{created['id']}",
            json={"status": "cancelled"},
            headers=auth_headers(colleague),
        )

        assert response.status_code == 403

    async def test_update_missing(self, client, admin, auth_headers):
        response = await client.put("/api/v1/work-orders/missing", json={"title": "x"}, headers=auth_headers(admin))

        assert response.status_code == 404


class TestDeleteWorkOrder:
    async def test_admin_deletes(self, client, admin, auth_headers):
        headers = auth_headers(admin)
        created = (await create_work_order(client, headers)).json()

        response = await client.delete(f"/api/v1/work-orders/{created['id']}", headers=headers)

        assert response.status_code == 204
        assert (await client.get(f"/api/v1/work-orders/{created['id']}", headers=headers)).status_code == 404

    async def test_linked_invoice_keeps_its_number(self, client, admin, auth_headers):
        headers = auth_headers(admin)
        created = (await create_work_order(client, headers)).json()
        invoice = {
            "vendor": "Facilities Co",
            "customer": "Acme Corp",
            "work_order_id": created["id"],
            "items": [{"description": "Repair", "quantity": "1", "price": "120.00"}],
        }
        issued = (await client.post("/api/v1/invoices", json=invoice, headers=headers)).json()

        await client.delete(f"/api/v1/work-orders/{created['id']}", headers=headers)

        [listed] = (await client.get("/api/v1/invoices", headers=headers)).json()["invoices"]
        assert listed["invoice_number"] == issued["invoice_number"]
        assert listed["work_order_id"] is None

    async def test_only_admins_delete(self, client, client_user, auth_headers):
        created = (await create_work_order(client, auth_headers(client_user))).json()

        response = await client.delete(f"/api/v1/work-orders/{created['id']}", headers=auth_headers(client_user))

        assert response.status_code == 403

    async def test_delete_missing(self, client, admin, auth_headers):
        response = await client.delete("/api/v1/work-orders/missing", headers=auth_headers(admin))

        assert response.status_code == 404


class TestNumberingFailures:
    @pytest.fixture(autouse=True)
    def fast_retries(self, monkeypatch):
        monkeypatch.setattr(settings, "numbering_max_attempts", 3)
        monkeypatch.setattr(settings, "numbering_retry_min_wait", 0)
        monkeypatch.setattr(settings, "numbering_retry_max_wait", 0)
        monkeypatch.setattr(settings, "numbering_retry_multiplier", 0)

    async def work_order_total(self, client, headers) -> int:
        return (await client.get("/api/v1/work-orders", headers=headers)).json()["total"]

    async def test_persistent_conflict_is_409(self, client, admin, auth_headers, monkeypatch):
        headers = auth_headers(admin)
        await create_work_order(client, headers)

        async def stale_max(self, pattern):
            return None

        # Every attempt re-allocates -0001, which the unique constraint rejects
        monkeypatch.setattr(SqlRecordStore, "find_max_identifier", stale_max)
        response = await create_work_order(client, headers)

        assert response.status_code == 409
        assert await self.work_order_total(client, headers) == 1

    async def test_store_unavailable_is_503(self, client, admin, auth_headers, monkeypatch):
        headers = auth_headers(admin)

        async def unavailable(self, pattern):
            raise StoreUnavailable("connection refused")

        monkeypatch.setattr(SqlRecordStore, "find_max_identifier", unavailable)
        response = await create_work_order(client, headers)

        assert response.status_code == 503
        assert await self.work_order_total(client, headers) == 0

    async def test_series_lock_timeout_is_503(self, client, admin, auth_headers, monkeypatch):
        headers = auth_headers(admin)
        monkeypatch.setattr(settings, "numbering_lock_timeout", 0.05)

        async with series_locks.hold(current_series()):
            response = await create_work_order(client, headers)

        assert response.status_code == 503
        assert await self.work_order_total(client, headers) == 0

    async def test_other_series_unaffected_by_held_lock(self, client, admin, auth_headers, monkeypatch):
        headers = auth_headers(admin)
        monkeypatch.setattr(settings, "numbering_lock_timeout", 0.05)

        async with series_locks.hold(current_series()):
            response = await client.post("/api/v1/rfps", json={"title": "Snow removal"}, headers=headers)

        assert response.status_code == 201
