import pytest

from app.models import NotificationType
from app.services.notifications.notification_service import NotificationService

pytestmark = pytest.mark.anyio


@pytest.fixture
def notify(session):
    async def _notify(user_id: str, title: str) -> str:
        [notification] = await NotificationService(session).notify(
            user_id, type=NotificationType.WORK_ORDER, title=title, message=title
        )
        return notification.id

    return _notify


async def inbox(client, headers, **params) -> list[dict]:
    response = await client.get("/api/v1/notifications", params=params, headers=headers)
    return response.json()["notifications"]


class TestMarkOneRead:
    async def test_mark_read_and_unread(self, client, subcontractor, auth_headers, notify):
        headers = auth_headers(subcontractor)
        notification_id = await notify(subcontractor.id, "Assigned")

        read = await client.put(f"/api/v1/notifications/{notification_id}", json={}, headers=headers)

        assert read.status_code == 200
        assert read.json()["is_read"] is True
        assert read.json()["read_at"] is not None
        assert await inbox(client, headers, unread_only=True) == []

        unread = (
            await client.put(f"/api/v1/notifications/{notification_id}", json={"read": False}, headers=headers)
        ).json()

        assert unread["is_read"] is False
        assert unread["read_at"] is None

    async def test_someone_elses_notification_is_not_found(
        self, client, subcontractor, client_user, auth_headers, notify
    ):
        notification_id = await notify(client_user.id, "New Bid Received")

        response = await client.put(
            f"/api/v1/notifications/{notification_id}", json={}, headers=auth_headers(subcontractor)
        )

        assert response.status_code == 404
        [untouched] = await inbox(client, auth_headers(client_user))
        assert untouched["is_read"] is False


class TestMarkManyRead:
    async def test_listed_ids(self, client, subcontractor, client_user, auth_headers, notify):
        headers = auth_headers(subcontractor)
        first = await notify(subcontractor.id, "First")
        await notify(subcontractor.id, "Second")
        foreign = await notify(client_user.id, "Not yours")

        response = await client.put("/api/v1/notifications", json={"ids": [first, foreign]}, headers=headers)

        assert response.json() == {"updated": 1}
        assert [n["title"] for n in await inbox(client, headers, unread_only=True)] == ["Second"]
        [foreign_row] = await inbox(client, auth_headers(client_user))
        assert foreign_row["is_read"] is False

    async def test_mark_all_read(self, client, subcontractor, client_user, auth_headers, notify):
        headers = auth_headers(subcontractor)
        for title in ("One", "Two", "Three"):
            await notify(subcontractor.id, title)
        await notify(client_user.id, "Other inbox")

        response = await client.put("/api/v1/notifications", json={"mark_all_read": True}, headers=headers)

        assert response.json() == {"updated": 3}
        assert await inbox(client, headers, unread_only=True) == []
        assert len(await inbox(client, auth_headers(client_user), unread_only=True)) == 1

    async def test_already_read_are_not_counted(self, client, subcontractor, auth_headers, notify):
        headers = auth_headers(subcontractor)
        notification_id = await notify(subcontractor.id, "Seen")
        await client.put(f"/api/v1/notifications/{notification_id}", json={}, headers=headers)

        response = await client.put("/api/v1/notifications", json={"mark_all_read": True}, headers=headers)

        assert response.json() == {"updated": 0}

    async def test_nothing_selected(self, client, subcontractor, auth_headers):
        response = await client.put("/api/v1/notifications", json={}, headers=auth_headers(subcontractor))

        assert response.status_code == 422
