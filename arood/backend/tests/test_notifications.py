# tests/test_notifications.py
"""
Merchant notification tests
Tests: listing, unread filter, mark as read, ownership
"""

import pytest
from fastapi import status


async def rejected_booking(client, merchant_headers, admin_headers, location_id) -> dict:
    booking = await client.post(
        "/api/screen-bookings",
        json={"location_id": location_id, "start_date_time": "2024-06-01T00:00:00", "end_date_time": "2024-06-02T00:00:00"},
        headers=merchant_headers,
    )
    await client.post(
        f"/api/screen-bookings/{booking.json()['id']}/reject",
        json={"rejection_reason": "Screen under maintenance"},
        headers=admin_headers,
    )
    return booking.json()


class TestNotifications:

    @pytest.mark.asyncio
    async def test_rejection_notifies_merchant(self, client, merchant_headers, admin_headers, location):
        booking = await rejected_booking(client, merchant_headers, admin_headers, location.id)

        response = await client.get("/api/notifications", headers=merchant_headers)

        assert response.status_code == status.HTTP_200_OK
        notifications = response.json()
        assert len(notifications) == 1
        assert notifications[0]["type"] == "booking_rejected"
        assert notifications[0]["booking_id"] == booking["id"]
        assert notifications[0]["priority"] == "high"
        assert notifications[0]["is_read"] is False
        assert notifications[0]["email_sent"] is True

    @pytest.mark.asyncio
    async def test_mark_read(self, client, merchant_headers, admin_headers, location):
        await rejected_booking(client, merchant_headers, admin_headers, location.id)
        notification = (await client.get("/api/notifications", headers=merchant_headers)).json()[0]

        response = await client.post(f"/api/notifications/{notification['id']}/read", headers=merchant_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["is_read"] is True
        assert response.json()["read_at"] is not None

        unread = await client.get("/api/notifications?unread_only=true", headers=merchant_headers)
        assert unread.json() == []

    @pytest.mark.asyncio
    async def test_cannot_read_someone_elses_notification(self, client, merchant_headers, other_merchant_headers, admin_headers, location):
        await rejected_booking(client, merchant_headers, admin_headers, location.id)
        notification = (await client.get("/api/notifications", headers=merchant_headers)).json()[0]

        response = await client.post(
            f"/api/notifications/{notification['id']}/read", headers=other_merchant_headers
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert (await client.get("/api/notifications", headers=other_merchant_headers)).json() == []

    @pytest.mark.asyncio
    async def test_admin_cancellation_notifies_merchant(self, client, merchant_headers, admin_headers, location, email_service):
        booking = await client.post(
            "/api/screen-bookings",
            json={"location_id": location.id, "start_date_time": "2024-06-01T00:00:00", "end_date_time": "2024-06-02T00:00:00"},
            headers=merchant_headers,
        )

        response = await client.post(f"/api/screen-bookings/{booking.json()['id']}/cancel", headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        notifications = (await client.get("/api/notifications", headers=merchant_headers)).json()
        assert [n["type"] for n in notifications] == ["booking_cancelled"]
        assert email_service.sent[-1]["title"] == "Booking cancelled"

    @pytest.mark.asyncio
    async def test_owner_cancellation_is_silent(self, client, merchant_headers, location, email_service):
        booking = await client.post(
            "/api/screen-bookings",
            json={"location_id": location.id, "start_date_time": "2024-06-01T00:00:00", "end_date_time": "2024-06-02T00:00:00"},
            headers=merchant_headers,
        )

        await client.post(f"/api/screen-bookings/{booking.json()['id']}/cancel", headers=merchant_headers)

        assert (await client.get("/api/notifications", headers=merchant_headers)).json() == []
        assert email_service.sent == []

    @pytest.mark.asyncio
    async def test_email_failure_keeps_committed_approval(self, client, merchant_headers, admin_headers, location, email_service):
        booking = await client.post(
            "/api/screen-bookings",
            json={"location_id": location.id, "start_date_time": "2024-06-01T00:00:00", "end_date_time": "2024-06-02T00:00:00"},
            headers=merchant_headers,
        )
        email_service.error = RuntimeError("template rendering failed")

        response = await client.post(f"/api/screen-bookings/{booking.json()['id']}/approve", headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["booking"]["status"] == "approved"
        notifications = (await client.get("/api/notifications", headers=merchant_headers)).json()
        assert {n["type"] for n in notifications} == {"booking_approved", "invoice_issued"}
        assert all(n["email_sent"] is False for n in notifications)
