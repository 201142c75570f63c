"""Notifications of the signed-in user, newest first."""
from __future__ import annotations

from typing import Any

from clients.base import DomainClient
from jobsync.schemas import Notification, UpdateNotificationRequest


class NotificationsClient(DomainClient):
    async def list_notifications(self) -> list[Notification]:
        return await self._call(list[Notification], "/notifications", requires_auth=True)

    async def mark_as_read(self, notification_id: str) -> Notification | dict[str, Any] | None:
        return await self._call(
            Notification | dict[str, Any] | None, f"/notifications/{notification_id}/read", "PUT", requires_auth=True
        )

    async def update_notification(self, notification_id: str, update: UpdateNotificationRequest) -> Notification:
        return await self._call(
            Notification, f"/notifications/{notification_id}", "PUT", update.to_wire(), requires_auth=True
        )

    async def delete_notification(self, notification_id: str) -> dict[str, Any] | None:
        return await self._call(dict[str, Any] | None, f"/notifications/{notification_id}", "DELETE", requires_auth=True)

    async def unread_count(self) -> int:
        return sum(1 for notification in await self.list_notifications() if not notification.is_read)
