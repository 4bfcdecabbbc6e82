"""Notification inbox operations."""

from __future__ import annotations

from typing import Sequence

from ConfDesk.backend.gateway import Gateway
from ConfDesk.core.models import Notification
from ConfDesk.utils.log import log


def unread_count(notifications: Sequence[Notification]) -> int:
    return sum(1 for notification in notifications if not notification.read)


class NotificationService:
    def __init__(self, gateway: Gateway) -> None:
        self.gateway = gateway

    async def list_for_user(self, user_id: str) -> list[Notification]:
        """Return the user's notifications, newest first."""
        return await self.gateway.list_notifications(user_id)

    async def mark_read(self, notification_id: str) -> None:
        await self.gateway.mark_notification_read(notification_id)

    async def mark_all_read(self, user_id: str, notifications: Sequence[Notification]) -> bool:
        """Mark every notification read; returns False without a call when none is unread."""
        if unread_count(notifications) == 0:
            log.debug("No unread notifications for %s", user_id)
            return False
        await self.gateway.mark_all_notifications_read(user_id)
        return True
