"""In-memory log of delivery events, served to the front end."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Deque, Iterable

from weather_intel.core.config import settings

if TYPE_CHECKING:
    from weather_intel.services.delivery import DeliveryOutcome
    from weather_intel.services.email_content import OutboundEmail


@dataclass
class Notification:
    level: str
    message: str
    created_at: datetime
    context: dict | None = None


class NotificationLog:
    """Capped, newest-first list of notifications."""

    def __init__(self, max_items: int = 50) -> None:
        self.max_items = max_items
        self._items: Deque[Notification] = deque(maxlen=max_items)

    def add(self, level: str, message: str, context: dict | None = None) -> Notification:
        note = Notification(level=level, message=message, created_at=datetime.utcnow(), context=context)
        self._items.appendleft(note)
        return note

    def recent(self, limit: int | None = None) -> Iterable[Notification]:
        if limit is None or limit >= len(self._items):
            return list(self._items)
        return list(self._items)[:limit]

    def record_delivery(self, outcome: DeliveryOutcome, message: OutboundEmail) -> Notification:
        """Pipeline listener: one entry per delivered report."""
        context = {
            "recipient": message.recipient,
            "city": message.city,
            "method": outcome.method_used,
        }
        if outcome.delivered:
            return self.add("info", f"Weather report sent to {message.recipient}", context)
        return self.add("warn", f"Weather report for {message.recipient} may be delayed", context)


NOTIFICATIONS = NotificationLog(max_items=settings.notification_log_size)

__all__ = ["Notification", "NotificationLog", "NOTIFICATIONS"]
