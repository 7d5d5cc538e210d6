"""In-memory store of currently displayed notifications."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from notimenu.models import Notification

logger = logging.getLogger(__name__)


class NotificationStore:
    """Ordered list of displayed notifications.

    The menu only ever reads a snapshot taken with displayed(); it never
    mutates the store.
    """

    def __init__(self, notifications: Optional[List[Notification]] = None) -> None:
        """Initialize store.

        Args:
            notifications: Initial notifications, in display order
        """
        self._displayed: List[Notification] = list(notifications or [])

    def add(self, notification: Notification) -> None:
        """Append a notification to the end of the display order."""
        if self.get(notification.id) is not None:
            raise ValueError(f"Notification {notification.id} is already displayed")
        self._displayed.append(notification)
        logger.debug(f"Displaying notification {notification.id} from {notification.appname}")

    def close(self, notification_id: int) -> Optional[Notification]:
        """Remove a notification.

        Args:
            notification_id: Id of the notification to remove

        Returns:
            The removed notification, or None if it was not displayed
        """
        for i, notification in enumerate(self._displayed):
            if notification.id == notification_id:
                del self._displayed[i]
                logger.debug(f"Closed notification {notification_id}")
                return notification
        return None

    def get(self, notification_id: int) -> Optional[Notification]:
        """Look up a displayed notification by id."""
        for notification in self._displayed:
            if notification.id == notification_id:
                return notification
        return None

    def displayed(self) -> Tuple[Notification, ...]:
        """Get an ordered, read-only snapshot of displayed notifications."""
        return tuple(self._displayed)

    def __len__(self) -> int:
        return len(self._displayed)

    def __iter__(self) -> Iterator[Notification]:
        return iter(self.displayed())

    def load_json(self, path: Path) -> int:
        """Add notifications described in a JSON file.

        The file holds a list of objects with appname, summary, body and
        actions (flat identifier/name list). Ids are taken from the file or
        assigned in order.

        Args:
            path: Path to JSON file

        Returns:
            Number of notifications added
        """
        with open(path, encoding="utf-8") as f:
            records = json.load(f)

        if not isinstance(records, list):
            raise ValueError(f"{path}: expected a list of notifications")

        next_id = max((n.id for n in self._displayed), default=0) + 1
        for record in records:
            notification = _notification_from_record(record, next_id)
            self.add(notification)
            next_id = max(next_id, notification.id) + 1

        logger.info(f"Loaded {len(records)} notifications from {path}")
        return len(records)

    @classmethod
    def from_json(cls, path: Path) -> "NotificationStore":
        """Create a store from a JSON file (see load_json)."""
        store = cls()
        store.load_json(path)
        return store


def _notification_from_record(record: Dict[str, Any], default_id: int) -> Notification:
    if not isinstance(record, dict) or "appname" not in record:
        raise ValueError(f"Invalid notification record: {record!r}")

    return Notification.create(
        id=int(record.get("id", default_id)),
        appname=record["appname"],
        summary=record.get("summary", ""),
        body=record.get("body", ""),
        actions=record.get("actions") or None,
    )
