"""Shared pytest fixtures for test suite."""

import json
import sys
from pathlib import Path
from typing import List
from unittest.mock import MagicMock

import pytest

from notimenu.config import Settings
from notimenu.models import Notification
from notimenu.store import NotificationStore


@pytest.fixture
def settings() -> Settings:
    """Settings with a chooser that picks the first menu line."""
    return Settings(
        browser="true --new-tab",
        dmenu=f'{sys.executable} -c "import sys; print(sys.stdin.readline().rstrip())"',
        chooser_timeout=10.0,
    )


@pytest.fixture
def sample_notifications() -> List[Notification]:
    """Displayed notifications with URLs and actions, in display order."""
    return [
        Notification.create(
            id=1,
            appname="Firefox",
            summary="Download finished",
            body="Saved from https://example.com/file.tar.gz",
            actions=["id1", "Reply", "id2", "Open"],
        ),
        Notification.create(
            id=2,
            appname="Thunderbird",
            summary="New mail",
            body="No links here",
            actions=["archive", "Archive"],
        ),
        Notification.create(
            id=3,
            appname="cron",
            summary="Job done",
            body="see www.b.org/x",
        ),
    ]


@pytest.fixture
def store(sample_notifications: List[Notification]) -> NotificationStore:
    """Store holding the sample notifications."""
    return NotificationStore(sample_notifications)


@pytest.fixture
def transport() -> MagicMock:
    """Mock action transport."""
    return MagicMock()


@pytest.fixture
def notifications_file(tmp_path: Path) -> Path:
    """JSON file describing displayed notifications."""
    path = tmp_path / "displayed.json"
    path.write_text(json.dumps([
        {
            "appname": "Firefox",
            "summary": "Download finished",
            "body": "Saved from https://example.com/file.tar.gz",
            "actions": ["id1", "Reply"],
        },
        {
            "appname": "cron",
            "summary": "Job done",
            "body": "nothing to see",
        },
    ]))
    return path
