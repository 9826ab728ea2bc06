"""Pytest configuration and fixtures."""

import os
import sys
import tempfile

# Keep config from touching the real ~/.reminder-skill-data
os.environ["REMINDER_DATA_DIR"] = tempfile.mkdtemp(prefix="reminder_skill_test_")

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from unittest.mock import AsyncMock, Mock, patch

from reminders.models import Reminder
from reminders.notify import Notifier
from reminders.parser import now_ms
from reminders.store import ReminderStore


class RecordingNotifier(Notifier):
    """Notifier that remembers what it was asked to show."""

    name = "recording"

    def __init__(self):
        self.shown = []

    def render(self, title: str, message: str) -> None:
        self.shown.append((title, message))


@pytest.fixture
def store(tmp_path):
    """Empty reminder store in a temp directory."""
    return ReminderStore(tmp_path / "reminders.json")


@pytest.fixture
def armed():
    """Stand-in for worker spawning that records the reminders it was given."""
    return Mock(return_value=4242)


@pytest.fixture
def recording_notifier():
    return RecordingNotifier()


@pytest.fixture
def make_reminder():
    """Build a Reminder whose trigger time is offset_ms from now."""
    def _make(reminder_id: str, offset_ms: int, title: str = "Title", message: str = "Message") -> Reminder:
        now = now_ms()
        return Reminder(
            id=reminder_id,
            title=title,
            message=message,
            trigger_time=now + offset_ms,
            created=now,
        )
    return _make


@pytest.fixture
def mock_httpx_client():
    """Create a mock httpx client."""
    with patch('httpx.AsyncClient') as mock:
        client = AsyncMock()
        mock.return_value.__aenter__.return_value = client
        yield client


def json_response(payload) -> Mock:
    """A fake httpx response whose .json() returns payload."""
    return Mock(json=Mock(return_value=payload))
