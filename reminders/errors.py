"""Exceptions raised by the reminder core."""

from pathlib import Path
from typing import Optional


class ReminderError(Exception):
    """Base class for reminder errors."""
    pass


class InvalidTimeFormatError(ReminderError):
    """A time expression is neither relative ("in 5 minutes") nor a datetime."""

    def __init__(self, expression: str):
        self.expression = expression
        super().__init__(f"Invalid time format: {expression!r}")


class RemoteUnavailableError(ReminderError):
    """The remote peer could not be reached or returned an unusable reply."""
    pass


class RemoteRejectedError(RemoteUnavailableError):
    """The remote peer answered with ok=false."""

    def __init__(self, error: Optional[str] = None, fallback: bool = False):
        self.error = error
        self.fallback = fallback
        super().__init__(error or "remote peer rejected the request")


class CorruptStoreError(ReminderError):
    """The reminders file exists but is not a list of reminder records."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Corrupt reminder store {path}: {reason}")


class NotificationRenderError(ReminderError):
    """The platform notification command failed."""
    pass
