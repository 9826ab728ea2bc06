"""Reminders module for one-off scheduled OS notifications.

Operations go to the CCCore service when it answers, and otherwise run
locally: a JSON store plus one detached delivery worker per reminder.
"""

from .errors import (
    ReminderError,
    InvalidTimeFormatError,
    RemoteUnavailableError,
    RemoteRejectedError,
    CorruptStoreError,
    NotificationRenderError,
)
from .models import Reminder, ReminderView, CreateReceipt, CancelOutcome
from .parser import resolve_trigger_time
from .store import ReminderStore
from .dispatcher import Dispatcher, FallbackReminders
from .handler import create_reminder, list_reminders, cancel_reminder

__all__ = [
    "ReminderError",
    "InvalidTimeFormatError",
    "RemoteUnavailableError",
    "RemoteRejectedError",
    "CorruptStoreError",
    "NotificationRenderError",
    "Reminder",
    "ReminderView",
    "CreateReceipt",
    "CancelOutcome",
    "resolve_trigger_time",
    "ReminderStore",
    "Dispatcher",
    "FallbackReminders",
    "create_reminder",
    "list_reminders",
    "cancel_reminder",
]
