"""Reminder records and operation results."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Reminder:
    """A pending one-shot reminder."""
    id: str
    title: str
    message: str
    trigger_time: int  # ms since epoch
    created: int = 0   # ms since epoch, informational

    def is_expired(self, now: int) -> bool:
        return self.trigger_time <= now

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "message": self.message,
            "triggerTime": self.trigger_time,
            "created": self.created,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Reminder":
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            message=str(data["message"]),
            trigger_time=int(data["triggerTime"]),
            created=int(data.get("created") or 0),
        )


@dataclass
class ReminderView:
    """A reminder as shown to the user, with the time remaining."""
    id: str
    title: str
    message: str
    trigger_time: int
    time_left: int

    @classmethod
    def from_reminder(cls, reminder: Reminder, now: int) -> "ReminderView":
        return cls(
            id=reminder.id,
            title=reminder.title,
            message=reminder.message,
            trigger_time=reminder.trigger_time,
            time_left=reminder.trigger_time - now,
        )


@dataclass
class CreateReceipt:
    """Result of a successful create."""
    title: str
    message: str
    trigger_time: int
    reminder_id: Optional[str] = None
    via: str = "local"  # "remote" or "local"


@dataclass
class CancelOutcome:
    """Result of a cancel request. Not-found is an outcome, not an error."""
    reminder_id: str
    cancelled: bool
    error: Optional[str] = None
    via: str = "local"


def partition(reminders: list[Reminder], now: int) -> tuple[list[Reminder], list[Reminder]]:
    """Split reminders into (active, expired)."""
    active = [r for r in reminders if not r.is_expired(now)]
    expired = [r for r in reminders if r.is_expired(now)]
    return active, expired
