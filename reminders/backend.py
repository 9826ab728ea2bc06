"""Common interface of the remote and local reminder implementations."""

from abc import ABC, abstractmethod

from .models import CancelOutcome, CreateReceipt, ReminderView


class ReminderBackend(ABC):
    """Create, list and cancel reminders."""

    @abstractmethod
    async def create(self, title: str, message: str, trigger_time: int) -> CreateReceipt:
        """Schedule a reminder for trigger_time (ms since epoch)."""
        pass

    @abstractmethod
    async def list_active(self) -> list[ReminderView]:
        """Reminders that have not fired yet."""
        pass

    @abstractmethod
    async def cancel(self, reminder_id: str) -> CancelOutcome:
        """Cancel by id. An unknown id is reported in the outcome, not raised."""
        pass
