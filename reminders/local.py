"""Local reminder operations on the reminders file."""

import asyncio
import uuid
from typing import Callable, Optional

from logger import logger
from utils import sanitize_for_log
from .backend import ReminderBackend
from .models import CancelOutcome, CreateReceipt, Reminder, ReminderView, partition
from .parser import now_ms
from .store import ReminderStore


def generate_reminder_id(now: int, taken: set[str]) -> str:
    """Timestamp plus random suffix, unique among the ids in taken."""
    while True:
        reminder_id = f"reminder_{now}_{uuid.uuid4().hex[:9]}"
        if reminder_id not in taken:
            return reminder_id


class LocalReminders(ReminderBackend):
    """Reminder operations backed by the local store and delivery workers.

    Store access blocks while another process holds the lock, so each
    operation runs its load-modify-save in a worker thread.
    """

    def __init__(self, store: ReminderStore, arm: Callable[[Reminder], Optional[int]]):
        self.store = store
        self.arm = arm

    async def create(self, title: str, message: str, trigger_time: int) -> CreateReceipt:
        """Persist a reminder and spawn its delivery worker.

        Raises:
            OSError: If the reminders file can't be written or locked
        """
        reminder = await asyncio.to_thread(self._insert, title, message, trigger_time)

        self.arm(reminder)
        logger.info(f"Reminder {reminder.id} created locally: {sanitize_for_log(title)}")
        return CreateReceipt(title, message, trigger_time, reminder_id=reminder.id, via="local")

    async def list_active(self) -> list[ReminderView]:
        now = now_ms()
        active = await asyncio.to_thread(self._prune, now)
        return [ReminderView.from_reminder(r, now) for r in active]

    async def cancel(self, reminder_id: str) -> CancelOutcome:
        """Remove a reminder by id. Its worker, if still sleeping, is left alone.

        Raises:
            OSError: If the reminders file can't be written or locked
        """
        if not await asyncio.to_thread(self._remove, reminder_id):
            logger.warning(f"Reminder not found for cancellation: {reminder_id}")
            return CancelOutcome(reminder_id, cancelled=False, error="not found", via="local")

        logger.info(f"Reminder {reminder_id} cancelled locally")
        return CancelOutcome(reminder_id, cancelled=True, via="local")

    def _insert(self, title: str, message: str, trigger_time: int) -> Reminder:
        now = now_ms()
        with self.store.locked():
            active, _ = partition(self.store.load_or_recover(), now)

            reminder = Reminder(
                id=generate_reminder_id(now, {r.id for r in active}),
                title=title,
                message=message,
                trigger_time=trigger_time,
                created=now,
            )
            active.append(reminder)
            self.store.save(active)
        return reminder

    def _prune(self, now: int) -> list[Reminder]:
        with self.store.locked():
            reminders = self.store.load_or_recover()
            active, expired = partition(reminders, now)

            if expired:
                try:
                    self.store.save(active)
                except OSError as e:
                    logger.warning(f"Could not prune {len(expired)} expired reminders: {e}")

        logger.info(f"Listing reminders: {len(reminders)} total, {len(active)} active")
        return active

    def _remove(self, reminder_id: str) -> bool:
        with self.store.locked():
            active, _ = partition(self.store.load_or_recover(), now_ms())
            remaining = [r for r in active if r.id != reminder_id]

            if len(remaining) == len(active):
                return False

            self.store.save(remaining)
        return True
