"""Remote-first, local-fallback dispatch of reminder operations."""

from functools import partial
from typing import Callable, Optional

import config
from logger import logger
from .backend import ReminderBackend
from .errors import RemoteRejectedError, RemoteUnavailableError
from .local import LocalReminders
from .models import CancelOutcome, CreateReceipt, Reminder, ReminderView
from .parser import resolve_trigger_time
from .remote import RemoteReminders
from .scheduler import arm_reminder, reconcile_on_startup
from .store import ReminderStore


def _log_remote_failure(operation: str, error: RemoteUnavailableError) -> None:
    if isinstance(error, RemoteRejectedError) and not error.fallback:
        logger.error(f"CCCore {operation} failed: {error.error or 'something went wrong inside CCCore'}")
    else:
        logger.warning(f"CCCore unavailable for {operation}, falling back to local: {error}")


class FallbackReminders(ReminderBackend):
    """Try the primary backend; on RemoteUnavailableError use the fallback.

    Only failures of the primary are absorbed. Errors from the fallback
    (e.g. OSError writing the store) propagate to the caller.
    """

    def __init__(self, primary: ReminderBackend, fallback: ReminderBackend):
        self.primary = primary
        self.fallback = fallback

    async def create(self, title: str, message: str, trigger_time: int) -> CreateReceipt:
        try:
            return await self.primary.create(title, message, trigger_time)
        except RemoteUnavailableError as e:
            _log_remote_failure("create", e)
        return await self.fallback.create(title, message, trigger_time)

    async def list_active(self) -> list[ReminderView]:
        try:
            return await self.primary.list_active()
        except RemoteUnavailableError as e:
            _log_remote_failure("list", e)
        return await self.fallback.list_active()

    async def cancel(self, reminder_id: str) -> CancelOutcome:
        try:
            return await self.primary.cancel(reminder_id)
        except RemoteUnavailableError as e:
            _log_remote_failure("cancel", e)
        return await self.fallback.cancel(reminder_id)


class Dispatcher:
    """Entry point for reminder operations.

    Usage:
        dispatcher = Dispatcher.from_config()
        dispatcher.startup()
        receipt = await dispatcher.create("Stand up", "Stretch", "in 30 minutes")
    """

    def __init__(
        self,
        backend: ReminderBackend,
        store: ReminderStore,
        arm: Callable[[Reminder], Optional[int]]
    ):
        self.backend = backend
        self.store = store
        self.arm = arm

    @classmethod
    def from_config(cls) -> "Dispatcher":
        """Wire the CCCore client, the local store and worker spawning from config."""
        store = ReminderStore(config.REMINDERS_FILE)
        arm = partial(arm_reminder, store_path=store.path, log_file=config.WORKER_LOG_FILE)
        remote = RemoteReminders(config.CCCORE_HOST, config.CCCORE_HTTP_PORT, config.CCCORE_TIMEOUT_MS)
        local = LocalReminders(store, arm)
        return cls(FallbackReminders(remote, local), store, arm)

    async def create(self, title: str, message: str, time: str) -> CreateReceipt:
        """Schedule a reminder from a time expression.

        Raises:
            InvalidTimeFormatError: If time can't be resolved
            OSError: If the local fallback can't persist the reminder
        """
        trigger_time = resolve_trigger_time(time)
        return await self.backend.create(title, message, trigger_time)

    async def list_active(self) -> list[ReminderView]:
        return await self.backend.list_active()

    async def cancel(self, reminder_id: str) -> CancelOutcome:
        return await self.backend.cancel(reminder_id)

    def startup(self) -> list[Reminder]:
        """Re-arm reminders persisted before this process started."""
        return reconcile_on_startup(self.store, self.arm)
