"""Whole-file JSON persistence for pending reminders.

The file holds a JSON list of every reminder that has not been delivered or
cancelled. It is read and rewritten as a unit. The server and the delivery
workers are separate processes, so every load-modify-save runs inside
ReminderStore.locked(), which holds a <name>.lock file created with O_EXCL.
"""

import json
import os
import tempfile
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from logger import logger
from .errors import CorruptStoreError
from .models import Reminder

REQUIRED_KEYS = ("id", "title", "message", "triggerTime")

LOCK_TIMEOUT = 5.0        # seconds to wait for another writer
LOCK_POLL_INTERVAL = 0.05
STALE_LOCK_SECONDS = 30   # a holder never keeps the lock this long


class ReminderStore:
    """The reminders file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> list[Reminder]:
        """Read every persisted reminder.

        Returns:
            The stored reminders, or an empty list if the file doesn't exist

        Raises:
            CorruptStoreError: If the file isn't a JSON list of reminder records
        """
        if not self.path.exists():
            return []

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (ValueError, UnicodeDecodeError) as e:
            raise CorruptStoreError(self.path, f"invalid JSON: {e}") from e

        if not isinstance(data, list):
            raise CorruptStoreError(self.path, f"expected a list, got {type(data).__name__}")

        reminders = []
        for item in data:
            if not isinstance(item, dict) or any(k not in item for k in REQUIRED_KEYS):
                raise CorruptStoreError(self.path, f"malformed record: {item!r}")
            try:
                reminders.append(Reminder.from_dict(item))
            except (TypeError, ValueError) as e:
                raise CorruptStoreError(self.path, f"malformed record: {item!r}") from e
        return reminders

    def save(self, reminders: list[Reminder]) -> None:
        """Overwrite the file with the given reminders.

        Writes to a temp file in the same directory and swaps it in, so a
        concurrent reader sees either the old or the new list.

        Raises:
            OSError: If the file can't be written
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps([r.to_dict() for r in reminders], indent=2, ensure_ascii=False)

        fd, tmp_path = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_path, self.path)
        except OSError:
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass
            raise

    def load_or_recover(self) -> list[Reminder]:
        """Load reminders, setting a corrupt file aside and starting empty."""
        try:
            return self.load()
        except CorruptStoreError as e:
            backup = self.quarantine()
            logger.error(f"{e} - moved to {backup}, continuing with an empty store")
            return []

    def quarantine(self) -> Optional[Path]:
        """Rename the current file to <name>.corrupt-<timestamp>."""
        backup = self.path.with_name(f"{self.path.name}.corrupt-{int(time.time())}")
        try:
            os.replace(self.path, backup)
            return backup
        except FileNotFoundError:
            return None

    @property
    def lock_path(self) -> Path:
        return self.path.with_name(f"{self.path.name}.lock")

    @contextmanager
    def locked(self, timeout: float = LOCK_TIMEOUT) -> Iterator[None]:
        """Hold the store lock for one load-modify-save cycle.

        Usage:
            with store.locked():
                reminders = store.load_or_recover()
                store.save(reminders[1:])

        Raises:
            TimeoutError: If another process holds the lock past the timeout
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        deadline = time.monotonic() + timeout

        while True:
            try:
                fd = os.open(self.lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
                break
            except FileExistsError:
                if self._break_stale_lock():
                    continue
                if time.monotonic() >= deadline:
                    raise TimeoutError(f"Timed out after {timeout}s waiting for {self.lock_path}")
                time.sleep(LOCK_POLL_INTERVAL)

        try:
            os.write(fd, str(os.getpid()).encode())
        finally:
            os.close(fd)

        try:
            yield
        finally:
            try:
                os.unlink(self.lock_path)
            except FileNotFoundError:
                pass

    def _break_stale_lock(self) -> bool:
        """Remove a lock left behind by a crashed holder. True means retry now."""
        try:
            seen = self.lock_path.stat()
        except FileNotFoundError:
            return True

        age = time.time() - seen.st_mtime
        if age < STALE_LOCK_SECONDS:
            return False

        # Another process may have broken it and taken a fresh lock since the stat
        try:
            current = self.lock_path.stat()
        except FileNotFoundError:
            return True
        if (current.st_ino, current.st_mtime_ns) != (seen.st_ino, seen.st_mtime_ns):
            return True

        logger.warning(f"Removing stale store lock {self.lock_path} ({age:.0f}s old)")
        try:
            os.unlink(self.lock_path)
        except FileNotFoundError:
            pass
        return True
