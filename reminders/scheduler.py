"""Arm delivery workers and re-arm pending reminders on startup.

Each reminder gets its own detached worker process (reminders.executor) that
outlives the server. There is no way to interrupt a sleeping worker: cancel
only removes the record, and the worker still wakes and fires.
"""

import os
import subprocess
import sys
from pathlib import Path
from typing import Callable, Optional

from logger import logger
from utils import sanitize_for_log
from .models import Reminder, partition
from .parser import now_ms
from .store import ReminderStore

PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Windows process creation flags
DETACHED_PROCESS = 0x00000008
CREATE_NEW_PROCESS_GROUP = 0x00000200
CREATE_NO_WINDOW = 0x08000000


def worker_command(store_path: Path, reminder: Reminder, delay_ms: int, log_file: Path) -> list[str]:
    """Command line for a delivery worker."""
    return [
        sys.executable,
        "-m", "reminders.executor",
        "--",  # titles and messages may start with "-"
        str(store_path),
        reminder.id,
        reminder.title,
        reminder.message,
        str(delay_ms),
        str(log_file),
    ]


def spawn_worker(store_path: Path, reminder: Reminder, delay_ms: int, log_file: Path) -> Optional[int]:
    """Start a detached delivery worker for a reminder.

    Args:
        store_path: Reminders file the worker retires the record from
        reminder: The reminder to deliver
        delay_ms: How long the worker sleeps before firing
        log_file: Log sink for the worker

    Returns:
        The worker's pid, or None if it couldn't be started
    """
    kwargs = {
        "cwd": str(PROJECT_ROOT),
        "stdin": subprocess.DEVNULL,
        "stdout": subprocess.DEVNULL,
        "stderr": subprocess.DEVNULL,
        "close_fds": True,
    }
    if os.name == "nt":
        kwargs["creationflags"] = DETACHED_PROCESS | CREATE_NEW_PROCESS_GROUP | CREATE_NO_WINDOW
    else:
        # New session: the worker survives the server exiting or its terminal closing
        kwargs["start_new_session"] = True

    try:
        proc = subprocess.Popen(worker_command(store_path, reminder, delay_ms, log_file), **kwargs)
    except OSError as e:
        logger.error(f"Failed to spawn worker for reminder {reminder.id}: {e}")
        return None

    logger.info(f"Spawned worker pid={proc.pid} for reminder {reminder.id} (delay {delay_ms}ms)")
    return proc.pid


def arm_reminder(
    reminder: Reminder,
    store_path: Path,
    log_file: Path,
    now: Optional[int] = None
) -> Optional[int]:
    """Spawn a worker that fires at the reminder's trigger time.

    The delay is the time remaining, clamped at zero, so a re-armed reminder
    keeps its original trigger time.
    """
    if now is None:
        now = now_ms()
    delay_ms = max(0, reminder.trigger_time - now)
    return spawn_worker(store_path, reminder, delay_ms, log_file)


def reconcile_on_startup(
    store: ReminderStore,
    arm: Callable[[Reminder], Optional[int]],
    now: Optional[int] = None
) -> list[Reminder]:
    """Drop expired reminders and re-arm the rest.

    Call this once when the server starts so reminders created before a
    restart still fire. A worker from before the restart may still be alive,
    in which case the reminder fires twice.

    Args:
        store: The reminders file
        arm: Spawns a worker for one reminder
        now: Reference time in ms (defaults to the current time)

    Returns:
        The reminders that were re-armed
    """
    if now is None:
        now = now_ms()

    with store.locked():
        active, expired = partition(store.load_or_recover(), now)

        if expired:
            logger.info(f"Cleaning up {len(expired)} expired reminders ({len(active)} active)")
            store.save(active)

    for reminder in active:
        logger.info(
            f"Rescheduling reminder {reminder.id} ({sanitize_for_log(reminder.title)}), "
            f"{reminder.trigger_time - now}ms left"
        )
        arm(reminder)

    logger.info(f"Startup reconciliation complete: {len(active)} active reminders")
    return active
