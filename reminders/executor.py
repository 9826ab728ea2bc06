"""Delivery worker: wait out the delay, show the notification, retire the reminder.

Spawned detached by reminders.scheduler, one process per reminder:

    python -m reminders.executor <store> <id> <title> <message> <delay_ms> <log_file>
"""

import argparse
import sys
import time
from pathlib import Path
from typing import Optional

from logger import logger, setup_logging
from utils import sanitize_for_log
from .notify import Notifier, notify
from .store import ReminderStore

# time.sleep overflows for delays of a few centuries
MAX_SLEEP_SECONDS = 30 * 24 * 3600


def retire_reminder(store: ReminderStore, reminder_id: str) -> bool:
    """Remove a delivered reminder from the store.

    Returns:
        True if the record was present and removed, False if it was already
        gone (cancelled, or retired by a duplicate worker)

    Raises:
        OSError: If the store can't be locked or written
    """
    with store.locked():
        reminders = store.load_or_recover()
        remaining = [r for r in reminders if r.id != reminder_id]
        if len(remaining) == len(reminders):
            logger.info(f"Worker: reminder {reminder_id} already gone from store")
            return False

        store.save(remaining)
    logger.info(f"Worker: reminder {reminder_id} removed ({len(remaining)} remaining)")
    return True


def execute_reminder(
    store: ReminderStore,
    reminder_id: str,
    title: str,
    message: str,
    delay_ms: int,
    notifier: Optional[Notifier] = None,
    sleep=time.sleep
) -> None:
    """Run one reminder to completion: sleep, fire, retire.

    A cancelled reminder still fires here; cancellation only removes the
    record, which makes the retire step a no-op.
    """
    logger.info(f"Worker: armed reminder {reminder_id} ({sanitize_for_log(title)}), delay {delay_ms}ms")
    remaining = max(0, delay_ms) / 1000
    while remaining > 0:
        chunk = min(remaining, MAX_SLEEP_SECONDS)
        sleep(chunk)
        remaining -= chunk

    logger.info(f"Worker: delay elapsed, firing reminder {reminder_id}")
    notify(title, message, notifier)

    try:
        retire_reminder(store, reminder_id)
    except OSError as e:
        logger.error(f"Worker: failed to remove reminder {reminder_id} from store: {e}")

    logger.info(f"Worker: reminder {reminder_id} complete")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="reminders.executor",
        description="Deliver a single reminder after a delay"
    )
    parser.add_argument("store", type=Path, help="Reminders file")
    parser.add_argument("reminder_id")
    parser.add_argument("title")
    parser.add_argument("message")
    parser.add_argument("delay_ms", type=int, help="Milliseconds to wait before firing")
    parser.add_argument("log_file", type=Path, help="Where the worker logs")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point."""
    args = parse_args(argv)
    setup_logging(log_file=args.log_file)

    execute_reminder(
        ReminderStore(args.store),
        args.reminder_id,
        args.title,
        args.message,
        args.delay_ms,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
