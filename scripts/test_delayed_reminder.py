#!/usr/bin/env python3
"""
Delayed reminder smoke test

Run: python scripts/test_delayed_reminder.py [delay_ms]

Spawns a real detached delivery worker with a short delay (3 seconds by
default), waits for it, then prints the worker log lines for the test reminder.
A native notification should appear on screen.
"""

import sys
import time
from datetime import datetime, timedelta
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import config
from reminders.models import Reminder
from reminders.parser import now_ms
from reminders.scheduler import spawn_worker


def main() -> int:
    delay_ms = int(sys.argv[1]) if len(sys.argv) > 1 else 3000
    reminder = Reminder(
        id=f"test_{now_ms()}",
        title="Test reminder - delayed",
        message=f"This reminder fired after {delay_ms / 1000:g} seconds",
        trigger_time=now_ms() + delay_ms,
        created=now_ms(),
    )

    print(f"Reminders file: {config.REMINDERS_FILE}")
    print(f"Log file:       {config.WORKER_LOG_FILE}")
    print(f"Reminder ID:    {reminder.id}")
    print(f"Expected at:    {(datetime.now() + timedelta(milliseconds=delay_ms)).isoformat()}\n")

    pid = spawn_worker(config.REMINDERS_FILE, reminder, delay_ms, config.WORKER_LOG_FILE)
    if pid is None:
        print("[FAIL] Worker could not be spawned")
        return 1
    print(f"Worker spawned with PID {pid}")

    wait_seconds = delay_ms / 1000 + 1.5
    print(f"Waiting {wait_seconds:g} seconds for the worker to finish...\n")
    time.sleep(wait_seconds)

    print("--- Worker log ---")
    if not config.WORKER_LOG_FILE.exists():
        print("No log file found")
        return 1

    lines = config.WORKER_LOG_FILE.read_text(encoding="utf-8").splitlines()
    relevant = [line for line in lines if reminder.id in line]
    print("\n".join(relevant) or "(no lines for this reminder)")

    fired = any("complete" in line for line in relevant)
    print(f"\n{'[PASS]' if fired else '[FAIL]'} Worker {'completed' if fired else 'did not complete'}")
    return 0 if fired else 1


if __name__ == "__main__":
    sys.exit(main())
