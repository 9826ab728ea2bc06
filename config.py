"""Global configuration for the reminder skill."""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# Remote coordination service (CCCore)
CCCORE_HOST = os.getenv("CCCORE_HOST", "localhost")
CCCORE_HTTP_PORT = int(os.getenv("CCCORE_HTTP_PORT", "3579"))
CCCORE_TIMEOUT_MS = int(os.getenv("CCCORE_TIMEOUT_MS", "500"))

# Persistence
DATA_DIR = Path(os.getenv("REMINDER_DATA_DIR", str(Path.home() / ".reminder-skill-data")))
DATA_DIR.mkdir(parents=True, exist_ok=True)
REMINDERS_FILE = DATA_DIR / "reminders.json"

# Logging
LOG_DIR = DATA_DIR / "logs"
LOG_DIR.mkdir(parents=True, exist_ok=True)
WORKER_LOG_FILE = LOG_DIR / "reminder-worker.log"
DEBUG = os.getenv("REMINDER_DEBUG", "").lower() in ("1", "true", "yes")

# Notifications
APP_ID = os.getenv("REMINDER_APP_ID", "ReminderSkill")
ALERT_BUTTON = os.getenv("REMINDER_ALERT_BUTTON", "OK")
ALERT_GIVE_UP_SECONDS = int(os.getenv("REMINDER_ALERT_GIVE_UP", "0"))  # 0 = wait for the user
NOTIFY_TIMEOUT = int(os.getenv("NOTIFY_TIMEOUT", "10"))
