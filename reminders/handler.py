"""Text reports for the reminder tools."""

from datetime import datetime

from logger import logger
from .dispatcher import Dispatcher
from .errors import InvalidTimeFormatError
from .models import ReminderView
from .parser import ACCEPTED_FORMATS, HOUR_MS, MINUTE_MS


def format_trigger_time(trigger_time: int) -> str:
    """Local wall-clock time for a trigger time in ms."""
    try:
        return datetime.fromtimestamp(trigger_time / 1000).strftime("%Y-%m-%d %H:%M:%S")
    except (ValueError, OverflowError, OSError):
        return "Invalid Date"


def format_time_left(time_left: int) -> str:
    """Remaining time as "<hours>h <minutes>m"."""
    time_left = max(0, time_left)
    hours = time_left // HOUR_MS
    minutes = (time_left % HOUR_MS) // MINUTE_MS
    return f"{hours}h {minutes}m"


def format_reminder(reminder: ReminderView) -> str:
    return (
        f"• {reminder.title}\n"
        f"  ID: {reminder.id}\n"
        f"  Message: {reminder.message}\n"
        f"  Time: {format_trigger_time(reminder.trigger_time)}\n"
        f"  Time left: {format_time_left(reminder.time_left)}"
    )


async def create_reminder(dispatcher: Dispatcher, title: str, message: str, time: str) -> str:
    """Handle create_reminder. Bad input and storage failures become error text."""
    try:
        receipt = await dispatcher.create(title, message, time)
    except InvalidTimeFormatError as e:
        return f'Error: Invalid time format "{e.expression}". Use {ACCEPTED_FORMATS}'
    except OSError as e:
        logger.error(f"Failed to save reminder: {e}")
        return f"Error: Failed to save reminder: {e}"

    lines = ["✅ Reminder created successfully!", ""]
    if receipt.reminder_id:
        lines.append(f"ID: {receipt.reminder_id}")
    lines += [
        f"Title: {receipt.title}",
        f"Message: {receipt.message}",
        f"Scheduled for: {format_trigger_time(receipt.trigger_time)}",
        "",
    ]
    if receipt.via == "remote":
        lines.append("The reminder service will show a notification at the scheduled time.")
    else:
        lines.append("A system notification will appear at the scheduled time.")
    return "\n".join(lines)


async def list_reminders(dispatcher: Dispatcher) -> str:
    """Handle list_reminders."""
    try:
        reminders = await dispatcher.list_active()
    except OSError as e:
        logger.error(f"Failed to read reminders: {e}")
        return f"Error: Failed to read reminders: {e}"

    if not reminders:
        return "No active reminders."

    body = "\n\n".join(format_reminder(r) for r in reminders)
    return f"Active Reminders ({len(reminders)}):\n\n{body}"


async def cancel_reminder(dispatcher: Dispatcher, reminder_id: str) -> str:
    """Handle cancel_reminder. An unknown id is a normal not-found reply."""
    try:
        outcome = await dispatcher.cancel(reminder_id)
    except OSError as e:
        logger.error(f"Failed to cancel reminder {reminder_id}: {e}")
        return f"Error: Failed to cancel reminder: {e}"

    if outcome.cancelled:
        return f'✅ Reminder "{reminder_id}" cancelled successfully.'
    return f'Error: Reminder with ID "{reminder_id}" not found.'
