"""Native OS notifications.

One variant per platform, picked once per process:
- macOS: blocking alert dialog via osascript
- Windows: toast notification via PowerShell
- Linux: critical-urgency desktop notification via notify-send
"""

import platform
import subprocess
from abc import ABC, abstractmethod
from typing import Optional
from xml.sax.saxutils import escape as xml_escape

import config
from logger import logger
from utils import sanitize_for_log
from .errors import NotificationRenderError


class Notifier(ABC):
    """Displays an alert. render() raises NotificationRenderError on failure."""

    name = "base"

    @abstractmethod
    def render(self, title: str, message: str) -> None:
        pass

    def _run(self, cmd: list[str], timeout: Optional[int]) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
        except FileNotFoundError as e:
            raise NotificationRenderError(f"{cmd[0]} not found") from e
        except subprocess.TimeoutExpired as e:
            raise NotificationRenderError(f"{cmd[0]} timed out after {timeout}s") from e
        except OSError as e:
            raise NotificationRenderError(f"{cmd[0]} failed to start: {e}") from e


def _applescript_string(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _powershell_literal(text: str) -> str:
    # Contents of an @"..."@ here-string are expanded: neutralise backticks and $
    return xml_escape(text).replace("`", "``").replace("$", "`$")


class AlertDialogNotifier(Notifier):
    """macOS dialog. Blocks until the user dismisses it or it gives up."""

    name = "alert"

    def __init__(self, button: str = "OK", give_up_seconds: int = 0):
        self.button = button
        self.give_up_seconds = give_up_seconds

    def build_script(self, title: str, message: str) -> str:
        button = _applescript_string(self.button)
        script = (
            f"display dialog {_applescript_string(message)} "
            f"with title {_applescript_string(title)} "
            f"with icon caution buttons {{{button}}} default button {button}"
        )
        if self.give_up_seconds > 0:
            script += f" giving up after {self.give_up_seconds}"
        return script

    def render(self, title: str, message: str) -> None:
        result = self._run(["osascript", "-e", self.build_script(title, message)], timeout=None)
        if result.returncode != 0:
            # Dismissed with Cmd-. or closed by the system; the alert was shown
            logger.debug(f"Alert dialog returned {result.returncode}: {result.stderr.strip()}")


class ToastNotifier(Notifier):
    """Windows toast (ToastText02 template)."""

    name = "toast"

    def __init__(self, app_id: str = "ReminderSkill", timeout: int = 10):
        self.app_id = app_id
        self.timeout = timeout

    def build_script(self, title: str, message: str) -> str:
        app_id = self.app_id.replace("'", "''")
        return f'''
[Windows.UI.Notifications.ToastNotificationManager, Windows.UI.Notifications, ContentType = WindowsRuntime] | Out-Null
[Windows.Data.Xml.Dom.XmlDocument, Windows.Data.Xml.Dom.XmlDocument, ContentType = WindowsRuntime] | Out-Null

$template = @"
<toast>
    <visual>
        <binding template="ToastText02">
            <text id="1">{_powershell_literal(title)}</text>
            <text id="2">{_powershell_literal(message)}</text>
        </binding>
    </visual>
</toast>
"@

$xml = New-Object Windows.Data.Xml.Dom.XmlDocument
$xml.LoadXml($template)
$toast = [Windows.UI.Notifications.ToastNotification]::new($xml)
[Windows.UI.Notifications.ToastNotificationManager]::CreateToastNotifier('{app_id}').Show($toast)
'''.strip()

    def render(self, title: str, message: str) -> None:
        cmd = ["powershell", "-NoProfile", "-NonInteractive", "-Command", self.build_script(title, message)]
        result = self._run(cmd, timeout=self.timeout)
        if result.returncode != 0:
            raise NotificationRenderError(f"powershell exited {result.returncode}: {result.stderr.strip()}")


class DesktopNotifier(Notifier):
    """Linux notify-send with critical urgency (stays until dismissed)."""

    name = "desktop"

    def __init__(self, app_name: str = "ReminderSkill", timeout: int = 10):
        self.app_name = app_name
        self.timeout = timeout

    def render(self, title: str, message: str) -> None:
        cmd = ["notify-send", "--urgency=critical", f"--app-name={self.app_name}", "--", title, message]
        result = self._run(cmd, timeout=self.timeout)
        if result.returncode != 0:
            raise NotificationRenderError(f"notify-send exited {result.returncode}: {result.stderr.strip()}")


class LogNotifier(Notifier):
    """Fallback for platforms without a native variant."""

    name = "log"

    def render(self, title: str, message: str) -> None:
        logger.warning(f"No native notifications on {platform.system()}: {sanitize_for_log(title)}")


def create_notifier(system: Optional[str] = None) -> Notifier:
    """Pick the notifier for an OS name as returned by platform.system()."""
    system = system or platform.system()
    if system == "Darwin":
        return AlertDialogNotifier(config.ALERT_BUTTON, config.ALERT_GIVE_UP_SECONDS)
    if system == "Windows":
        return ToastNotifier(config.APP_ID, config.NOTIFY_TIMEOUT)
    if system == "Linux":
        return DesktopNotifier(config.APP_ID, config.NOTIFY_TIMEOUT)
    return LogNotifier()


_notifier: Optional[Notifier] = None


def get_notifier() -> Notifier:
    """The notifier for this host, created on first use."""
    global _notifier
    if _notifier is None:
        _notifier = create_notifier()
        logger.debug(f"Using {_notifier.name} notifier on {platform.system()}")
    return _notifier


def notify(title: str, message: str, notifier: Optional[Notifier] = None) -> bool:
    """Show a notification. Failures are logged, never raised.

    Returns:
        True if the notifier reported success
    """
    notifier = notifier or get_notifier()
    logger.info(f"Showing {notifier.name} notification: {sanitize_for_log(title)}")
    try:
        notifier.render(title, message)
        return True
    except NotificationRenderError as e:
        logger.error(f"Failed to show notification {sanitize_for_log(title)}: {e}")
        return False
