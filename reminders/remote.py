"""Client for the remote coordination service (CCCore).

When the peer is reachable it owns the reminder: it persists and delivers it,
and the local store is not touched.
"""

from typing import Optional
from urllib.parse import quote

import httpx

from logger import logger
from utils import sanitize_for_log
from .backend import ReminderBackend
from .errors import RemoteRejectedError, RemoteUnavailableError
from .models import CancelOutcome, CreateReceipt, ReminderView


class RemoteReminders(ReminderBackend):
    """Reminder operations over the peer's REST API."""

    def __init__(self, host: str, port: int, timeout_ms: int = 500):
        self.base_url = f"http://{host}:{port}"
        self.timeout = timeout_ms / 1000

    async def _request(self, method: str, path: str, json: Optional[dict] = None) -> dict:
        """Send one request and return the decoded reply.

        Raises:
            RemoteUnavailableError: Connection failure, timeout, or a non-JSON body
            RemoteRejectedError: The peer replied with ok=false
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(method, f"{self.base_url}{path}", json=json)
                data = response.json()
        except httpx.TimeoutException as e:
            raise RemoteUnavailableError(f"{method} {path} timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise RemoteUnavailableError(f"{method} {path} failed: {e}") from e
        except ValueError as e:
            raise RemoteUnavailableError(f"{method} {path} returned invalid JSON") from e

        if not isinstance(data, dict):
            raise RemoteUnavailableError(f"{method} {path} returned unexpected payload")

        if not data.get("ok"):
            raise RemoteRejectedError(data.get("error"), bool(data.get("fallback")))

        return data

    async def create(self, title: str, message: str, trigger_time: int) -> CreateReceipt:
        logger.info(f"Sending reminder to CCCore: {sanitize_for_log(title)} at {trigger_time}")
        data = await self._request(
            "POST",
            "/api/reminder",
            json={"title": title, "message": message, "triggerTime": trigger_time},
        )

        payload = data.get("data")
        reminder_id = payload.get("id") if isinstance(payload, dict) else None
        logger.info(f"Reminder created via CCCore (id={reminder_id})")
        return CreateReceipt(title, message, trigger_time, reminder_id=reminder_id, via="remote")

    async def list_active(self) -> list[ReminderView]:
        data = await self._request("GET", "/api/reminders")

        payload = data.get("data") or {}
        try:
            reminders = [
                ReminderView(
                    id=str(r["id"]),
                    title=str(r["title"]),
                    message=str(r["message"]),
                    trigger_time=int(r["triggerTime"]),
                    time_left=int(r["timeLeft"]),
                )
                for r in payload.get("reminders") or []
            ]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise RemoteUnavailableError(f"Malformed reminder list from CCCore: {e}") from e

        logger.info(f"Got {len(reminders)} reminders from CCCore")
        return reminders

    async def cancel(self, reminder_id: str) -> CancelOutcome:
        logger.info(f"Cancelling reminder via CCCore: {reminder_id}")
        await self._request("DELETE", f"/api/reminder/{quote(reminder_id, safe='')}")
        return CancelOutcome(reminder_id, cancelled=True, via="remote")
