"""Busy calendar deployment rule.

Denies deployments on days the owner's Google Calendar shows they are busy
all day, for example on holiday or out of the office.
"""

import logging
from datetime import UTC, date, datetime, time, timedelta
from typing import Any, Optional
from urllib.parse import quote

from trustgate.cache import ApplicationCache
from trustgate.config import GoogleOptions
from trustgate.http import HttpClient
from trustgate.models import WebhookEvent
from trustgate.rules.base import DeploymentRule

logger = logging.getLogger(__name__)

CACHE_EXPIRATION = timedelta(hours=3)
CACHE_TAGS = ("all", "calendar")
ONE_DAY = timedelta(days=1)

EVENT_FIELDS = "items(start,end,summary,transparency,eventType)"


class GoogleCalendarClient(HttpClient):
    """Minimal client for the Google Calendar events API."""

    def __init__(
        self,
        access_token: str = "",
        base_url: str = "https://www.googleapis.com/calendar/v3",
        timeout: float = 10.0,
    ) -> None:
        super().__init__(base_url=base_url, timeout=timeout)
        self.access_token = access_token

    async def list_events(
        self,
        calendar_id: str,
        time_min: datetime,
        time_max: datetime,
    ) -> list[dict[str, Any]]:
        """List the single events of a calendar in a time range.

        Recurring events are expanded into their instances.

        Returns:
            The events, which may be empty.
        """
        # https://developers.google.com/calendar/api/v3/reference/events/list
        headers = {}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"

        body = await self._get_json(
            f"/calendars/{quote(calendar_id, safe='')}/events",
            params={
                "fields": EVENT_FIELDS,
                "singleEvents": "true",
                "timeMin": time_min.isoformat(),
                "timeMax": time_max.isoformat(),
            },
            headers=headers,
        )

        return (body or {}).get("items") or []


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def is_all_day(event: dict[str, Any]) -> bool:
    start = event.get("start") or {}
    end = event.get("end") or {}

    if start.get("date") and end.get("date"):
        return True

    start_time = _parse_datetime(start.get("dateTime"))
    end_time = _parse_datetime(end.get("dateTime"))

    return start_time is not None and end_time is not None and end_time - start_time == ONE_DAY


def is_busy(event: dict[str, Any]) -> bool:
    """Return whether an event means the calendar owner is busy all day.

    Only all-day events count. They are busy unless marked as transparent
    ("free"), although out-of-office events are always busy.
    """
    if not is_all_day(event):
        return False

    return event.get("transparency") != "transparent" or event.get("eventType") == "outOfOffice"


class CalendarRule(DeploymentRule):
    """Denies deployments when a configured calendar is busy today (UTC)."""

    name = "Not-Busy-Calendar"

    def __init__(
        self,
        options: GoogleOptions,
        client: GoogleCalendarClient,
        cache: ApplicationCache,
    ) -> None:
        self.options = options
        self.client = client
        self.cache = cache

    async def evaluate(self, event: WebhookEvent) -> bool:
        if not self.options.calendar_ids:
            return True

        today = self.cache.clock().date()

        for calendar_id in self.options.calendar_ids:
            events = await self._get_events(calendar_id, today)
            busy = next((item for item in events if is_busy(item)), None)

            if busy is not None:
                logger.info(
                    "Deployment is not approved as calendar suggests owner is busy all day with %s event.",
                    busy.get("summary") or "unknown",
                )
                return False

        return True

    async def _get_events(self, calendar_id: str, today: date) -> list[dict[str, Any]]:
        time_min = datetime.combine(today, time.min, tzinfo=UTC)
        time_max = time_min + ONE_DAY

        return await self.cache.get_or_create(
            f"calendar:{today.isoformat()}:{calendar_id}",
            lambda: self.client.list_events(calendar_id, time_min, time_max),
            CACHE_EXPIRATION,
            CACHE_TAGS,
        )
