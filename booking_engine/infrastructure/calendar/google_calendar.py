from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

import httpx

from booking_engine.application.exceptions import CalendarUpstreamError
from booking_engine.application.ports.busy_interval_provider import BusyIntervalProviderPort
from booking_engine.application.ports.calendar import (
    CalendarEventPublisherPort,
    CalendarEventRequest,
    CalendarEventResult,
)
from booking_engine.domain.entities.busy_interval import BusyInterval
from booking_engine.domain.entities.host import HostAccount
from booking_engine.infrastructure.google.token_provider import GoogleTokenProvider


class GoogleCalendar(BusyIntervalProviderPort, CalendarEventPublisherPort):
    """
    Google Calendar v3 adapter (primary calendar).

    Contract guarantees:
    - get_free_busy returns list[BusyInterval] with timezone-aware bounds
    - create_event returns CalendarEventResult with the event id and Meet link
    - Raises:
        CalendarUpstreamError: timeouts, HTTP errors, unexpected payloads
    """

    def __init__(
        self,
        client: httpx.Client,
        tokens: GoogleTokenProvider,
        base_url: str,
        event_timezone: str,
    ) -> None:
        self._client = client
        self._tokens = tokens
        self._base_url = base_url.rstrip("/")
        self._event_timezone = event_timezone
        self._logger = logging.getLogger(__name__)

    def is_connected(self, account: HostAccount) -> bool:
        return account.calendar_connected

    def get_free_busy(self, account: HostAccount, range_start: datetime, range_end: datetime) -> list[BusyInterval]:
        if not account.calendar_connected:
            return []

        payload = {
            "timeMin": _rfc3339(range_start),
            "timeMax": _rfc3339(range_end),
            "items": [{"id": "primary"}],
        }
        data = self._post(account, "/freeBusy", payload)

        primary = (data.get("calendars") or {}).get("primary") or {}
        if primary.get("errors"):
            raise CalendarUpstreamError(f"freeBusy errors: {primary['errors']}")

        intervals: list[BusyInterval] = []
        for item in primary.get("busy", []) or []:
            start, end = item.get("start"), item.get("end")
            if not (isinstance(start, str) and isinstance(end, str)):
                continue
            try:
                intervals.append(BusyInterval(start=_parse_instant(start), end=_parse_instant(end)))
            except ValueError:
                self._logger.warning("Skipping unparsable busy range", extra={"host_id": account.id})
        return intervals

    def create_event(self, account: HostAccount, request: CalendarEventRequest) -> CalendarEventResult:
        body: dict[str, object] = {
            "summary": request.title,
            "description": request.description or "",
            "start": {"dateTime": _rfc3339(request.start), "timeZone": self._event_timezone},
            "end": {"dateTime": _rfc3339(request.end), "timeZone": self._event_timezone},
            "attendees": [{"email": email} for email in request.attendees],
        }
        if request.wants_video_link:
            body["conferenceData"] = {
                "createRequest": {
                    "requestId": f"meet-{uuid.uuid4().hex}",
                    "conferenceSolutionKey": {"type": "hangoutsMeet"},
                }
            }

        params = {
            "conferenceDataVersion": 1 if request.wants_video_link else 0,
            "sendUpdates": "all",
        }
        data = self._post(account, "/calendars/primary/events", body, params=params)

        event_id = data.get("id")
        if not event_id:
            raise CalendarUpstreamError("No event ID returned from Google Calendar")

        self._logger.info("Calendar event created", extra={"host_id": account.id, "event_id": event_id})
        return CalendarEventResult(event_id=str(event_id), meeting_link=data.get("hangoutLink"))

    def _post(
        self,
        account: HostAccount,
        path: str,
        payload: dict[str, object],
        params: dict[str, object] | None = None,
    ) -> dict:
        headers = {"Authorization": f"Bearer {self._tokens.access_token(account)}"}
        try:
            response = self._client.post(f"{self._base_url}{path}", json=payload, params=params, headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            self._logger.error(
                "Google Calendar request failed",
                extra={"host_id": account.id, "status": e.response.status_code, "path": path},
            )
            raise CalendarUpstreamError(f"Google Calendar returned {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise CalendarUpstreamError(f"Google Calendar request failed: {e}") from e

        if not isinstance(data, dict):
            raise CalendarUpstreamError("Google Calendar returned an unexpected payload")
        return data


def _rfc3339(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _parse_instant(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
