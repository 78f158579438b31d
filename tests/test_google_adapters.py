"""
Google Calendar / Gmail adapter tests over httpx.MockTransport.
"""

from __future__ import annotations

import base64
import json
from datetime import datetime, timedelta, timezone
from email import message_from_bytes

import httpx
import pytest

from booking_engine.application.exceptions import CalendarUpstreamError
from booking_engine.application.ports.calendar import CalendarEventRequest
from booking_engine.domain.entities.host import HostAccount
from booking_engine.infrastructure.calendar.google_calendar import GoogleCalendar
from booking_engine.infrastructure.google.token_provider import GoogleTokenProvider
from booking_engine.infrastructure.notifications.gmail_notifier import GmailNotifier

CALENDAR_URL = "https://calendar.test/calendar/v3"
TOKEN_URL = "https://oauth.test/token"

CONNECTED = HostAccount(
    id="host-1",
    name="Ada Host",
    google_access_token="live-token",
    google_refresh_token="refresh-token",
    token_expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
)


def _calendar(handler, on_refresh=None) -> GoogleCalendar:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    tokens = GoogleTokenProvider(client, TOKEN_URL, "client-id", "client-secret", on_refresh=on_refresh)
    return GoogleCalendar(client, tokens, CALENDAR_URL, "America/New_York")


def test_free_busy_parses_primary_calendar():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "calendars": {
                    "primary": {
                        "busy": [
                            {"start": "2026-10-19T13:15:00Z", "end": "2026-10-19T13:45:00Z"},
                            {"start": "2026-10-19T15:00:00-04:00", "end": "2026-10-19T16:00:00-04:00"},
                            {"start": None, "end": "2026-10-19T17:00:00Z"},
                        ]
                    }
                }
            },
        )

    start = datetime(2026, 10, 19, 4, 0, tzinfo=timezone.utc)
    intervals = _calendar(handler).get_free_busy(CONNECTED, start, start + timedelta(days=1))

    assert [(i.start, i.end) for i in intervals] == [
        (datetime(2026, 10, 19, 13, 15, tzinfo=timezone.utc), datetime(2026, 10, 19, 13, 45, tzinfo=timezone.utc)),
        (datetime(2026, 10, 19, 19, 0, tzinfo=timezone.utc), datetime(2026, 10, 19, 20, 0, tzinfo=timezone.utc)),
    ]
    [request] = seen
    assert request.url == f"{CALENDAR_URL}/freeBusy"
    assert request.headers["Authorization"] == "Bearer live-token"
    body = json.loads(request.content)
    assert body["timeMin"] == "2026-10-19T04:00:00Z"
    assert body["items"] == [{"id": "primary"}]


def test_free_busy_for_disconnected_host_makes_no_request():
    def handler(request):
        raise AssertionError("no request expected")

    start = datetime(2026, 10, 19, tzinfo=timezone.utc)
    assert _calendar(handler).get_free_busy(HostAccount(id="h"), start, start + timedelta(days=1)) == []


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"error": "backend"}),
        httpx.Response(200, json={"calendars": {"primary": {"errors": [{"reason": "notFound"}]}}}),
        httpx.Response(200, content=b"not json"),
    ],
)
def test_free_busy_failures_raise_upstream_error(response):
    start = datetime(2026, 10, 19, tzinfo=timezone.utc)

    with pytest.raises(CalendarUpstreamError):
        _calendar(lambda request: response).get_free_busy(CONNECTED, start, start + timedelta(days=1))


def test_free_busy_timeout_raises_upstream_error():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    start = datetime(2026, 10, 19, tzinfo=timezone.utc)
    with pytest.raises(CalendarUpstreamError):
        _calendar(handler).get_free_busy(CONNECTED, start, start + timedelta(days=1))


def test_create_event_requests_meet_link():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": "evt_123", "hangoutLink": "https://meet.google.com/abc-defg-hij"})

    start = datetime(2026, 10, 19, 13, 0, tzinfo=timezone.utc)
    result = _calendar(handler).create_event(
        CONNECTED,
        CalendarEventRequest(
            title="Intro Call - Grace",
            start=start,
            end=start + timedelta(minutes=30),
            attendees=["grace@example.com"],
            wants_video_link=True,
        ),
    )

    assert result.event_id == "evt_123"
    assert result.meeting_link == "https://meet.google.com/abc-defg-hij"
    [request] = seen
    assert request.url.path == "/calendar/v3/calendars/primary/events"
    assert request.url.params["conferenceDataVersion"] == "1"
    assert request.url.params["sendUpdates"] == "all"
    body = json.loads(request.content)
    assert body["start"] == {"dateTime": "2026-10-19T13:00:00Z", "timeZone": "America/New_York"}
    assert body["attendees"] == [{"email": "grace@example.com"}]
    assert body["conferenceData"]["createRequest"]["conferenceSolutionKey"] == {"type": "hangoutsMeet"}


def test_create_event_without_id_raises():
    start = datetime(2026, 10, 19, 13, 0, tzinfo=timezone.utc)
    calendar = _calendar(lambda request: httpx.Response(200, json={}))

    with pytest.raises(CalendarUpstreamError):
        calendar.create_event(CONNECTED, CalendarEventRequest(title="x", start=start, end=start + timedelta(minutes=30)))


def test_expiring_token_is_refreshed_and_saved():
    saved = []
    auth_headers = []

    def handler(request: httpx.Request) -> httpx.Response:
        if str(request.url) == TOKEN_URL:
            assert b"grant_type=refresh_token" in request.content
            return httpx.Response(200, json={"access_token": "fresh-token", "expires_in": 3600})
        auth_headers.append(request.headers["Authorization"])
        return httpx.Response(200, json={"calendars": {"primary": {"busy": []}}})

    expiring = HostAccount(
        id="host-1",
        google_access_token="stale-token",
        google_refresh_token="refresh-token",
        token_expires_at=datetime.now(timezone.utc) + timedelta(minutes=1),
    )
    start = datetime(2026, 10, 19, tzinfo=timezone.utc)

    _calendar(handler, on_refresh=lambda *args: saved.append(args)).get_free_busy(
        expiring, start, start + timedelta(days=1)
    )

    assert auth_headers == ["Bearer fresh-token"]
    [(host_id, token, expires_at)] = saved
    assert (host_id, token) == ("host-1", "fresh-token")
    assert expires_at > datetime.now(timezone.utc)


def test_failed_refresh_raises_upstream_error():
    expired = HostAccount(
        id="host-1",
        google_access_token="stale",
        google_refresh_token="revoked",
        token_expires_at=datetime.now(timezone.utc) - timedelta(hours=1),
    )
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(400, json={"error": "invalid_grant"})))
    tokens = GoogleTokenProvider(client, TOKEN_URL, "client-id", "client-secret")

    with pytest.raises(CalendarUpstreamError):
        tokens.access_token(expired)


def test_gmail_notifier_sends_raw_message():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": "msg_1"})

    client = httpx.Client(transport=httpx.MockTransport(handler))
    tokens = GoogleTokenProvider(client, TOKEN_URL, "client-id", "client-secret")
    notifier = GmailNotifier(client, tokens, "https://gmail.test/gmail/v1")

    notifier.send(CONNECTED, "grace@example.com", "Confirmed: Intro Call", "See you soon")

    [request] = seen
    assert request.url.path == "/gmail/v1/users/me/messages/send"
    raw = json.loads(request.content)["raw"]
    message = message_from_bytes(base64.urlsafe_b64decode(raw + "=" * (-len(raw) % 4)))
    assert message["To"] == "grace@example.com"
    assert message["Subject"] == "Confirmed: Intro Call"
    assert "See you soon" in message.get_payload()


def test_gmail_notifier_skips_disconnected_host():
    def handler(request):
        raise AssertionError("no request expected")

    client = httpx.Client(transport=httpx.MockTransport(handler))
    notifier = GmailNotifier(client, GoogleTokenProvider(client, TOKEN_URL, None, None), "https://gmail.test/gmail/v1")

    notifier.send(HostAccount(id="h"), "grace@example.com", "s", "b")
