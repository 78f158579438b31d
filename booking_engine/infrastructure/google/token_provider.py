from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

import httpx

from booking_engine.application.exceptions import CalendarUpstreamError
from booking_engine.domain.entities.host import HostAccount

TokenSaver = Callable[[str, str, datetime], None]
REFRESH_MARGIN = timedelta(minutes=5)


class GoogleTokenProvider:
    """Hands out a usable access token for a host, refreshing it shortly before expiry."""

    def __init__(
        self,
        client: httpx.Client,
        token_url: str,
        client_id: str | None,
        client_secret: str | None,
        on_refresh: TokenSaver | None = None,
    ) -> None:
        self._client = client
        self._token_url = token_url
        self._client_id = client_id
        self._client_secret = client_secret
        self._on_refresh = on_refresh
        self._logger = logging.getLogger(__name__)

    def access_token(self, account: HostAccount) -> str:
        if not account.google_access_token:
            raise CalendarUpstreamError("Google account not connected")

        expires_at = account.token_expires_at
        if expires_at is None or expires_at > datetime.now(timezone.utc) + REFRESH_MARGIN:
            return account.google_access_token
        if not account.google_refresh_token:
            return account.google_access_token
        return self._refresh(account)

    def _refresh(self, account: HostAccount) -> str:
        if not (self._client_id and self._client_secret):
            raise CalendarUpstreamError("GOOGLE_CLIENT_ID/GOOGLE_CLIENT_SECRET are required to refresh tokens")

        self._logger.info("Refreshing Google access token", extra={"host_id": account.id})
        try:
            response = self._client.post(
                self._token_url,
                data={
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                    "refresh_token": account.google_refresh_token,
                    "grant_type": "refresh_token",
                },
            )
            response.raise_for_status()
            tokens = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise CalendarUpstreamError(f"Token refresh failed: {e}") from e

        access_token = tokens.get("access_token")
        if not access_token:
            raise CalendarUpstreamError("No access token in refresh response")

        expires_at = datetime.now(timezone.utc) + timedelta(seconds=int(tokens.get("expires_in", 3600)))
        if self._on_refresh is not None:
            self._on_refresh(account.id, access_token, expires_at)
        return access_token
