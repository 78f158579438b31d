from __future__ import annotations

import base64
import logging
from email.message import EmailMessage

import httpx

from booking_engine.application.exceptions import CalendarUpstreamError
from booking_engine.application.ports.notification import NotificationPort
from booking_engine.domain.entities.host import HostAccount
from booking_engine.infrastructure.google.token_provider import GoogleTokenProvider


class GmailNotifier(NotificationPort):
    """Sends plain-text mail from the host's own Gmail account."""

    def __init__(self, client: httpx.Client, tokens: GoogleTokenProvider, base_url: str) -> None:
        self._client = client
        self._tokens = tokens
        self._base_url = base_url.rstrip("/")
        self._logger = logging.getLogger(__name__)

    def send(self, account: HostAccount, to: str, subject: str, body: str) -> None:
        if not account.calendar_connected:
            self._logger.info("Host mail not connected; skipping send", extra={"host_id": account.id})
            return

        message = EmailMessage()
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)
        raw = base64.urlsafe_b64encode(message.as_bytes()).decode("ascii").rstrip("=")

        headers = {"Authorization": f"Bearer {self._tokens.access_token(account)}"}
        try:
            response = self._client.post(
                f"{self._base_url}/users/me/messages/send",
                json={"raw": raw},
                headers=headers,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise CalendarUpstreamError(f"Gmail send failed: {e}") from e

        self._logger.info("Confirmation sent", extra={"host_id": account.id, "subject": subject})
