from __future__ import annotations

import logging

from booking_engine.application.ports.notification import NotificationPort
from booking_engine.domain.entities.host import HostAccount


class MockNotifier(NotificationPort):
    def __init__(self) -> None:
        self.sent: list[dict[str, str]] = []
        self._logger = logging.getLogger(__name__)

    def send(self, account: HostAccount, to: str, subject: str, body: str) -> None:
        self.sent.append({"host_id": account.id, "to": to, "subject": subject, "body": body})
        self._logger.info("Mock notification sent", extra={"host_id": account.id, "to": to, "subject": subject})
