from __future__ import annotations

from abc import ABC, abstractmethod

from booking_engine.domain.entities.host import HostAccount


class NotificationPort(ABC):
    @abstractmethod
    def send(self, account: HostAccount, to: str, subject: str, body: str) -> None:
        """Send a message on behalf of the host. Callers treat failures as non-fatal."""
        raise NotImplementedError
