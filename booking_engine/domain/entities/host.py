from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class HostAccount:
    id: str
    name: str | None = None
    email: str | None = None
    google_access_token: str | None = None
    google_refresh_token: str | None = None
    token_expires_at: datetime | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.id

    @property
    def calendar_connected(self) -> bool:
        return bool(self.google_access_token and self.google_refresh_token)
