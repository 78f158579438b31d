from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from booking_engine.domain.entities.busy_interval import BusyInterval
from booking_engine.domain.entities.host import HostAccount


class BusyIntervalProviderPort(ABC):
    @abstractmethod
    def get_free_busy(self, account: HostAccount, range_start: datetime, range_end: datetime) -> list[BusyInterval]:
        """Externally booked ranges for the window. May raise CalendarUpstreamError."""
        raise NotImplementedError
