from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from booking_engine.application.ports.busy_interval_provider import BusyIntervalProviderPort
from booking_engine.domain.entities.busy_interval import BusyInterval
from booking_engine.domain.entities.host import HostAccount

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BusyFetchOk:
    intervals: list[BusyInterval] = field(default_factory=list)
    degraded: bool = False


@dataclass(frozen=True)
class BusyFetchDegraded:
    reason: str
    degraded: bool = True

    @property
    def intervals(self) -> list[BusyInterval]:
        # An unreachable calendar counts as free.
        return []


BusyFetchResult = BusyFetchOk | BusyFetchDegraded


def fetch_busy_intervals(
    provider: BusyIntervalProviderPort,
    account: HostAccount,
    range_start: datetime,
    range_end: datetime,
) -> BusyFetchResult:
    try:
        intervals = provider.get_free_busy(account, range_start, range_end)
    except Exception as e:
        logger.warning(
            "Busy interval fetch failed; treating host as free",
            extra={"host_id": account.id, "reason": str(e)},
        )
        return BusyFetchDegraded(reason=str(e) or type(e).__name__)
    return BusyFetchOk(intervals=list(intervals))
