from __future__ import annotations

from datetime import datetime
from typing import Iterable

from booking_engine.domain.entities.busy_interval import BusyInterval
from booking_engine.domain.entities.slot import SlotCandidate, SlotGrid


def conflicts(candidate: SlotCandidate, busy: Iterable[BusyInterval]) -> bool:
    # Half-open on both sides: a slot ending exactly when a busy range starts is free.
    return any(interval.overlaps(candidate.start, candidate.end) for interval in busy)


def filter_conflicts(grid: SlotGrid, busy: Iterable[BusyInterval], now: datetime) -> SlotGrid:
    """Drop past and conflicting candidates. Dates left without candidates are removed."""
    busy = list(busy)
    result: SlotGrid = {}

    for day, candidates in grid.items():
        free = [c for c in candidates if c.start > now and not conflicts(c, busy)]
        if free:
            result[day] = free

    return result
