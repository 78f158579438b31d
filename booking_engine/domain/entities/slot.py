from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True)
class SlotCandidate:
    date: date
    start: datetime
    end: datetime

    @property
    def time_label(self) -> str:
        return self.start.strftime("%H:%M")


# date -> candidates sorted by start; dates without candidates are absent
SlotGrid = dict[date, list[SlotCandidate]]
