from __future__ import annotations

from dataclasses import dataclass
from datetime import time


@dataclass(frozen=True)
class AvailabilityRule:
    day_of_week: int  # 0=Sunday .. 6=Saturday
    start_time: time
    end_time: time
    timezone: str
    active: bool = True

    def matches(self, weekday: int) -> bool:
        return self.active and self.day_of_week == weekday


def sunday_based_weekday(python_weekday: int) -> int:
    """Map datetime.weekday() (Monday=0) onto the Sunday=0 convention used by rules."""
    return (python_weekday + 1) % 7
