from __future__ import annotations

import re
from datetime import date, datetime, time

from booking_engine.application.exceptions import BookingValidationError

HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def parse_hhmm(value: str, field_name: str = "time") -> time:
    match = HHMM_PATTERN.match(value.strip()) if value else None
    if not match:
        raise BookingValidationError(f"{field_name} must be in HH:MM format")
    return time(hour=int(match.group(1)), minute=int(match.group(2)))


def parse_iso_date(value: str, field_name: str = "date") -> date:
    try:
        return date.fromisoformat(value.strip())
    except (ValueError, AttributeError):
        raise BookingValidationError(f"{field_name} must be in YYYY-MM-DD format")


def format_hhmm(value: time | datetime) -> str:
    return value.strftime("%H:%M")
