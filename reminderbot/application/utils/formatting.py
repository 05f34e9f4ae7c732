from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime
from zoneinfo import ZoneInfo


def format_time(value: datetime, timezone: ZoneInfo) -> str:
    """2:00 PM"""
    local = value.astimezone(timezone)
    return f"{local.hour % 12 or 12}:{local.minute:02d} {'PM' if local.hour >= 12 else 'AM'}"


def format_date_long(value: date) -> str:
    """Monday, March 4, 2024"""
    return f"{value.strftime('%A, %B')} {value.day}, {value.year}"


def format_date_short(value: date) -> str:
    """Monday, March 4"""
    return f"{value.strftime('%A, %B')} {value.day}"


def format_datetime_long(value: datetime, timezone: ZoneInfo) -> str:
    """Monday, March 4, 2024 at 2:00 PM"""
    local = value.astimezone(timezone)
    return f"{format_date_long(local.date())} at {format_time(local, timezone)}"


def format_slot_list(slots: Sequence[datetime], timezone: ZoneInfo) -> str:
    return ", ".join(format_time(slot, timezone) for slot in slots)


def format_date_options(dates: Sequence[date]) -> str:
    return "\n".join(f"{index}. {format_date_long(day)}" for index, day in enumerate(dates, start=1))
