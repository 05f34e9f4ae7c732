from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import time


@dataclass(frozen=True)
class BusinessHours:
    open: time
    close: time


# Python weekday numbering: Monday=0 ... Sunday=6
DEFAULT_WEEKLY_HOURS: dict[int, BusinessHours | None] = {
    0: BusinessHours(open=time(10, 0), close=time(21, 0)),
    1: BusinessHours(open=time(10, 0), close=time(21, 0)),
    2: BusinessHours(open=time(10, 0), close=time(21, 0)),
    3: BusinessHours(open=time(10, 0), close=time(21, 0)),
    4: BusinessHours(open=time(10, 0), close=time(21, 0)),
    5: BusinessHours(open=time(10, 0), close=time(21, 0)),
    6: None,
}


@dataclass(frozen=True)
class CalendarModel:
    weekly_hours: dict[int, BusinessHours | None]
    slot_minutes: int = 60

    def hours_for(self, weekday: int) -> BusinessHours | None:
        return self.weekly_hours.get(weekday)

    def is_open(self, weekday: int) -> bool:
        return self.hours_for(weekday) is not None


def parse_weekly_hours(raw: str | None) -> dict[int, BusinessHours | None]:
    """
    Build the weekly table from a JSON mapping such as
    {"0": ["10:00", "21:00"], "6": null}. Days missing from the mapping are closed.
    Returns the default table when raw is empty.
    """
    if not raw or not raw.strip():
        return dict(DEFAULT_WEEKLY_HOURS)

    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("Business hours must be a JSON object keyed by weekday")

    table: dict[int, BusinessHours | None] = {day: None for day in range(7)}
    for key, value in data.items():
        weekday = int(key)
        if weekday not in table:
            raise ValueError(f"Invalid weekday in business hours: {key}")
        if not value:
            continue
        open_str, close_str = value
        opens = time.fromisoformat(open_str)
        closes = time.fromisoformat(close_str)
        if closes <= opens:
            raise ValueError(f"Closing time must be after opening time for weekday {weekday}")
        table[weekday] = BusinessHours(open=opens, close=closes)
    return table
