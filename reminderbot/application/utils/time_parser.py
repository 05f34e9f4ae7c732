from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo


@dataclass(frozen=True)
class ParsedTime:
    hour: int
    minute: int = 0
    meridiem: str | None = None  # "am" | "pm" when literally typed


@dataclass(frozen=True)
class TimeMatch:
    slot: datetime
    fuzzy: bool = False


ParseStrategy = Callable[[str], "ParsedTime | None"]


def normalize_time_text(text: str) -> str:
    return re.sub(r"\s+", " ", text.strip().lower())


def _meridiem_in(text: str) -> str | None:
    if "pm" in text:
        return "pm"
    if "am" in text:
        return "am"
    return None


def _pattern_strategy(pattern: str) -> ParseStrategy:
    compiled = re.compile(pattern)

    def strategy(text: str) -> ParsedTime | None:
        match = compiled.match(text)
        if not match:
            return None
        hour = int(match.group("hour"))
        minute_raw = match.groupdict().get("minute")
        minute = int(minute_raw) if minute_raw else 0
        return ParsedTime(hour=hour, minute=minute, meridiem=_meridiem_in(text))

    strategy.__name__ = f"match_{pattern}"
    return strategy


# Order matters: first strategy that yields a value wins.
PARSE_STRATEGIES: tuple[ParseStrategy, ...] = (
    _pattern_strategy(r"^(?P<hour>\d{1,2})\s*(?:am|pm)$"),  # 2pm, 2 pm
    _pattern_strategy(r"^(?P<hour>\d{1,2}):(?P<minute>\d{2})\s*(?:am|pm)$"),  # 2:00pm
    _pattern_strategy(r"^(?P<hour>\d{1,2}):\s*(?:am|pm)$"),  # 2: pm
    _pattern_strategy(r"^(?P<hour>\d{1,2}):?$"),  # 2, 14, 6:
    _pattern_strategy(r"^(?P<hour>\d{1,2}):(?P<minute>\d{2})$"),  # 14:30
    _pattern_strategy(r"^(?P<hour>\d{1,2})[^\d]*$"),  # 6 o'clock
)


def parse_time_expression(
    text: str,
    strategies: Sequence[ParseStrategy] = PARSE_STRATEGIES,
) -> ParsedTime | None:
    normalized = normalize_time_text(text)
    for strategy in strategies:
        parsed = strategy(normalized)
        if parsed is None:
            continue
        if parsed.minute > 59 or parsed.hour > 23:
            return None
        return parsed
    return None


def candidate_hours(parsed: ParsedTime) -> list[int]:
    """Plausible 24-hour readings, in preference order."""
    hour = parsed.hour
    # 13-23 are already 24-hour, whatever meridiem follows them
    if parsed.meridiem == "pm":
        return [hour + 12 if hour < 12 else hour]
    if parsed.meridiem == "am":
        return [0 if hour == 12 else hour]
    if 1 <= hour <= 11:
        return [hour, hour + 12]
    if hour == 12:
        return [12, 0]
    return [hour]


class TimeSlotResolver:
    """Maps a typed time onto one of the slots offered to a contact."""

    def __init__(self, timezone: ZoneInfo, tolerance_minutes: int = 15) -> None:
        self._timezone = timezone
        self._tolerance = timedelta(minutes=tolerance_minutes)

    def resolve(self, text: str, offered: Sequence[datetime]) -> TimeMatch | None:
        parsed = parse_time_expression(text)
        if parsed is None:
            return None
        return self.match(parsed, offered)

    def match(self, parsed: ParsedTime, offered: Sequence[datetime]) -> TimeMatch | None:
        hours = candidate_hours(parsed)

        for slot in offered:
            local = slot.astimezone(self._timezone)
            if local.hour in hours and local.minute == parsed.minute:
                return TimeMatch(slot=slot)

        for slot in offered:
            local = slot.astimezone(self._timezone)
            for hour in hours:
                target = local.replace(hour=hour, minute=parsed.minute)
                if abs(local - target) <= self._tolerance:
                    return TimeMatch(slot=slot, fuzzy=True)

        return None
