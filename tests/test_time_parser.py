"""
Tests for free-form time parsing and matching against offered slots.
"""

from __future__ import annotations

from conftest import TZ, at
from reminderbot.application.utils.time_parser import (
    ParsedTime,
    TimeSlotResolver,
    candidate_hours,
    parse_time_expression,
)


def _day_slots(*hours: int):
    return [at(2024, 3, 4, hour) for hour in hours]


def test_parse_accepted_formats():
    assert parse_time_expression("2pm") == ParsedTime(hour=2, minute=0, meridiem="pm")
    assert parse_time_expression("2 PM") == ParsedTime(hour=2, minute=0, meridiem="pm")
    assert parse_time_expression("2:30pm") == ParsedTime(hour=2, minute=30, meridiem="pm")
    assert parse_time_expression("6:pm") == ParsedTime(hour=6, minute=0, meridiem="pm")
    assert parse_time_expression("6:") == ParsedTime(hour=6, minute=0)
    assert parse_time_expression("14:00") == ParsedTime(hour=14, minute=0)
    assert parse_time_expression("  11am ") == ParsedTime(hour=11, minute=0, meridiem="am")
    assert parse_time_expression("6 o'clock") == ParsedTime(hour=6, minute=0)


def test_parse_rejects_out_of_range_and_garbage():
    assert parse_time_expression("25:00") is None
    assert parse_time_expression("10:75") is None
    assert parse_time_expression("tomorrow please") is None
    assert parse_time_expression("") is None


def test_candidate_hours_readings():
    assert candidate_hours(ParsedTime(hour=2, meridiem="pm")) == [14]
    assert candidate_hours(ParsedTime(hour=12, meridiem="pm")) == [12]
    assert candidate_hours(ParsedTime(hour=12, meridiem="am")) == [0]
    assert candidate_hours(ParsedTime(hour=6)) == [6, 18]
    assert candidate_hours(ParsedTime(hour=12)) == [12, 0]
    assert candidate_hours(ParsedTime(hour=14)) == [14]


def test_24_hour_input_matches_exactly():
    resolver = TimeSlotResolver(TZ)
    slots = _day_slots(10, 11, 12, 13, 14, 15)

    match = resolver.resolve("14:00", slots)

    assert match is not None
    assert match.slot == at(2024, 3, 4, 14)
    assert match.fuzzy is False


def test_meridiem_input_matches_afternoon_slot():
    resolver = TimeSlotResolver(TZ)

    match = resolver.resolve("2pm", _day_slots(10, 14, 16))

    assert match.slot.hour == 14
    assert not match.fuzzy


def test_bare_hour_prefers_afternoon_when_morning_not_offered():
    resolver = TimeSlotResolver(TZ)

    match = resolver.resolve("6:", _day_slots(10, 11, 18, 19))

    assert match.slot == at(2024, 3, 4, 18)


def test_ambiguous_hour_takes_earliest_offered_slot():
    resolver = TimeSlotResolver(TZ)

    match = resolver.resolve("6:", _day_slots(6, 18))

    assert match.slot == at(2024, 3, 4, 6)


def test_near_miss_within_tolerance_is_fuzzy():
    resolver = TimeSlotResolver(TZ, tolerance_minutes=15)

    match = resolver.resolve("2:10pm", _day_slots(13, 14, 15))

    assert match is not None
    assert match.slot == at(2024, 3, 4, 14)
    assert match.fuzzy is True


def test_outside_tolerance_has_no_match():
    resolver = TimeSlotResolver(TZ, tolerance_minutes=15)

    assert resolver.resolve("2:30pm", _day_slots(13, 14, 15)) is None
    assert resolver.resolve("9am", _day_slots(13, 14, 15)) is None


def test_unparseable_text_has_no_match():
    resolver = TimeSlotResolver(TZ)

    assert resolver.resolve("whenever", _day_slots(13, 14)) is None


def test_24_hour_value_with_meridiem_keeps_its_hour():
    assert parse_time_expression("14:00 pm") == ParsedTime(hour=14, minute=0, meridiem="pm")
    assert candidate_hours(ParsedTime(hour=14, meridiem="pm")) == [14]
    assert candidate_hours(ParsedTime(hour=15, meridiem="am")) == [15]

    match = TimeSlotResolver(TZ).resolve("14:00 pm", _day_slots(10, 14, 16))

    assert match.slot == at(2024, 3, 4, 14)
    assert not match.fuzzy
