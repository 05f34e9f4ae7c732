from __future__ import annotations

from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

import pytest

from reminderbot.application.exceptions import PersistenceError, TextGenerationError
from reminderbot.application.ports.flat_store import SeenPhonesStorePort, StatusStorePort
from reminderbot.application.ports.message_platform import MessagePlatformPort
from reminderbot.application.ports.reply_dispatcher import ReplyDispatcherPort
from reminderbot.application.ports.spreadsheet import SpreadsheetPort
from reminderbot.application.ports.text_generator import TextGeneratorPort
from reminderbot.domain.entities.appointment import Appointment
from reminderbot.domain.entities.business_hours import DEFAULT_WEEKLY_HOURS, CalendarModel
from reminderbot.domain.entities.status_record import StatusRecord

TZ = ZoneInfo("America/New_York")


def at(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=TZ)


class RecordingDispatcher(ReplyDispatcherPort):
    def __init__(self) -> None:
        self.dispatched: list[tuple[str, str, float]] = []

    def dispatch(self, recipient_id: str, text: str, delay_seconds: float) -> None:
        self.dispatched.append((recipient_id, text, delay_seconds))

    @property
    def texts(self) -> list[str]:
        return [text for _, text, _ in self.dispatched]


class RecordingPlatform(MessagePlatformPort):
    def __init__(self, connected: bool = True, fail: bool = False) -> None:
        self.connected = connected
        self.fail = fail
        self.sent: list[tuple[str, str]] = []
        self.closed = False

    def send_text(self, recipient_id: str, text: str) -> bool:
        if self.fail:
            raise RuntimeError("transport down")
        self.sent.append((recipient_id, text))
        return True

    def is_connected(self) -> bool:
        return self.connected

    def close(self) -> None:
        self.closed = True


class StubGenerator(TextGeneratorPort):
    def __init__(self, text: str = "generated text", fail: bool = False) -> None:
        self.text = text
        self.fail = fail
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.fail:
            raise TextGenerationError("provider unavailable")
        return self.text


class FakeSpreadsheet(SpreadsheetPort):
    def __init__(self, rows: list[dict[str, Any]] | None = None, fail_writes: bool = False) -> None:
        self.rows = rows or []
        self.fail_writes = fail_writes
        self.written: list[list[Appointment]] = []

    def read_rows(self, source: Any = None) -> list[dict[str, Any]]:
        return list(self.rows)

    def write_appointments(self, appointments: list[Appointment]) -> None:
        if self.fail_writes:
            raise PersistenceError("disk full")
        self.written.append([Appointment(a.name, a.phone, a.appointment_time) for a in appointments])

    def exists(self) -> bool:
        return bool(self.rows)


class MemorySeenPhones(SeenPhonesStorePort):
    def __init__(self, phones: set[str] | None = None) -> None:
        self.phones = set(phones or ())

    def load(self) -> set[str]:
        return set(self.phones)

    def save(self, phones: set[str]) -> None:
        self.phones = set(phones)


class MemoryStatusStore(StatusStorePort):
    def __init__(self, records: list[StatusRecord] | None = None) -> None:
        self.records = list(records or [])
        self.saves = 0

    def load(self) -> list[StatusRecord]:
        return list(self.records)

    def save(self, records: list[StatusRecord]) -> None:
        self.saves += 1
        self.records = list(records)


@pytest.fixture
def tz() -> ZoneInfo:
    return TZ


@pytest.fixture
def calendar() -> CalendarModel:
    return CalendarModel(weekly_hours=dict(DEFAULT_WEEKLY_HOURS), slot_minutes=60)
