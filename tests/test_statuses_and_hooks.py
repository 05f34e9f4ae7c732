"""
Tests for the opt-in status registry and hook messages to "no" contacts.
"""

from __future__ import annotations

import pytest

from conftest import TZ, FakeSpreadsheet, MemoryStatusStore, RecordingDispatcher, RecordingPlatform, StubGenerator, at
from reminderbot.application.exceptions import SpreadsheetFormatError
from reminderbot.application.use_cases.import_statuses import StatusRegistry, rows_to_status_records
from reminderbot.application.use_cases.message_composer import MessageComposer
from reminderbot.application.use_cases.send_hook_messages import SendHookMessagesUseCase
from reminderbot.application.use_cases.send_reply import SendReplyUseCase
from reminderbot.domain.entities.appointment import Appointment
from reminderbot.domain.entities.status_record import StatusRecord


def _registry(rows=None, records=None):
    store = MemoryStatusStore(records)
    registry = StatusRegistry(store=store, spreadsheet=FakeSpreadsheet(rows=rows))
    registry.load()
    return registry, store


def test_rows_to_status_records_normalizes():
    rows = [
        {"name": "Ann", "phone": 15551230001.0, "status": " NO "},
        {"name": "Bob", "phone": "555-0002", "status": "Yes"},
        {"name": "Cy", "phone": "555-0003", "status": None},
    ]

    assert rows_to_status_records(rows) == [
        StatusRecord("Ann", "15551230001", "no"),
        StatusRecord("Bob", "5550002", "yes"),
    ]


def test_import_appends_only_unknown_phones():
    registry, store = _registry(
        rows=[
            {"name": "Ann again", "phone": "111", "status": "yes"},
            {"name": "Bob", "phone": "222", "status": "no"},
            {"name": "Bob dup", "phone": "222", "status": "yes"},
        ],
        records=[StatusRecord("Ann", "111", "no")],
    )

    result = registry.import_file("statuses.xlsx")

    assert result.added == 1
    assert result.no_count == 1
    assert result.yes_count == 2
    assert [(r.name, r.status) for r in registry.all()] == [("Ann", "no"), ("Bob", "no")]
    assert store.records == registry.all()


def test_import_without_usable_rows_is_rejected():
    registry, _ = _registry(rows=[{"name": "Ann", "phone": "111"}])

    with pytest.raises(SpreadsheetFormatError):
        registry.import_file("bad.xlsx")


def test_repeated_import_does_not_save_again():
    registry, store = _registry(rows=[{"name": "Ann", "phone": "111", "status": "no"}])

    registry.import_file("a.xlsx")
    registry.import_file("a.xlsx")

    assert store.saves == 1


def test_clear_empties_registry_and_file():
    registry, store = _registry(records=[StatusRecord("Ann", "111", "no")])

    assert registry.clear() is True
    assert registry.all() == []
    assert store.records == []


def _hooks(records, platform=None, generator=None):
    registry, _ = _registry(records=records)
    dispatcher = RecordingDispatcher()
    use_case = SendHookMessagesUseCase(
        statuses=registry,
        composer=MessageComposer(TZ, generator=generator),
        send_reply=SendReplyUseCase(platform=platform or RecordingPlatform(), auto_reply_enabled=True),
        dispatcher=dispatcher,
        initial_delay_seconds=5.0,
        spacing_seconds=300.0,
    )
    return use_case, dispatcher


def test_hooks_go_to_no_status_contacts_spaced_apart():
    use_case, dispatcher = _hooks(
        [StatusRecord("Ann", "111", "no"), StatusRecord("Bob", "222", "yes"), StatusRecord("Cy", "333", "no")]
    )

    scheduled = use_case.execute([Appointment("Dee", "444", at(2024, 3, 4, 14))])

    assert scheduled == 2
    assert [(phone, delay) for phone, _, delay in dispatcher.dispatched] == [("111", 5.0), ("333", 305.0)]
    assert "Dee has just joined" in dispatcher.texts[0]
    assert dispatcher.texts[0].startswith("Hi Ann!")


def test_hooks_use_generated_text():
    use_case, dispatcher = _hooks([StatusRecord("Ann", "111", "no")], generator=StubGenerator(text="Come join Dee!"))

    use_case.execute([Appointment("Dee", "444", at(2024, 3, 4, 14))])

    assert dispatcher.texts == ["Come join Dee!"]


def test_hooks_skipped_without_no_contacts_or_transport():
    use_case, dispatcher = _hooks([StatusRecord("Bob", "222", "yes")])
    assert use_case.execute([Appointment("Dee", "444", at(2024, 3, 4, 14))]) == 0

    use_case, dispatcher = _hooks([StatusRecord("Ann", "111", "no")], platform=RecordingPlatform(connected=False))
    assert use_case.execute([Appointment("Dee", "444", at(2024, 3, 4, 14))]) == 0
    assert dispatcher.dispatched == []
