from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any

from reminderbot.application.exceptions import PersistenceError, SpreadsheetFormatError
from reminderbot.application.ports.flat_store import StatusStorePort
from reminderbot.application.ports.spreadsheet import SpreadsheetPort
from reminderbot.application.utils.sheet_values import is_blank, normalize_phone
from reminderbot.domain.entities.status_record import StatusRecord

REQUIRED_COLUMNS_HINT = "Excel file must contain columns: name, phone, status"


@dataclass(frozen=True)
class StatusImportResult:
    records: list[StatusRecord]
    added: int
    persisted: bool = True

    @property
    def yes_count(self) -> int:
        return sum(1 for r in self.records if r.status == "yes")

    @property
    def no_count(self) -> int:
        return sum(1 for r in self.records if r.status == "no")


def rows_to_status_records(rows: list[dict[str, Any]]) -> list[StatusRecord]:
    records: list[StatusRecord] = []
    for row in rows:
        name, phone_raw, status = row.get("name"), row.get("phone"), row.get("status")
        if is_blank(name) or is_blank(phone_raw) or is_blank(status):
            continue
        phone = normalize_phone(phone_raw)
        if not phone:
            continue
        records.append(StatusRecord(name=str(name).strip(), phone=phone, status=str(status).strip().lower()))
    return records


class StatusRegistry:
    """Opt-in status per contact; the first record seen for a phone is kept."""

    def __init__(self, store: StatusStorePort, spreadsheet: SpreadsheetPort) -> None:
        self._store = store
        self._spreadsheet = spreadsheet
        self._records: list[StatusRecord] = []
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def load(self) -> int:
        records = self._store.load()
        with self._lock:
            self._records = records
        self._logger.info("Loaded status records", extra={"event": "statuses_loaded", "count": len(records)})
        return len(records)

    def all(self) -> list[StatusRecord]:
        with self._lock:
            return list(self._records)

    def with_status(self, status: str) -> list[StatusRecord]:
        return [r for r in self.all() if r.status == status]

    def import_file(self, source: Any) -> StatusImportResult:
        records = rows_to_status_records(self._spreadsheet.read_rows(source))
        if not records:
            raise SpreadsheetFormatError(REQUIRED_COLUMNS_HINT)
        return self.add(records)

    def add(self, records: list[StatusRecord]) -> StatusImportResult:
        with self._lock:
            known = {r.phone for r in self._records}
            fresh: list[StatusRecord] = []
            for record in records:
                if record.phone not in known:
                    fresh.append(record)
                    known.add(record.phone)
            self._records.extend(fresh)
            snapshot = list(self._records)

        persisted = True
        if fresh:
            persisted = self._save(snapshot)
            self._logger.info("Added status entries", extra={"event": "statuses_imported", "count": len(fresh)})
        else:
            self._logger.info("No new status entries to add")
        return StatusImportResult(records=records, added=len(fresh), persisted=persisted)

    def clear(self) -> bool:
        with self._lock:
            self._records = []
        return self._save([])

    def _save(self, records: list[StatusRecord]) -> bool:
        try:
            self._store.save(records)
        except PersistenceError as e:
            self._logger.error("Error saving status data", extra={"reason": str(e)})
            return False
        return True
