from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

from reminderbot.application.exceptions import PersistenceError, SpreadsheetFormatError
from reminderbot.application.ports.appointment_store import AppointmentStorePort
from reminderbot.application.ports.flat_store import SeenPhonesStorePort
from reminderbot.application.ports.spreadsheet import SpreadsheetPort
from reminderbot.application.utils.sheet_values import is_blank, normalize_appointment_time, normalize_phone
from reminderbot.domain.entities.appointment import Appointment

STATUS_NEW = "new"
STATUS_RESCHEDULED = "rescheduled"
STATUS_EXISTING = "existing"

REQUIRED_COLUMNS_HINT = "Excel file must contain columns: name, phone, appointmentTime"


@dataclass(frozen=True)
class MergedAppointment:
    appointment: Appointment
    status: str


@dataclass(frozen=True)
class MergeResult:
    merged: list[MergedAppointment]
    genuinely_new: list[Appointment] = field(default_factory=list)
    persisted: bool = True

    @property
    def appointments(self) -> list[Appointment]:
        return [item.appointment for item in self.merged]

    def count(self, status: str) -> int:
        return sum(1 for item in self.merged if item.status == status)

    @property
    def summary(self) -> str:
        text = f"Successfully processed {len(self.merged)} total appointments"
        if self.count(STATUS_RESCHEDULED):
            text += f" ({self.count(STATUS_RESCHEDULED)} rescheduled preserved)"
        if self.count(STATUS_EXISTING):
            text += f" ({self.count(STATUS_EXISTING)} existing preserved)"
        if self.count(STATUS_NEW):
            text += f" ({self.count(STATUS_NEW)} new from upload)"
        return text


def rows_to_appointments(rows: list[dict[str, Any]], timezone: ZoneInfo, now: datetime | None = None) -> list[Appointment]:
    """Rows missing name, phone or appointmentTime are dropped."""
    appointments: list[Appointment] = []
    for index, row in enumerate(rows, start=1):
        name = row.get("name")
        phone_raw = row.get("phone")
        time_raw = row.get("appointmentTime")
        if is_blank(name) or is_blank(phone_raw) or is_blank(time_raw):
            continue
        phone = normalize_phone(phone_raw)
        if not phone:
            continue
        appointments.append(
            Appointment(
                name=str(name).strip(),
                phone=phone,
                appointment_time=normalize_appointment_time(time_raw, timezone, now=now, row_label=str(index)),
            )
        )
    return appointments


def merge_appointments(
    current: list[Appointment],
    batch: list[Appointment],
    seen_phones: set[str],
) -> tuple[list[MergedAppointment], list[Appointment]]:
    """
    Reconcile an imported batch against the live set by phone.

    A live record whose time differs from the sheet was rescheduled in
    conversation and wins; live records absent from the sheet are kept.
    Returns the merged list and the batch records whose phone was never seen.
    """
    batch_by_phone: dict[str, Appointment] = {}
    for appointment in batch:
        batch_by_phone.setdefault(appointment.phone, appointment)

    merged: list[MergedAppointment] = []
    processed: set[str] = set()

    for existing in current:
        incoming = batch_by_phone.get(existing.phone)
        if incoming is None:
            merged.append(MergedAppointment(appointment=existing, status=STATUS_EXISTING))
            processed.add(existing.phone)
        elif incoming.appointment_time != existing.appointment_time:
            merged.append(MergedAppointment(appointment=existing, status=STATUS_RESCHEDULED))
            processed.add(existing.phone)

    genuinely_new: list[Appointment] = []
    for phone, incoming in batch_by_phone.items():
        if phone in processed:
            continue
        merged.append(MergedAppointment(appointment=incoming, status=STATUS_NEW))
        processed.add(phone)
        if phone not in seen_phones:
            genuinely_new.append(incoming)

    return merged, genuinely_new


class ImportAppointmentsUseCase:
    def __init__(
        self,
        appointments: AppointmentStorePort,
        spreadsheet: SpreadsheetPort,
        seen_phones: SeenPhonesStorePort,
        timezone: ZoneInfo,
    ) -> None:
        self._appointments = appointments
        self._spreadsheet = spreadsheet
        self._seen_phones = seen_phones
        self._timezone = timezone
        self._logger = logging.getLogger(__name__)

    def execute(self, source: Any) -> MergeResult:
        rows = self._spreadsheet.read_rows(source)
        batch = rows_to_appointments(rows, self._timezone)
        if not batch:
            raise SpreadsheetFormatError(REQUIRED_COLUMNS_HINT)
        return self.merge(batch)

    def merge(self, batch: list[Appointment]) -> MergeResult:
        seen = self._seen_phones.load()
        merged, genuinely_new = merge_appointments(self._appointments.all(), batch, seen)

        for item in merged:
            if item.status != STATUS_NEW:
                self._logger.info(
                    "Preserving appointment",
                    extra={"phone": item.appointment.phone, "reason": item.status},
                )

        if genuinely_new:
            try:
                self._seen_phones.save(seen | {a.phone for a in genuinely_new})
            except PersistenceError as e:
                self._logger.error("Error saving seen phones", extra={"reason": str(e)})

        persisted = self._appointments.replace_all([item.appointment for item in merged])
        result = MergeResult(merged=merged, genuinely_new=genuinely_new, persisted=persisted)
        self._logger.info(result.summary, extra={"event": "appointments_imported"})
        return result

    def load_existing(self) -> int:
        """Populate the store from the saved workbook at startup."""
        if not self._spreadsheet.exists():
            self._logger.info("No existing appointments file found")
            return 0
        try:
            rows = self._spreadsheet.read_rows()
        except Exception as e:
            self._logger.error("Error loading existing appointments", extra={"reason": str(e)})
            return 0
        loaded = rows_to_appointments(rows, self._timezone)
        self._appointments.replace_all(loaded)
        self._logger.info("Loaded existing appointments", extra={"event": "appointments_loaded", "count": len(loaded)})
        return len(loaded)
