from __future__ import annotations

import logging
import threading
from datetime import datetime

from reminderbot.application.exceptions import PersistenceError
from reminderbot.application.ports.appointment_store import AppointmentStorePort
from reminderbot.application.ports.spreadsheet import SpreadsheetPort
from reminderbot.domain.entities.appointment import Appointment


class AppointmentStore(AppointmentStorePort):
    """
    Active appointment set, one record per phone, mirrored to the workbook.

    Writes go to memory first; a failed workbook write is logged and reported
    but memory is not rolled back.
    """

    def __init__(self, spreadsheet: SpreadsheetPort | None = None) -> None:
        self._spreadsheet = spreadsheet
        self._appointments: list[Appointment] = []
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def all(self) -> list[Appointment]:
        with self._lock:
            return list(self._appointments)

    def find(self, phone: str) -> Appointment | None:
        with self._lock:
            return self._find_without_lock(phone)

    def _find_without_lock(self, phone: str) -> Appointment | None:
        for appointment in self._appointments:
            if appointment.phone == phone:
                return appointment
        return None

    def replace_all(self, appointments: list[Appointment]) -> bool:
        unique: dict[str, Appointment] = {}
        for appointment in appointments:
            unique.setdefault(appointment.phone, appointment)
        with self._lock:
            self._appointments = list(unique.values())
        return self.persist()

    def reschedule(self, phone: str, new_time: datetime) -> Appointment | None:
        with self._lock:
            appointment = self._find_without_lock(phone)
            if appointment is None:
                return None
            appointment.appointment_time = new_time
        self.persist()
        return appointment

    def remove(self, phone: str) -> Appointment | None:
        with self._lock:
            appointment = self._find_without_lock(phone)
            if appointment is None:
                return None
            self._appointments.remove(appointment)
        self.persist()
        return appointment

    def clear(self) -> bool:
        with self._lock:
            self._appointments = []
        return self.persist()

    def persist(self) -> bool:
        if self._spreadsheet is None:
            return True
        snapshot = self.all()
        try:
            self._spreadsheet.write_appointments(snapshot)
        except PersistenceError as e:
            self._logger.error("Error saving appointments", extra={"reason": str(e)})
            return False
        self._logger.info("Appointments saved", extra={"event": "appointments_saved", "count": len(snapshot)})
        return True
