from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from reminderbot.domain.entities.appointment import Appointment


class SpreadsheetPort(ABC):
    @abstractmethod
    def read_rows(self, source: Any) -> list[dict[str, Any]]:
        """Read the first sheet of a workbook as a list of raw row dicts."""
        raise NotImplementedError

    @abstractmethod
    def write_appointments(self, appointments: list[Appointment]) -> None:
        """Overwrite the appointment workbook. Raises PersistenceError on failure."""
        raise NotImplementedError

    @abstractmethod
    def exists(self) -> bool:
        raise NotImplementedError
