from __future__ import annotations

import logging
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo

import pandas as pd

from reminderbot.application.exceptions import PersistenceError
from reminderbot.application.ports.spreadsheet import SpreadsheetPort
from reminderbot.application.utils.sheet_values import format_sheet_datetime
from reminderbot.domain.entities.appointment import Appointment

APPOINTMENT_COLUMNS = ["name", "phone", "appointmentTime"]


class ExcelGateway(SpreadsheetPort):
    def __init__(self, file_path: str, timezone: ZoneInfo) -> None:
        self._file_path = Path(file_path)
        self._timezone = timezone
        self._logger = logging.getLogger(__name__)

    def exists(self) -> bool:
        return self._file_path.exists()

    def read_rows(self, source: Any = None) -> list[dict[str, Any]]:
        """
        Read the first sheet with raw cell values. Phone columns are read as
        objects so long numbers keep every digit.
        """
        target = self._file_path if source is None else source
        df = pd.read_excel(target, sheet_name=0, dtype={"phone": object}, engine="openpyxl")
        df.columns = [str(column).strip() for column in df.columns]
        df = df.astype(object).where(pd.notna(df), None)
        return df.to_dict(orient="records")

    def write_appointments(self, appointments: list[Appointment]) -> None:
        rows = [
            {
                "name": appointment.name,
                "phone": appointment.phone,
                "appointmentTime": format_sheet_datetime(appointment.appointment_time, self._timezone),
            }
            for appointment in appointments
        ]
        df = pd.DataFrame(rows, columns=APPOINTMENT_COLUMNS)
        temp_path = self._file_path.with_name(f".{self._file_path.stem}.tmp{self._file_path.suffix}")
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            df.to_excel(temp_path, index=False, sheet_name="Appointments", engine="openpyxl")
            temp_path.replace(self._file_path)
        except OSError as e:
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError:
                    pass
            raise PersistenceError(f"Could not write {self._file_path}: {e}") from e
