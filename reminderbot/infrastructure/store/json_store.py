from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any

from reminderbot.application.exceptions import PersistenceError
from reminderbot.application.ports.flat_store import SeenPhonesStorePort, StatusStorePort
from reminderbot.domain.entities.status_record import StatusRecord

logger = logging.getLogger(__name__)


def _load_json(file_path: Path, default: Any) -> Any:
    """Load JSON from file, return default if missing or unreadable."""
    if not file_path.exists():
        return default
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.error("Error loading JSON file", extra={"reason": f"{file_path}: {e}"})
        return default


def _save_json(file_path: Path, data: Any) -> None:
    """Save data to JSON file atomically."""
    temp_path = file_path.with_suffix(file_path.suffix + ".tmp")
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        temp_path.replace(file_path)
    except OSError as e:
        if temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                pass
        raise PersistenceError(f"Could not write {file_path}: {e}") from e


class JsonStatusStore(StatusStorePort):
    def __init__(self, file_path: str = "./data/status.json") -> None:
        self._file_path = Path(file_path)
        self._lock = threading.Lock()

    def load(self) -> list[StatusRecord]:
        with self._lock:
            data = _load_json(self._file_path, [])
        records: list[StatusRecord] = []
        for item in data if isinstance(data, list) else []:
            if not isinstance(item, dict):
                continue
            try:
                records.append(
                    StatusRecord(
                        name=str(item["name"]),
                        phone=str(item["phone"]),
                        status=str(item["status"]).lower(),
                    )
                )
            except KeyError:
                continue
        return records

    def save(self, records: list[StatusRecord]) -> None:
        payload = [{"name": r.name, "phone": r.phone, "status": r.status} for r in records]
        with self._lock:
            _save_json(self._file_path, payload)


class JsonSeenPhonesStore(SeenPhonesStorePort):
    def __init__(self, file_path: str = "./data/seen_phones.json") -> None:
        self._file_path = Path(file_path)
        self._lock = threading.Lock()

    def load(self) -> set[str]:
        with self._lock:
            data = _load_json(self._file_path, [])
        return {str(phone) for phone in data} if isinstance(data, list) else set()

    def save(self, phones: set[str]) -> None:
        with self._lock:
            _save_json(self._file_path, sorted(phones))
