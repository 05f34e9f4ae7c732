from __future__ import annotations

from abc import ABC, abstractmethod

from reminderbot.domain.entities.status_record import StatusRecord


class StatusStorePort(ABC):
    @abstractmethod
    def load(self) -> list[StatusRecord]:
        raise NotImplementedError

    @abstractmethod
    def save(self, records: list[StatusRecord]) -> None:
        """Raises PersistenceError on failure."""
        raise NotImplementedError


class SeenPhonesStorePort(ABC):
    @abstractmethod
    def load(self) -> set[str]:
        raise NotImplementedError

    @abstractmethod
    def save(self, phones: set[str]) -> None:
        """Raises PersistenceError on failure."""
        raise NotImplementedError
