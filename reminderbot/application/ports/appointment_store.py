from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from reminderbot.domain.entities.appointment import Appointment


class AppointmentStorePort(ABC):
    @abstractmethod
    def all(self) -> list[Appointment]:
        raise NotImplementedError

    @abstractmethod
    def find(self, phone: str) -> Appointment | None:
        raise NotImplementedError

    @abstractmethod
    def replace_all(self, appointments: list[Appointment]) -> bool:
        """Swap in a new active set and persist it. Returns False if persisting failed."""
        raise NotImplementedError

    @abstractmethod
    def reschedule(self, phone: str, new_time: datetime) -> Appointment | None:
        """Update the appointment in place and persist. Returns None if phone is unknown."""
        raise NotImplementedError

    @abstractmethod
    def remove(self, phone: str) -> Appointment | None:
        raise NotImplementedError

    @abstractmethod
    def clear(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def persist(self) -> bool:
        raise NotImplementedError
