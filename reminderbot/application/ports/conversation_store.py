from __future__ import annotations

from abc import ABC, abstractmethod

from reminderbot.domain.entities.conversation_state import ConversationState


class ConversationStorePort(ABC):
    @abstractmethod
    def get_state(self, phone: str, now_ts: float | None = None) -> ConversationState | None:
        """Return the in-progress dialogue for phone, or None when idle."""
        raise NotImplementedError

    @abstractmethod
    def set_state(self, phone: str, state: ConversationState) -> None:
        raise NotImplementedError

    @abstractmethod
    def clear_state(self, phone: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def active_phones(self) -> list[str]:
        raise NotImplementedError

    @abstractmethod
    def has_processed(self, message_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def mark_processed(self, message_id: str) -> None:
        raise NotImplementedError
