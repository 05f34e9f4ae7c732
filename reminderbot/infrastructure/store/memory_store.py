from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict

from reminderbot.application.ports.conversation_store import ConversationStorePort
from reminderbot.domain.entities.conversation_state import ConversationState


class MemoryConversationStore(ConversationStorePort):
    def __init__(self, idle_timeout_seconds: float | None = None, processed_limit: int = 1000) -> None:
        self._states: dict[str, ConversationState] = {}
        self._processed: OrderedDict[str, None] = OrderedDict()
        self._processed_limit = processed_limit
        self._idle_timeout_seconds = idle_timeout_seconds or None
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def get_state(self, phone: str, now_ts: float | None = None) -> ConversationState | None:
        with self._lock:
            state = self._states.get(phone)
            if state is None:
                return None
            if self._is_expired(state, now_ts):
                del self._states[phone]
                self._logger.info(
                    "Conversation expired",
                    extra={"event": "conversation_expired", "phone": phone, "stage": state.stage.value},
                )
                return None
            return state

    def set_state(self, phone: str, state: ConversationState) -> None:
        with self._lock:
            self._states[phone] = state

    def clear_state(self, phone: str) -> None:
        with self._lock:
            self._states.pop(phone, None)

    def active_phones(self) -> list[str]:
        with self._lock:
            return list(self._states)

    def has_processed(self, message_id: str) -> bool:
        with self._lock:
            return message_id in self._processed

    def mark_processed(self, message_id: str) -> None:
        with self._lock:
            self._processed[message_id] = None
            while len(self._processed) > self._processed_limit:
                self._processed.popitem(last=False)

    def _is_expired(self, state: ConversationState, now_ts: float | None) -> bool:
        if self._idle_timeout_seconds is None or state.updated_at is None:
            return False
        if now_ts is None:
            now_ts = time.time()
        return now_ts - state.updated_at > self._idle_timeout_seconds
