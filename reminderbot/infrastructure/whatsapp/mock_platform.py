from __future__ import annotations

import logging

from reminderbot.application.ports.message_platform import MessagePlatformPort


class MockWhatsAppPlatform(MessagePlatformPort):
    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []
        self._logger = logging.getLogger(__name__)

    def send_text(self, recipient_id: str, text: str) -> bool:
        self.sent.append((recipient_id, text))
        self._logger.info("Mock send to WhatsApp", extra={"phone": recipient_id, "reply_text": text})
        return True

    def is_connected(self) -> bool:
        return True
