from __future__ import annotations

import logging

from reminderbot.application.ports.message_platform import MessagePlatformPort


class SendReplyUseCase:
    def __init__(self, platform: MessagePlatformPort, auto_reply_enabled: bool) -> None:
        self._platform = platform
        self._auto_reply_enabled = auto_reply_enabled
        self._logger = logging.getLogger(__name__)

    def execute(self, recipient_id: str, text: str) -> bool:
        """Send a message. Returns True if actually sent, False if skipped or failed."""
        if not self._auto_reply_enabled:
            self._logger.info("WOULD_SEND_REPLY", extra={"phone": recipient_id, "reply_text": text})
            self._logger.info("AUTO_REPLY_ENABLED=false -> skipping send")
            return False
        try:
            sent = self._platform.send_text(recipient_id=recipient_id, text=text)
        except Exception as e:
            self._logger.error("Send failed", extra={"phone": recipient_id, "reason": str(e)})
            return False
        if not sent:
            self._logger.error("Send rejected by platform", extra={"phone": recipient_id})
        return sent

    def is_connected(self) -> bool:
        return self._platform.is_connected()
