from __future__ import annotations

from reminderbot.application.ports.message_platform import MessagePlatformPort
from reminderbot.infrastructure.whatsapp.whatsapp_client import WhatsAppClient


class WhatsAppPlatform(MessagePlatformPort):
    def __init__(self, client: WhatsAppClient) -> None:
        self._client = client

    def send_text(self, recipient_id: str, text: str) -> bool:
        self._client.send_text(to=recipient_id, text=text)
        return True

    def is_connected(self) -> bool:
        # Cloud API is stateless; configured credentials mean we can send.
        return True

    def close(self) -> None:
        self._client.close()
