from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from reminderbot.domain.entities.message import InboundMessage


class WebhookEventDTO(BaseModel):
    object: str | None = None
    entry: list[dict[str, Any]] = Field(default_factory=list)

    def extract_messages(self) -> list[InboundMessage]:
        """Flatten entry[].changes[].value.messages[]; status callbacks carry no messages."""
        messages: list[InboundMessage] = []
        for entry in self.entry or []:
            for change in entry.get("changes", []) or []:
                value = change.get("value") or {}
                for msg in value.get("messages", []) or []:
                    mid = msg.get("id")
                    sender = msg.get("from")
                    timestamp = msg.get("timestamp")
                    if not (mid and sender and timestamp):
                        continue

                    msg_type = msg.get("type") or "text"
                    text = (msg.get("text") or {}).get("body") or ""
                    messages.append(
                        InboundMessage(
                            id=str(mid),
                            sender_id=str(sender),
                            text=str(text),
                            timestamp=int(timestamp),
                            has_non_text_payload=msg_type != "text",
                        )
                    )
        return messages
