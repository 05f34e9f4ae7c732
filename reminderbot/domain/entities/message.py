from dataclasses import dataclass


@dataclass(frozen=True)
class InboundMessage:
    id: str
    sender_id: str
    text: str
    timestamp: int
    has_non_text_payload: bool = False
    platform: str = "whatsapp"
