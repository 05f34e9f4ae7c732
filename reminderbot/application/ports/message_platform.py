from abc import ABC, abstractmethod


class MessagePlatformPort(ABC):
    @abstractmethod
    def send_text(self, recipient_id: str, text: str) -> bool:
        """Deliver a text message. Returns False if the platform rejected it."""
        raise NotImplementedError

    @abstractmethod
    def is_connected(self) -> bool:
        raise NotImplementedError

    def close(self) -> None:
        """Release transport resources. No-op unless the platform holds any."""
