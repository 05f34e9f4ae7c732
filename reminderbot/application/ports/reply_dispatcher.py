from abc import ABC, abstractmethod


class ReplyDispatcherPort(ABC):
    @abstractmethod
    def dispatch(self, recipient_id: str, text: str, delay_seconds: float) -> None:
        """
        Schedule a text to be sent after delay_seconds.
        Must return immediately and must be safe to call from any thread.
        """
        raise NotImplementedError
