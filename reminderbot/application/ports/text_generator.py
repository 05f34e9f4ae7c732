from abc import ABC, abstractmethod


class TextGeneratorPort(ABC):
    @abstractmethod
    def generate(self, prompt: str) -> str:
        """
        Turn a prompt into prose.

        Raises:
            TextGenerationError: provider failure or empty response
        """
        raise NotImplementedError
