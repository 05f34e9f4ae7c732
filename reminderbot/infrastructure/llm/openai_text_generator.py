from __future__ import annotations

from openai import OpenAI

from reminderbot.application.exceptions import TextGenerationError
from reminderbot.application.ports.text_generator import TextGeneratorPort
from reminderbot.core.config import settings


class OpenAITextGenerator(TextGeneratorPort):
    """
    Chat-completions adapter implementing TextGeneratorPort.

    Works against any OpenAI-compatible endpoint (Groq by default) through
    base_url. Raises TextGenerationError for provider failures and empty output.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
    ) -> None:
        self.client = OpenAI(
            api_key=api_key or settings.TEXTGEN_API_KEY,
            base_url=base_url or settings.TEXTGEN_BASE_URL,
            timeout=15.0,
            max_retries=0,
        )
        self._model = model or settings.TEXTGEN_MODEL
        self._temperature = settings.TEXTGEN_TEMPERATURE if temperature is None else temperature

    def generate(self, prompt: str) -> str:
        try:
            resp = self.client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self._temperature,
                max_tokens=400,
            )
        except Exception as e:
            raise TextGenerationError(f"Text generation API error: {e}") from e

        content = (resp.choices[0].message.content or "").strip() if resp.choices else ""
        if not content:
            raise TextGenerationError("Text generation returned empty response text.")
        return content
