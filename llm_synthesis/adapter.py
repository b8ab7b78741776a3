"""Text-generation backends for sales insights.

Every backend takes one prompt string and returns free text. The OpenAI
backend talks to any chat-completions compatible endpoint; the mock backend
returns canned text for tests and offline demos.
"""

from abc import ABC, abstractmethod
from typing import Optional

_ANALYST_ROLE = "You are a careful performance-marketing analyst. Never invent numbers."


class BaseLLMAdapter(ABC):
    """Interface shared by all insight backends."""

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Return the model's answer to ``prompt`` as plain text."""


class OpenAILLMAdapter(BaseLLMAdapter):
    """Chat-completions backend.

    A single non-streaming request per prompt. Temperature stays low so the
    narrative sticks to the figures embedded in the prompt.
    """

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        max_tokens: int = 2048,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: float = 0.2,
    ) -> None:
        """
        Args:
            model: Model identifier sent with every request.
            max_tokens: Upper bound on the completion length.
            api_key: Key for the endpoint.
            base_url: Alternative endpoint for OpenAI-compatible servers.
            temperature: Sampling temperature.
        """
        from openai import OpenAI

        self._client = OpenAI(api_key=api_key, base_url=base_url or None)
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    def generate(self, prompt: str) -> str:
        completion = self._client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": _ANALYST_ROLE},
                {"role": "user", "content": prompt},
            ],
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )
        if not completion.choices:
            return ""
        return completion.choices[0].message.content or ""


_MOCK_INSIGHT = (
    "Mock insight for testing purposes.\n"
    "- Revenue concentrates in the top campaign.\n"
    "- Review spend on clusters with ROI below 1x."
)


class MockLLMAdapter(BaseLLMAdapter):
    """Offline backend that ignores the prompt and returns fixed text.

    Selected with ``LLM_ADAPTER=mock``; needs no API key.
    """

    def __init__(self, text: str = _MOCK_INSIGHT) -> None:
        self._text = text
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self._text
