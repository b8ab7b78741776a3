"""
app/services/insight_service.py

AI narrative generation for an ingested table.

The adapter is a black box: it receives a prompt built from the headers,
column types and a bounded row sample, and returns free text that is shown
to the operator as-is.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from app.config import LLMSettings, allowed_llm_adapters, get_llm_settings
from app.domain.sales_table import Table
from llm_synthesis.adapter import BaseLLMAdapter, MockLLMAdapter, OpenAILLMAdapter
from llm_synthesis.prompt_builder import InsightPromptBuilder

logger = logging.getLogger(__name__)


class InsightGenerationError(RuntimeError):
    """
    Raised when the adapter fails or returns no text.
    """


class InsightNotConfiguredError(RuntimeError):
    """
    Raised when no usable adapter is configured.
    """


def build_adapter(settings: LLMSettings) -> BaseLLMAdapter:
    """Instantiate the adapter selected by ``LLM_ADAPTER``.

    LLM_ADAPTER=mock   -> MockLLMAdapter  (testing, no API key required)
    LLM_ADAPTER=openai -> OpenAILLMAdapter (default)
    """

    if settings.adapter not in allowed_llm_adapters():
        raise InsightNotConfiguredError(f"Unknown LLM adapter '{settings.adapter}'.")
    if settings.adapter == "mock":
        return MockLLMAdapter()
    if not settings.api_key:
        raise InsightNotConfiguredError(
            "AI insights are not configured. Set LLM_API_KEY or OPENAI_API_KEY."
        )
    return OpenAILLMAdapter(
        model=settings.model,
        max_tokens=settings.max_tokens,
        api_key=settings.api_key,
        base_url=settings.base_url,
    )


class InsightService:
    """
    Builds the prompt for a table and asks the adapter for a narrative.
    """

    def __init__(
        self,
        *,
        adapter: BaseLLMAdapter,
        prompt_builder: InsightPromptBuilder | None = None,
    ) -> None:
        self._adapter = adapter
        self._prompt_builder = prompt_builder or InsightPromptBuilder()

    def generate(self, table: Table) -> str:
        prompt = self._prompt_builder.build_prompt(table)
        try:
            text = self._adapter.generate(prompt)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Insight generation failed rows=%d: %s", len(table.rows), exc)
            raise InsightGenerationError("AI insight generation failed.") from exc

        text = (text or "").strip()
        if not text:
            raise InsightGenerationError("AI insight generation returned no text.")
        logger.info(
            "Insight generated rows=%d prompt_chars=%d response_chars=%d",
            len(table.rows),
            len(prompt),
            len(text),
        )
        return text


@lru_cache(maxsize=1)
def get_insight_service() -> InsightService:
    """
    Build and cache the insight service from env-driven settings.

    Raises InsightNotConfiguredError when no adapter can be built.
    """

    settings = get_llm_settings()
    return InsightService(
        adapter=build_adapter(settings),
        prompt_builder=InsightPromptBuilder(
            sample_rows=settings.sample_rows,
            language=settings.language,
        ),
    )
