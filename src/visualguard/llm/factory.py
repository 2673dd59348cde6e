"""Factory for creating inference providers from VisualGuard settings."""

from __future__ import annotations

import logging

from visualguard.llm.base import InferenceProvider
from visualguard.settings.config import LLMSettings

logger = logging.getLogger(__name__)


def create_inference_provider(llm: LLMSettings) -> InferenceProvider:
    """Create the inference provider described by *llm*.

    No retry wrapper is applied: a failed or timed-out inspection is
    reported to the caller, who decides whether to run it again.
    """
    from visualguard.llm.openai_compat import OpenAICompatibleProvider

    provider = OpenAICompatibleProvider(
        api_key=llm.api_key,
        base_url=llm.base_url,
        model=llm.model,
        max_tokens=llm.max_tokens,
        temperature=llm.temperature,
        timeout_ms=llm.timeout_ms,
    )
    logger.info("Created inference provider: base_url=%s model=%s", llm.base_url, llm.model)
    return provider
