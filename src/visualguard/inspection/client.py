"""Inspection client: one deadline-bounded vision-model call per screenshot."""

from __future__ import annotations

import asyncio
import logging

from visualguard.exceptions import InferenceError, InferenceTimeout
from visualguard.inspection.prompts import USER_PROMPTS, build_system_prompt
from visualguard.llm.base import InferenceProvider
from visualguard.models.result import ImageArtifact
from visualguard.settings.config import LLMSettings

logger = logging.getLogger(__name__)


class InspectionClient:
    """Submits an image artifact with the fixed checklist and returns the report text.

    The report is returned verbatim; the client does not parse it or look for
    the all-clear sentinel. There are no automatic retries.

    Args:
        provider: Inference capability to call.
        timeout_ms: Hard wall-clock deadline for the whole call.
        max_tokens: Max generation tokens for the report.
        temperature: Sampling temperature, ``None`` for the endpoint default.
        language: Prompt language (``en`` or ``zh``).
    """

    def __init__(
        self,
        provider: InferenceProvider,
        *,
        timeout_ms: int = 120_000,
        max_tokens: int = 1000,
        temperature: float | None = None,
        language: str = "en",
    ) -> None:
        self._provider = provider
        self.timeout_ms = timeout_ms
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.language = language
        self._system_prompt = build_system_prompt(language)

    @classmethod
    def from_settings(cls, provider: InferenceProvider, llm: LLMSettings) -> "InspectionClient":
        return cls(
            provider,
            timeout_ms=llm.timeout_ms,
            max_tokens=llm.max_tokens,
            temperature=llm.temperature,
            language=llm.prompt_language,
        )

    def build_messages(self, artifact: ImageArtifact) -> list[dict]:
        """Build the single system + user request for *artifact*."""
        return [
            {"role": "system", "content": self._system_prompt},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": USER_PROMPTS[self.language]},
                    {"type": "image", "media_type": artifact.media_type, "data": artifact.base64},
                ],
            },
        ]

    async def inspect(self, artifact: ImageArtifact) -> str:
        """Return the model's plain-text defect report for *artifact*.

        Raises:
            InferenceTimeout: The deadline expired; the in-flight request is cancelled.
            InferenceError: The endpoint failed or returned no usable text.
        """
        messages = self.build_messages(artifact)
        try:
            result = await asyncio.wait_for(
                self._provider.chat_with_images(
                    messages,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                ),
                timeout=self.timeout_ms / 1000,
            )
        except InferenceError:
            raise
        except TimeoutError as exc:
            logger.error("Inference call exceeded %dms deadline", self.timeout_ms)
            raise InferenceTimeout(self.timeout_ms) from exc
        except Exception as exc:
            raise InferenceError(str(exc) or type(exc).__name__) from exc

        if not result.content.strip():
            raise InferenceError("endpoint returned an empty report")

        logger.info(
            "Inspection report received: model=%s latency=%.0fms tokens=%d/%d",
            result.model,
            result.latency_ms,
            result.input_tokens,
            result.output_tokens,
        )
        return result.content
