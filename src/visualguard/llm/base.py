"""Abstract inference provider interface."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field


@dataclass
class LLMResult:
    """Unified result from any provider call."""

    content: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: float = 0.0
    model: str = ""
    raw_response: dict = field(default_factory=dict)


class InferenceProvider(abc.ABC):
    """Abstract interface for multimodal chat completions.

    Calls are coroutines so the caller can cancel an in-flight request
    (``asyncio.wait_for`` / task cancellation) when its deadline expires.
    """

    @abc.abstractmethod
    async def chat_with_images(
        self,
        messages: list[dict],
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResult:
        """Send a multimodal chat request with inline images.

        Messages may contain structured content parts::

            [
                {"role": "system", "content": "..."},
                {"role": "user", "content": [
                    {"type": "text", "text": "Inspect this screenshot"},
                    {"type": "image", "media_type": "image/png", "data": "<base64>"},
                ]},
            ]

        Raises:
            InferenceError: The endpoint returned an error or a malformed response.
            InferenceTimeout: The transport gave up before a response arrived.
        """

    async def aclose(self) -> None:
        """Clean up resources. Override if needed."""
