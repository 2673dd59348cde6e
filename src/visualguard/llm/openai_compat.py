"""OpenAI-compatible chat completions provider over httpx.

Works with any endpoint implementing ``POST {base_url}/chat/completions``
with ``image_url`` content parts, e.g. DashScope's compatible mode
(``qwen-vl-max``) or OpenAI itself.
"""

from __future__ import annotations

import logging
import time

import httpx

from visualguard.exceptions import InferenceError, InferenceTimeout
from visualguard.llm.base import InferenceProvider, LLMResult

logger = logging.getLogger(__name__)


class OpenAICompatibleProvider(InferenceProvider):
    """Provider backed by an OpenAI-compatible HTTP API.

    Args:
        api_key: Bearer credential for the endpoint.
        base_url: API root, e.g. ``https://dashscope.aliyuncs.com/compatible-mode/v1``.
        model: Vision-capable model name.
        max_tokens: Default max generation tokens.
        temperature: Default sampling temperature (omitted from the request when ``None``).
        timeout_ms: Transport-level timeout.
        transport: Optional httpx transport (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        model: str = "qwen-vl-max",
        max_tokens: int = 1000,
        temperature: float | None = None,
        timeout_ms: int = 120_000,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout_ms = timeout_ms
        self._client = httpx.AsyncClient(
            timeout=timeout_ms / 1000,
            headers={"Authorization": f"Bearer {api_key}"},
            transport=transport,
        )

    async def chat_with_images(
        self,
        messages: list[dict],
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResult:
        temp = temperature if temperature is not None else self.temperature
        tokens = max_tokens if max_tokens is not None else self.max_tokens

        payload: dict = {
            "model": self.model,
            "messages": self._convert_messages(messages),
            "max_tokens": tokens,
        }
        if temp is not None:
            payload["temperature"] = temp

        start = time.monotonic()
        try:
            resp = await self._client.post(f"{self.base_url}/chat/completions", json=payload)
            resp.raise_for_status()
            body = resp.json()
        except httpx.TimeoutException as exc:
            logger.error("Inference endpoint timed out after %dms", self.timeout_ms)
            raise InferenceTimeout(self.timeout_ms) from exc
        except httpx.HTTPStatusError as exc:
            logger.error("Inference HTTP error: %s %s", exc.response.status_code, exc.response.text[:500])
            raise InferenceError(f"HTTP {exc.response.status_code}: {_error_message(exc.response)}") from exc
        except httpx.RequestError as exc:
            logger.error("Cannot reach inference endpoint at %s: %s", self.base_url, exc)
            raise InferenceError(f"cannot reach {self.base_url}: {exc}") from exc
        except ValueError as exc:
            raise InferenceError("response body is not valid JSON") from exc

        latency_ms = (time.monotonic() - start) * 1000
        content = _extract_content(body)
        usage = body.get("usage") or {}

        return LLMResult(
            content=content,
            input_tokens=usage.get("prompt_tokens", 0),
            output_tokens=usage.get("completion_tokens", 0),
            latency_ms=latency_ms,
            model=body.get("model", self.model),
            raw_response=body,
        )

    @staticmethod
    def _convert_messages(messages: list[dict]) -> list[dict]:
        """Convert neutral image parts to OpenAI ``image_url`` parts with data URIs."""
        result: list[dict] = []
        for msg in messages:
            content = msg.get("content")
            if isinstance(content, str):
                result.append({"role": msg["role"], "content": content})
                continue

            parts: list[dict] = []
            for part in content:
                if part.get("type") == "image":
                    media_type = part.get("media_type", "image/png")
                    parts.append(
                        {"type": "image_url", "image_url": {"url": f"data:{media_type};base64,{part['data']}"}}
                    )
                else:
                    parts.append(part)
            result.append({"role": msg["role"], "content": parts})
        return result

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()


def _extract_content(body: dict) -> str:
    try:
        content = body["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise InferenceError("malformed response: no choices[0].message.content") from exc
    if isinstance(content, list):
        # Some compatible endpoints return content as a list of text parts.
        content = "".join(p.get("text", "") for p in content if isinstance(p, dict))
    if not isinstance(content, str):
        raise InferenceError("malformed response: message content is not text")
    return content


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return response.reason_phrase
