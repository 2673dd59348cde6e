"""Inference provider abstraction for VisualGuard.

Talks to any OpenAI-compatible ``/chat/completions`` endpoint that accepts
inline images (DashScope compatible mode by default).
"""

from visualguard.llm.base import InferenceProvider, LLMResult
from visualguard.llm.factory import create_inference_provider

__all__ = ["InferenceProvider", "LLMResult", "create_inference_provider"]
