"""LiteLLM adapter implementing the ModelProvider interface.

Routes streaming completion requests to any OpenAI-compatible provider via
LiteLLM's unified API and turns each streamed chunk into tagged fragments.
Holds no retry logic: the first failure is surfaced as an UpstreamError.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx
import litellm
import openai

# Suppress LiteLLM's "Give Feedback / Get Help" and "Provider List" banners
litellm.suppress_debug_info = True

from streamrelay.providers.base import ModelProvider, UpstreamError
from streamrelay.schemas.config import ModelConfig
from streamrelay.schemas.streaming import Fragment, FragmentTag, RelayError

logger = logging.getLogger(__name__)

# LiteLLM exceptions all derive from the openai SDK's APIError
_UPSTREAM_ERRORS = (openai.APIError, httpx.HTTPError, TimeoutError)


def _short_error_reason(error: Exception) -> str:
    """Extract a short, user-friendly reason from an upstream error.

    Maps error types and status codes to concise descriptions instead
    of dumping full JSON error payloads.
    """
    if isinstance(error, openai.AuthenticationError):
        return "authentication"
    if isinstance(error, (TimeoutError, openai.APITimeoutError, httpx.TimeoutException)):
        return "timeout"
    if isinstance(error, openai.RateLimitError):
        return "rate limit"
    if isinstance(error, openai.BadRequestError):
        return "bad request"
    if isinstance(error, (openai.APIConnectionError, httpx.TransportError)):
        return "connection error"

    status_code = getattr(error, "status_code", None)
    if status_code == 429:
        return "rate limit"
    if status_code == 529:
        return "overloaded"
    if status_code == 503:
        return "service unavailable"
    if isinstance(status_code, int) and status_code >= 500:
        return "server error"

    error_str = str(error).lower()
    if "rate limit" in error_str or "429" in error_str:
        return "rate limit"
    if "overloaded" in error_str or "529" in error_str:
        return "overloaded"
    if "timeout" in error_str:
        return "timeout"
    if "503" in error_str or "unavailable" in error_str:
        return "service unavailable"
    if "500" in error_str or "internal" in error_str:
        return "server error"
    if "connection" in error_str:
        return "connection error"
    return "upstream request failed"


def describe_error(error: Exception) -> RelayError:
    """Build a RelayError from an upstream exception.

    Status code, error code and error type are taken from the exception
    when it carries them (LiteLLM and openai SDK errors do).
    """
    status_code = getattr(error, "status_code", None)
    if status_code is None:
        response = getattr(error, "response", None)
        status_code = getattr(response, "status_code", None)
    code = getattr(error, "code", None)
    error_type = getattr(error, "type", None)
    return RelayError(
        reason=_short_error_reason(error),
        message=str(error) or error.__class__.__name__,
        status_code=status_code if isinstance(status_code, int) else None,
        code=str(code) if code is not None else None,
        type=str(error_type) if error_type is not None else None,
    )


def chunk_fragments(chunk: Any) -> list[Fragment]:
    """Split one streamed chunk into its tagged fragments.

    Reads ``choices[0].delta.reasoning_content`` and
    ``choices[0].delta.content``; either may be missing or empty.
    """
    choices = getattr(chunk, "choices", None)
    if not choices:
        return []
    delta = getattr(choices[0], "delta", None)
    if delta is None:
        return []

    fragments: list[Fragment] = []
    reasoning = getattr(delta, "reasoning_content", None)
    if isinstance(reasoning, str) and reasoning:
        fragments.append(Fragment(tag=FragmentTag.REASONING, text=reasoning))
    content = getattr(delta, "content", None)
    if isinstance(content, str) and content:
        fragments.append(Fragment(tag=FragmentTag.CONTENT, text=content))
    return fragments


class LiteLLMProvider(ModelProvider):
    """Streaming adapter powered by LiteLLM.

    Calls litellm.acompletion(stream=True) with the configured model,
    credential, and base URL. The credential is passed in explicitly;
    nothing is read from process-wide state.
    """

    def __init__(self, config: ModelConfig, api_key: str, *, timeout: int = 120) -> None:
        super().__init__(config)
        self._api_key = api_key
        self._timeout = timeout

    async def stream(self, prompt: str) -> AsyncIterator[Fragment]:
        """Stream fragments for one prompt via LiteLLM.

        Raises:
            UpstreamError: On any LiteLLM, openai SDK, httpx, or timeout
                error, before or during the stream.
        """
        kwargs = self._build_completion_kwargs(prompt)
        logger.debug("Streaming request to %s", self._config.model)

        try:
            response = await litellm.acompletion(**kwargs)
            async for chunk in response:
                for fragment in chunk_fragments(chunk):
                    yield fragment
        except _UPSTREAM_ERRORS as e:
            raise UpstreamError(describe_error(e)) from e

    def _build_completion_kwargs(self, prompt: str) -> dict:
        """Build the kwargs dict for litellm.acompletion."""
        kwargs: dict = {
            "model": self._config.model,
            "messages": [{"role": "user", "content": prompt}],
            "stream": True,
            "max_tokens": self._config.max_tokens,
            "temperature": self._config.temperature,
            "timeout": float(self._timeout),
            "api_key": self._api_key,
        }

        if self._config.api_base:
            kwargs["api_base"] = self._config.api_base

        return kwargs
