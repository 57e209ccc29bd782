"""Abstract base class for upstream model providers.

Defines the ModelProvider interface the relay consumes. The relay never
calls provider SDKs directly; it only iterates the fragments a provider
yields and handles the UpstreamError a provider raises.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from streamrelay.schemas.config import ModelConfig
from streamrelay.schemas.streaming import Fragment, RelayError


class UpstreamError(Exception):
    """An upstream transport or protocol failure.

    Carries a RelayError with whatever the provider could learn about the
    failure (status code, error code, error type).
    """

    def __init__(self, error: RelayError) -> None:
        super().__init__(error.message or error.reason)
        self.error = error


class ModelProvider(ABC):
    """Abstract interface for a streaming chat-completion backend.

    Initialized from a ModelConfig loaded from the TOML registry. Exposes
    identity and a single async stream() method that all providers must
    implement.
    """

    def __init__(self, config: ModelConfig) -> None:
        self._config = config

    # ── Identity ──────────────────────────────────────────────

    @property
    def model_id(self) -> str:
        """LiteLLM model identifier used for routing."""
        return self._config.model

    @property
    def display_name(self) -> str:
        """Human-friendly model name for CLI output."""
        return self._config.display_name

    @property
    def supports_reasoning(self) -> bool:
        """Whether the model streams a separate reasoning channel."""
        return self._config.supports_reasoning

    @property
    def config(self) -> ModelConfig:
        """The full ModelConfig backing this provider."""
        return self._config

    # ── Core interface ────────────────────────────────────────

    @abstractmethod
    def stream(self, prompt: str) -> AsyncIterator[Fragment]:
        """Issue one streaming request with the prompt as the sole user message.

        Yields fragments in arrival order. Within a single upstream chunk,
        the reasoning fragment (if any) is yielded before the content
        fragment. Chunks carrying no text yield nothing.

        Args:
            prompt: The user's input.

        Raises:
            UpstreamError: On any transport or protocol failure, whether
                raised when the request is issued or mid-stream.
        """
