"""Streaming schemas for real-time fragment delivery.

Defines the Fragment model the relay forwards to sinks, and the
RelayOutcome reported when the upstream stream ends or fails.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field, computed_field


class FragmentTag(StrEnum):
    """Which upstream text channel a fragment came from."""

    REASONING = "reasoning"
    CONTENT = "content"


class Fragment(BaseModel):
    """A single piece of streamed text, tagged by channel."""

    tag: FragmentTag = Field(description="Channel the text belongs to")
    text: str = Field(min_length=1, description="New text in this fragment")


class RelayStatus(StrEnum):
    """Terminal status of one relay session."""

    COMPLETED = "completed"
    FAILED = "failed"


class RelayError(BaseModel):
    """Details of an upstream failure that aborted a relay."""

    reason: str = Field(description="Short classification, e.g. 'rate limit'")
    message: str = Field(default="", description="Full error message")
    status_code: int | None = Field(
        default=None, description="Upstream HTTP status code, when known"
    )
    code: str | None = Field(
        default=None, description="Provider error code, when known"
    )
    type: str | None = Field(
        default=None, description="Provider error type, when known"
    )


class RelayOutcome(BaseModel):
    """Result of one relay session: character counts and terminal status."""

    status: RelayStatus = Field(description="completed or failed")
    content_chars: int = Field(default=0, ge=0, description="Characters of answer text")
    reasoning_chars: int = Field(
        default=0, ge=0, description="Characters of reasoning text"
    )
    fragments: int = Field(default=0, ge=0, description="Fragments forwarded to the sink")
    error: RelayError | None = Field(
        default=None, description="Failure details when status is failed"
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_chars(self) -> int:
        return self.content_chars + self.reasoning_chars

    @property
    def completed(self) -> bool:
        return self.status == RelayStatus.COMPLETED

    @property
    def failed(self) -> bool:
        return self.status == RelayStatus.FAILED
