"""The stream relay: one prompt in, tagged fragments out.

Issues a single streaming request through a ModelProvider and forwards
every fragment to a FragmentSink in arrival order, then reports a
RelayOutcome. The relay keeps no state between calls, so one instance
can serve many concurrent sessions.
"""

from __future__ import annotations

import logging

from streamrelay.providers.base import ModelProvider, UpstreamError
from streamrelay.schemas.streaming import (
    FragmentTag,
    RelayOutcome,
    RelayStatus,
)
from streamrelay.sinks.base import FragmentSink

logger = logging.getLogger(__name__)


class StreamRelay:
    """Relays one upstream stream to one sink per call."""

    def __init__(self, provider: ModelProvider) -> None:
        self._provider = provider

    @property
    def provider(self) -> ModelProvider:
        return self._provider

    async def relay(self, prompt: str, sink: FragmentSink) -> RelayOutcome:
        """Stream the answer to ``prompt`` into ``sink``.

        Fragments are forwarded as they arrive, never reordered or
        buffered. An upstream failure stops the relay at once; anything
        already sent to the sink stays sent. ``sink.finish`` is called
        exactly once with the outcome.

        Args:
            prompt: The user's input. Must not be empty.
            sink: Receives each fragment, then the outcome.

        Returns:
            RelayOutcome with per-tag character counts and the terminal
            status.

        Raises:
            ValueError: If the prompt is empty. Nothing is sent upstream.
        """
        if not prompt or not prompt.strip():
            raise ValueError("prompt must not be empty")

        counts = {FragmentTag.REASONING: 0, FragmentTag.CONTENT: 0}
        forwarded = 0
        error = None

        try:
            async for fragment in self._provider.stream(prompt):
                await sink.send(fragment)
                counts[fragment.tag] += len(fragment.text)
                forwarded += 1
        except UpstreamError as e:
            error = e.error
            logger.warning(
                "Relay via %s failed after %d fragments (%s)",
                self._provider.display_name, forwarded, error.reason,
            )

        outcome = RelayOutcome(
            status=RelayStatus.FAILED if error else RelayStatus.COMPLETED,
            content_chars=counts[FragmentTag.CONTENT],
            reasoning_chars=counts[FragmentTag.REASONING],
            fragments=forwarded,
            error=error,
        )
        logger.debug(
            "Relay %s: %d content chars, %d reasoning chars",
            outcome.status, outcome.content_chars, outcome.reasoning_chars,
        )
        await sink.finish(outcome)
        return outcome
