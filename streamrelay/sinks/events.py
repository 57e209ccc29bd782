"""Server-Sent-Events sink for the HTTP front door.

Content fragments become ``data: {"content": ...}`` frames queued for the
HTTP response to drain. The relay's outcome is queued last, which lets
the front door find out whether the relay failed before anything was
produced, so it can still answer with a plain JSON error.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator
from typing import Any

from streamrelay.schemas.streaming import Fragment, FragmentTag, RelayOutcome
from streamrelay.sinks.base import FragmentSink

DONE_EVENT = "data: [DONE]\n\n"


def format_event(data: dict[str, Any]) -> str:
    """Serialize one payload as an SSE data frame."""
    return f"data: {json.dumps(data, ensure_ascii=False)}\n\n"


class EventSink(FragmentSink):
    """Queues SSE frames for one HTTP response.

    Reasoning fragments are not forwarded to the browser.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[str | RelayOutcome] = asyncio.Queue()
        self._pending: str | RelayOutcome | None = None

    async def send(self, fragment: Fragment) -> None:
        if fragment.tag != FragmentTag.CONTENT:
            return
        await self._queue.put(format_event({"content": fragment.text}))

    async def finish(self, outcome: RelayOutcome) -> None:
        await self._queue.put(outcome)

    async def wait_first(self) -> RelayOutcome | None:
        """Wait until the first frame or the outcome is available.

        Returns:
            The outcome if the relay ended before producing any frame,
            otherwise None (the first frame is held for events()).
        """
        item = await self._queue.get()
        self._pending = item
        return item if isinstance(item, RelayOutcome) else None

    async def events(self) -> AsyncIterator[str]:
        """Yield SSE frames until the relay finishes.

        Ends with DONE_EVENT when the relay completed; a failed relay
        ends the stream without it.
        """
        item = self._pending if self._pending is not None else await self._queue.get()
        self._pending = None
        while True:
            if isinstance(item, RelayOutcome):
                if item.completed:
                    yield DONE_EVENT
                return
            yield item
            item = await self._queue.get()
