"""Abstract base class for fragment sinks."""

from __future__ import annotations

from abc import ABC, abstractmethod

from streamrelay.schemas.streaming import Fragment, RelayOutcome


class FragmentSink(ABC):
    """Receives the fragments of one relay session, then its outcome.

    A sink instance belongs to a single relay invocation; any presentation
    state it keeps (such as which headers were printed) is per session.
    """

    @abstractmethod
    async def send(self, fragment: Fragment) -> None:
        """Forward one fragment downstream as soon as it arrives."""

    @abstractmethod
    async def finish(self, outcome: RelayOutcome) -> None:
        """Called exactly once when the relay completes or fails."""
