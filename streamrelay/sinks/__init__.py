"""Fragment sinks: downstream consumers of relayed text."""

from streamrelay.sinks.base import FragmentSink
from streamrelay.sinks.console import ConsoleSink
from streamrelay.sinks.events import DONE_EVENT, EventSink, format_event

__all__ = [
    "DONE_EVENT",
    "ConsoleSink",
    "EventSink",
    "FragmentSink",
    "format_event",
]
