"""Console sink: prints streamed fragments to a Rich console.

Each channel gets a one-time section header the first time one of its
fragments arrives. End-of-stream statistics or the failure details are
printed when the relay finishes.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

from streamrelay.schemas.streaming import Fragment, FragmentTag, RelayOutcome
from streamrelay.sinks.base import FragmentSink

_RULE_WIDTH = 60

_HEADERS: dict[FragmentTag, str] = {
    FragmentTag.REASONING: "[bold cyan]🔍 Reasoning:[/bold cyan]",
    FragmentTag.CONTENT: "[bold green]💡 Answer:[/bold green]",
}

_TEXT_STYLES: dict[FragmentTag, str] = {
    FragmentTag.REASONING: "dim",
    FragmentTag.CONTENT: "",
}


class ConsoleSink(FragmentSink):
    """Writes fragments to a console immediately upon receipt."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()
        self._reasoning_shown = False
        self._content_shown = False

    @property
    def console(self) -> Console:
        return self._console

    async def send(self, fragment: Fragment) -> None:
        if fragment.tag == FragmentTag.REASONING and not self._reasoning_shown:
            self._print_header(FragmentTag.REASONING)
            self._reasoning_shown = True
        elif fragment.tag == FragmentTag.CONTENT and not self._content_shown:
            if self._reasoning_shown:
                self._console.print("\n\n" + "═" * _RULE_WIDTH)
            self._print_header(FragmentTag.CONTENT)
            self._content_shown = True

        # Raw model text: no markup, emoji codes, highlighting or wrapping
        self._console.print(
            fragment.text,
            end="",
            style=_TEXT_STYLES[fragment.tag] or None,
            markup=False,
            emoji=False,
            highlight=False,
            soft_wrap=True,
        )
        self._console.file.flush()

    async def finish(self, outcome: RelayOutcome) -> None:
        self._console.print("\n\n" + "═" * _RULE_WIDTH)

        if outcome.failed and outcome.error is not None:
            error = outcome.error
            self._console.print(
                f"[red]❌ Request failed:[/red] {escape(error.message or error.reason)}",
                highlight=False,
            )
            if error.status_code is not None:
                self._console.print(f"HTTP status: {error.status_code}", highlight=False)
            if error.code:
                self._console.print(f"Error code: {error.code}", highlight=False)
            if error.type:
                self._console.print(f"Error type: {error.type}", highlight=False)
            return

        self._console.print("[bold]📊 Statistics:[/bold]")
        if self._reasoning_shown:
            self._console.print(
                f"🔍 Reasoning length: {outcome.reasoning_chars} characters",
                highlight=False,
            )
        self._console.print(
            f"💡 Answer length: {outcome.content_chars} characters", highlight=False
        )
        if self._reasoning_shown:
            self._console.print(
                f"📝 Total length: {outcome.total_chars} characters", highlight=False
            )
        self._console.print("[green]✅ Stream complete[/green]")

    def _print_header(self, tag: FragmentTag) -> None:
        self._console.print(_HEADERS[tag])
        self._console.print("─" * _RULE_WIDTH, style="dim")
