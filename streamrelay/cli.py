"""streamrelay CLI — Typer + Rich terminal interface.

Commands: chat, reason, serve, models.
`chat` and `reason` stream one prompt to the console (and optionally a
fixed batch of prompts); `serve` runs the SSE front door.
"""

from __future__ import annotations

import asyncio
import logging

import typer
import uvicorn
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from streamrelay import __version__
from streamrelay.keys import MissingKeyError, load_keys_env, require_api_key
from streamrelay.providers.litellm_provider import LiteLLMProvider
from streamrelay.registry import get_model, load_models, load_settings
from streamrelay.relay import StreamRelay
from streamrelay.schemas.config import ModelConfig, RelaySettings
from streamrelay.schemas.streaming import RelayError, RelayOutcome, RelayStatus
from streamrelay.server import create_app
from streamrelay.sinks.console import ConsoleSink

logger = logging.getLogger(__name__)

console = Console()

app = typer.Typer(
    name="streamrelay",
    help="Stream chat-completion output to the terminal or the browser.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

DEFAULT_CHAT_PROMPT = (
    "Give a short introduction to the history of artificial intelligence, "
    "in about 200 words."
)
DEFAULT_REASON_PROMPT = "Why is the sky blue?"

CHAT_BATCH_PROMPTS = [
    "What is machine learning?",
    "Explain the basic concepts of deep learning.",
    "What are the applications of artificial intelligence in medicine?",
]

REASON_BATCH_PROMPTS = [
    "Why does water freeze?",
    "Why does the Earth rotate?",
    "Why do humans need sleep?",
    "Why are plants green?",
]


# ── Version / logging callback ─────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"streamrelay {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Enable debug logging.",
    ),
) -> None:
    """streamrelay — relay streamed LLM output to a terminal or a browser."""
    _configure_logging(verbose)
    # Load API keys from ~/.streamrelay/keys.env and .env
    load_keys_env()


# ── Helpers ──────────────────────────────────────────────────────


def _load_registry() -> dict[str, ModelConfig]:
    """Load the model registry, exit on error."""
    try:
        return load_models()
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error loading models:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None


def _load_settings() -> RelaySettings:
    """Load runtime defaults, exit on error."""
    try:
        return load_settings()
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error loading config:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None


def _build_relay(model_key: str, settings: RelaySettings) -> StreamRelay:
    """Resolve a model variant and its credential, exit if either is missing."""
    registry = _load_registry()
    try:
        config = get_model(registry, model_key)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None

    try:
        api_key = require_api_key(config)
    except MissingKeyError as e:
        console.print(f"[red]❌ Error: please set the {e.env_var} environment variable[/red]")
        console.print(f'💡 Usage: export {e.env_var}="your-api-key-here"')
        raise typer.Exit(1) from None

    provider = LiteLLMProvider(config, api_key, timeout=settings.timeout)
    return StreamRelay(provider)


async def _stream_one(relay: StreamRelay, prompt: str) -> RelayOutcome:
    """Relay one prompt to a fresh console sink.

    Unexpected errors are logged and reported on the console as a failed
    outcome so a batch carries on with the next prompt.
    """
    console.print(f"❓ Prompt: {prompt}\n", markup=False, highlight=False)
    sink = ConsoleSink(console)
    try:
        return await relay.relay(prompt, sink)
    except Exception as e:
        logger.exception("Relay crashed for prompt %r", prompt)
        outcome = RelayOutcome(
            status=RelayStatus.FAILED,
            error=RelayError(reason="internal error", message=str(e) or e.__class__.__name__),
        )
        await sink.finish(outcome)
        return outcome


async def _run_batch(relay: StreamRelay, prompts: list[str], delay: float) -> None:
    """Relay a fixed sequence of prompts with a pause between them."""
    console.print(f"\n🔄 Running batch of {len(prompts)} prompts...")

    for i, prompt in enumerate(prompts):
        console.print()
        console.rule(f"📋 Prompt {i + 1}/{len(prompts)}")
        await _stream_one(relay, prompt)

        if i < len(prompts) - 1:
            console.print(f"\n⏳ Waiting {delay:g}s before the next prompt...")
            await asyncio.sleep(delay)

    console.print("\n🎉 Batch complete!")


async def _demo(
    relay: StreamRelay,
    prompt: str,
    batch_prompts: list[str] | None,
    delay: float,
) -> None:
    await _stream_one(relay, prompt)
    if batch_prompts:
        await _run_batch(relay, batch_prompts, delay)


# ── Commands ─────────────────────────────────────────────────────


@app.command()
def chat(
    prompt: str = typer.Argument(DEFAULT_CHAT_PROMPT, help="Prompt to send."),
    batch: bool = typer.Option(
        False, "--batch",
        help="Afterwards, run a fixed batch of sample prompts.",
    ),
    model: str | None = typer.Option(
        None, "--model", "-m",
        help="Model registry key (default from defaults.toml).",
    ),
) -> None:
    """Stream a chat completion to the terminal."""
    settings = _load_settings()
    relay = _build_relay(model or settings.default_model, settings)

    console.print(f"[bold]🤖 {relay.provider.display_name} streaming demo[/bold]")
    console.rule()
    asyncio.run(_demo(
        relay, prompt,
        CHAT_BATCH_PROMPTS if batch else None,
        settings.chat_batch_delay,
    ))


@app.command()
def reason(
    prompt: str = typer.Argument(DEFAULT_REASON_PROMPT, help="Question to reason about."),
    batch: bool = typer.Option(
        False, "--batch",
        help="Afterwards, run a fixed batch of sample questions.",
    ),
) -> None:
    """Stream reasoning and the final answer from the reasoning model."""
    settings = _load_settings()
    relay = _build_relay(settings.reasoning_model, settings)

    console.print(f"[bold]🧠 {relay.provider.display_name} reasoning demo[/bold]")
    console.rule()
    asyncio.run(_demo(
        relay, prompt,
        REASON_BATCH_PROMPTS if batch else None,
        settings.reason_batch_delay,
    ))


@app.command()
def serve(
    port: int | None = typer.Option(
        None, "--port", "-p",
        help="Port to listen on (default: $PORT or defaults.toml).",
    ),
    host: str | None = typer.Option(
        None, "--host",
        help="Address to bind.",
    ),
    model: str | None = typer.Option(
        None, "--model", "-m",
        help="Model registry key (default from defaults.toml).",
    ),
) -> None:
    """Run the SSE chat server."""
    settings = _load_settings()
    relay = _build_relay(model or settings.default_model, settings)
    bind_host = host or settings.host
    bind_port = port or settings.port

    console.print(f"Server running at http://localhost:{bind_port}")
    console.print(f"Chat endpoint: POST http://localhost:{bind_port}/api/chat")
    uvicorn.run(create_app(relay), host=bind_host, port=bind_port, log_level="warning")


@app.command()
def models() -> None:
    """List the configured model variants."""
    registry = _load_registry()

    table = Table(title="Model Registry")
    table.add_column("Key", style="bold")
    table.add_column("Provider")
    table.add_column("Model")
    table.add_column("Display Name")
    table.add_column("API Key Env")
    table.add_column("Reasoning", justify="center")
    for key, cfg in sorted(registry.items()):
        table.add_row(
            key,
            cfg.provider,
            cfg.model,
            cfg.display_name,
            cfg.api_key_env,
            "✓" if cfg.supports_reasoning else "",
        )
    console.print(table)


# ── Entry point ──────────────────────────────────────────────────

if __name__ == "__main__":
    app()
