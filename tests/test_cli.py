"""Tests for the CLI interface.

Covers the chat, reason, serve and models commands via CliRunner with the
upstream model stubbed out.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from streamrelay import __version__
from streamrelay.cli import CHAT_BATCH_PROMPTS, REASON_BATCH_PROMPTS, app
from streamrelay.providers.base import ModelProvider, UpstreamError
from streamrelay.schemas.config import ModelConfig
from streamrelay.schemas.streaming import Fragment, FragmentTag, RelayError

# NO_COLOR=1 prevents Rich from injecting ANSI codes inside option names,
# which breaks substring matching in CI (headless, no TTY).
# COLUMNS=200 prevents wrapping that could split a flag across lines.
runner = CliRunner(env={"NO_COLOR": "1", "COLUMNS": "200"})


# ── Helpers ───────────────────────────────────────────────────


class _StubProvider(ModelProvider):
    """Stands in for LiteLLMProvider; records every constructed instance."""

    instances: list[_StubProvider] = []
    fragments: list[Fragment] = []
    error: RelayError | None = None
    crash_on: set[str] = set()

    def __init__(self, config: ModelConfig, api_key: str, *, timeout: int = 120) -> None:
        super().__init__(config)
        self.api_key = api_key
        self.timeout = timeout
        self.prompts: list[str] = []
        _StubProvider.instances.append(self)

    async def stream(self, prompt: str):
        self.prompts.append(prompt)
        for fragment in self.fragments:
            yield fragment
        if prompt in self.crash_on:
            raise RuntimeError("unexpected library error")
        if self.error is not None:
            raise UpstreamError(self.error)


@pytest.fixture(autouse=True)
def _stub_environment(monkeypatch):
    """Stub the provider, skip .env loading, and provide a key."""
    _StubProvider.instances = []
    _StubProvider.fragments = [Fragment(tag=FragmentTag.CONTENT, text="4")]
    _StubProvider.error = None
    _StubProvider.crash_on = set()
    monkeypatch.setenv("DEEPSEEK_API_KEY", "sk-test")
    monkeypatch.delenv("PORT", raising=False)
    with (
        patch("streamrelay.cli.LiteLLMProvider", _StubProvider),
        patch("streamrelay.cli.load_keys_env"),
    ):
        yield


# ── Global options ────────────────────────────────────────────


class TestGlobalOptions:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("chat", "reason", "serve", "models"):
            assert command in result.output

    def test_verbose_flag(self):
        result = runner.invoke(app, ["--verbose", "chat", "hi"])
        assert result.exit_code == 0


# ── chat ──────────────────────────────────────────────────────


class TestChatCommand:
    def test_streams_answer(self):
        result = runner.invoke(app, ["chat", "2+2=?"])

        assert result.exit_code == 0
        provider = _StubProvider.instances[0]
        assert provider.prompts == ["2+2=?"]
        assert provider.api_key == "sk-test"
        assert provider.config.model == "deepseek/deepseek-chat"
        assert provider.timeout == 120
        assert "Answer length: 1 characters" in result.output

    def test_default_prompt(self):
        result = runner.invoke(app, ["chat"])

        assert result.exit_code == 0
        assert "history of artificial intelligence" in _StubProvider.instances[0].prompts[0]

    def test_model_option(self):
        result = runner.invoke(app, ["chat", "--model", "reasoner", "hi"])

        assert result.exit_code == 0
        assert _StubProvider.instances[0].config.model == "deepseek/deepseek-reasoner"

    def test_unknown_model(self):
        result = runner.invoke(app, ["chat", "--model", "nope", "hi"])

        assert result.exit_code == 1
        assert "Unknown model" in result.output
        assert _StubProvider.instances == []

    def test_missing_key_exits_before_request(self, monkeypatch):
        monkeypatch.delenv("DEEPSEEK_API_KEY", raising=False)

        result = runner.invoke(app, ["chat", "hi"])

        assert result.exit_code == 1
        assert "DEEPSEEK_API_KEY" in result.output
        assert _StubProvider.instances == []

    def test_batch_runs_canned_prompts(self):
        with patch("streamrelay.cli.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            result = runner.invoke(app, ["chat", "first", "--batch"])

        assert result.exit_code == 0
        provider = _StubProvider.instances[0]
        assert provider.prompts == ["first", *CHAT_BATCH_PROMPTS]
        # Delay only between batch prompts
        assert mock_sleep.await_count == len(CHAT_BATCH_PROMPTS) - 1
        mock_sleep.assert_awaited_with(2.0)
        assert "Batch complete" in result.output

    def test_upstream_failure_reported_not_fatal(self):
        _StubProvider.fragments = []
        _StubProvider.error = RelayError(
            reason="authentication", message="Invalid key", status_code=401,
        )

        result = runner.invoke(app, ["chat", "hi"])

        assert result.exit_code == 0
        assert "Request failed: Invalid key" in result.output
        assert "HTTP status: 401" in result.output


    def test_unexpected_error_does_not_stop_batch(self):
        _StubProvider.crash_on = {"first", CHAT_BATCH_PROMPTS[1]}

        with patch("streamrelay.cli.asyncio.sleep", new_callable=AsyncMock):
            result = runner.invoke(app, ["chat", "first", "--batch"])

        assert result.exit_code == 0
        assert _StubProvider.instances[0].prompts == ["first", *CHAT_BATCH_PROMPTS]
        assert result.output.count("Request failed: unexpected library error") == 2
        assert result.output.count("Stream complete") == len(CHAT_BATCH_PROMPTS) - 1
        assert "Batch complete" in result.output


# ── reason ────────────────────────────────────────────────────


class TestReasonCommand:
    def test_uses_reasoner_and_prints_both_sections(self):
        _StubProvider.fragments = [
            Fragment(tag=FragmentTag.REASONING, text="Light scatters."),
            Fragment(tag=FragmentTag.CONTENT, text="Rayleigh scattering."),
        ]

        result = runner.invoke(app, ["reason"])

        assert result.exit_code == 0
        provider = _StubProvider.instances[0]
        assert provider.config.model == "deepseek/deepseek-reasoner"
        assert provider.prompts == ["Why is the sky blue?"]
        assert result.output.count("Reasoning:") == 1
        assert result.output.count("Answer:") == 1
        assert "Total length: 35 characters" in result.output

    def test_batch_delay(self):
        with patch("streamrelay.cli.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            result = runner.invoke(app, ["reason", "q", "--batch"])

        assert result.exit_code == 0
        assert _StubProvider.instances[0].prompts == ["q", *REASON_BATCH_PROMPTS]
        mock_sleep.assert_awaited_with(3.0)


# ── serve ─────────────────────────────────────────────────────


class TestServeCommand:
    def test_runs_uvicorn_with_defaults(self):
        with patch("streamrelay.cli.uvicorn.run") as mock_run:
            result = runner.invoke(app, ["serve"])

        assert result.exit_code == 0
        mock_run.assert_called_once()
        assert mock_run.call_args.kwargs["port"] == 3000
        assert mock_run.call_args.kwargs["host"] == "0.0.0.0"
        assert "POST http://localhost:3000/api/chat" in result.output

    def test_port_from_environment(self, monkeypatch):
        monkeypatch.setenv("PORT", "4567")
        with patch("streamrelay.cli.uvicorn.run") as mock_run:
            result = runner.invoke(app, ["serve"])

        assert result.exit_code == 0
        assert mock_run.call_args.kwargs["port"] == 4567

    def test_port_option_wins(self, monkeypatch):
        monkeypatch.setenv("PORT", "4567")
        with patch("streamrelay.cli.uvicorn.run") as mock_run:
            result = runner.invoke(app, ["serve", "--port", "9000"])

        assert result.exit_code == 0
        assert mock_run.call_args.kwargs["port"] == 9000

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("DEEPSEEK_API_KEY", raising=False)
        with patch("streamrelay.cli.uvicorn.run", new=MagicMock()) as mock_run:
            result = runner.invoke(app, ["serve"])

        assert result.exit_code == 1
        mock_run.assert_not_called()


# ── models ────────────────────────────────────────────────────


class TestModelsCommand:
    def test_lists_variants(self):
        result = runner.invoke(app, ["models"])

        assert result.exit_code == 0
        assert "deepseek/deepseek-chat" in result.output
        assert "deepseek/deepseek-reasoner" in result.output

    def test_shows_provider_column(self):
        result = runner.invoke(app, ["models"])

        assert result.exit_code == 0
        assert "Provider" in result.output
        row = next(line for line in result.output.splitlines() if "deepseek/deepseek-chat" in line)
        cells = [cell.strip() for cell in row.replace("|", "│").split("│")]
        assert "deepseek" in cells
