"""FastAPI front door for the SSE chat relay.

Serves the static chat page and relays POST /api/chat to the upstream
model as a Server-Sent-Events stream. Each request gets its own
EventSink and relay task; the only shared object is the StreamRelay,
which holds nothing but read-only provider configuration.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse, Response, StreamingResponse
from pydantic import BaseModel, Field, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from streamrelay.relay import StreamRelay
from streamrelay.schemas.streaming import RelayError, RelayOutcome, RelayStatus
from streamrelay.sinks.events import EventSink

logger = logging.getLogger(__name__)

# Resolve the static directory relative to this file
_STATIC_DIR = Path(__file__).parent / "static"

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
}

_PREFLIGHT_HEADERS = {
    **_CORS_HEADERS,
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}

_SSE_HEADERS = {
    **_CORS_HEADERS,
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


class ChatRequest(BaseModel):
    """Body of POST /api/chat."""

    message: str = Field(min_length=1, description="The user's prompt")


async def _run_relay(relay: StreamRelay, prompt: str, sink: EventSink) -> None:
    """Run one relay session in the background.

    Unexpected errors are logged and reported to the sink as a failed
    outcome so the HTTP response always terminates.
    """
    try:
        await relay.relay(prompt, sink)
    except Exception as e:
        logger.exception("Relay task crashed")
        await sink.finish(RelayOutcome(
            status=RelayStatus.FAILED,
            error=RelayError(reason="internal error", message=str(e)),
        ))


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code, headers=_CORS_HEADERS)


def create_app(relay: StreamRelay, static_dir: Path | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        relay: The relay used for every /api/chat request.
        static_dir: Directory holding chat.html. Defaults to the
            package's static directory.
    """
    static_root = static_dir or _STATIC_DIR

    app = FastAPI(
        title="streamrelay",
        description="Relay streamed LLM output to the browser over SSE",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    # Strong references to running relay tasks; a task is dropped when done
    running: set[asyncio.Task] = set()
    app.state.relay_tasks = running

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # Unknown routes and wrong methods on known routes are both "not found"
        if exc.status_code in (404, 405):
            return _error_response(404, "Not found")
        return _error_response(exc.status_code, str(exc.detail))

    @app.options("/{path:path}")
    async def preflight(path: str) -> Response:
        """Answer CORS preflight requests on any path."""
        return Response(status_code=200, headers=_PREFLIGHT_HEADERS)

    # ── Static / UI ──────────────────────────────────────────────

    @app.get("/")
    @app.get("/chat")
    async def index() -> Response:
        """Serve the chat page."""
        page = static_root / "chat.html"
        if not page.is_file():
            return PlainTextResponse("File not found", status_code=404)
        return FileResponse(page, media_type="text/html; charset=utf-8")

    # ── Chat API ─────────────────────────────────────────────────

    @app.post("/api/chat")
    async def chat(request: Request) -> Response:
        """Relay one prompt as an SSE stream.

        The first frame (or the relay's outcome) is awaited before the
        response starts, so a relay that fails up front gets a JSON 500
        instead of a broken event stream.
        """
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Rejected /api/chat request with invalid JSON body")
            return _error_response(500, "Internal server error")

        try:
            chat_request = ChatRequest.model_validate(body)
        except ValidationError:
            return _error_response(400, "Field 'message' must be a non-empty string")
        if not chat_request.message.strip():
            return _error_response(400, "Field 'message' must be a non-empty string")

        sink = EventSink()
        task = asyncio.create_task(_run_relay(relay, chat_request.message, sink))
        running.add(task)
        task.add_done_callback(running.discard)

        early = await sink.wait_first()
        if early is not None and early.failed:
            reason = early.error.reason if early.error else "unknown"
            logger.error("Chat relay failed before streaming (%s)", reason)
            return _error_response(500, "Internal server error")

        return StreamingResponse(
            sink.events(),
            media_type="text/event-stream",
            headers=_SSE_HEADERS,
        )

    return app
