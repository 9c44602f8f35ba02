"""HTTP client for the streaming chat endpoints."""

import asyncio
import json
import logging
import os
from collections.abc import AsyncGenerator, AsyncIterator, Callable

import httpx

from palette_chat.models.schemas import AnalysisMode
from palette_chat.ui.session import TurnRequest

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8000

STREAM_FAILED_MESSAGE = "Model stream failed"

# Longest gap allowed between two SSE lines
CHUNK_TIMEOUT = 10.0


def api_base_url() -> str:
    """Where the UI reaches the API.

    ``API_BASE_URL`` wins; otherwise the API is assumed to listen locally on
    ``PORT``, which is where both run modes serve it.
    """
    explicit = os.getenv("API_BASE_URL", "").strip()
    if explicit:
        return explicit.rstrip("/")
    return f"http://localhost:{os.getenv('PORT', str(DEFAULT_PORT))}"


class StreamTimeoutError(Exception):
    """Raised when the server goes quiet mid-stream."""

    pass


async def iter_with_timeout(lines: AsyncIterator[str], timeout: float) -> AsyncGenerator[str]:
    """Yield from ``lines``, failing if any single item takes too long.

    Raises:
        StreamTimeoutError: If no item arrives within ``timeout`` seconds.
    """
    while True:
        try:
            line = await asyncio.wait_for(anext(lines), timeout=timeout)
        except StopAsyncIteration:
            return
        except TimeoutError as e:
            raise StreamTimeoutError(
                f"Stream timeout: No data received for {timeout:g} seconds"
            ) from e
        yield line


def _error_detail(response: httpx.Response) -> str:
    try:
        detail = response.json().get("detail")
    except (json.JSONDecodeError, AttributeError):
        detail = None
    if isinstance(detail, str) and detail:
        return f"HTTP {response.status_code}: {detail}"
    return f"HTTP {response.status_code}"


def _build_request(client: httpx.AsyncClient, turn: TurnRequest) -> httpx.Request:
    if turn.mode is AnalysisMode.TEXT_ONLY or turn.image is None:
        return client.build_request(
            "POST",
            "/chat/stream",
            json={"question": turn.question, "mode": AnalysisMode.TEXT_ONLY.value},
            headers={"Accept": "text/event-stream"},
        )
    image = turn.image
    return client.build_request(
        "POST",
        "/chat/image/stream",
        data=turn.form_fields(),
        files={"image": (image.name, image.data, image.content_type)},
        headers={"Accept": "text/event-stream"},
    )


async def _consume(
    client: httpx.AsyncClient,
    turn: TurnRequest,
    on_chunk: Callable[[str], None],
    on_status: Callable[[str], None],
    on_complete: Callable[[], None],
    on_error: Callable[[str], None],
    chunk_timeout: float,
) -> None:
    try:
        response = await client.send(_build_request(client, turn), stream=True)
    except httpx.RequestError as e:
        on_error(f"Connection failed: {e}")
        return

    try:
        if response.is_error:
            await response.aread()
            on_error(_error_detail(response))
            return

        async for line in iter_with_timeout(response.aiter_lines(), chunk_timeout):
            if not line.startswith("data: "):
                continue
            try:
                data = json.loads(line[6:])
            except json.JSONDecodeError:
                logger.warning(f"Skipping malformed stream line: {line!r}")
                continue
            if data.get("status") == "error" or data.get("error"):
                on_error(data.get("error") or STREAM_FAILED_MESSAGE)
                return
            if data.get("done"):
                on_complete()
                return
            if status := data.get("status"):
                on_status(status)
            if content := data.get("content"):
                on_chunk(content)

        on_error("Stream ended before the response completed")
    except StreamTimeoutError as e:
        on_error(str(e))
    except httpx.RequestError as e:
        on_error(f"Connection failed: {e}")
    finally:
        await response.aclose()


async def stream_chat_response(
    turn: TurnRequest,
    on_chunk: Callable[[str], None],
    on_status: Callable[[str], None],
    on_complete: Callable[[], None],
    on_error: Callable[[str], None],
    client: httpx.AsyncClient | None = None,
    chunk_timeout: float = CHUNK_TIMEOUT,
) -> None:
    """Send a turn and consume the SSE stream it produces.

    Image turns go to ``/chat/image/stream`` as multipart form data; text-only
    turns go to ``/chat/stream`` as JSON.

    Args:
        turn: The request built by ChatSession.begin_turn.
        on_chunk: Called with each text delta.
        on_status: Called with each status update.
        on_complete: Called once when the stream finishes successfully.
        on_error: Called once with a message if anything fails.
        client: Optional client to reuse; its base URL must point at the API.
        chunk_timeout: Longest allowed silence between SSE lines, in seconds.
    """
    if client is not None:
        await _consume(client, turn, on_chunk, on_status, on_complete, on_error, chunk_timeout)
        return

    async with httpx.AsyncClient(base_url=api_base_url(), timeout=120.0) as owned:
        await _consume(owned, turn, on_chunk, on_status, on_complete, on_error, chunk_timeout)
