"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - sample_png: Small generated PNG image
    - full_response_tokens: Streamed model output for a full analysis
    - fake_service: Stand-in for the vision agent service
    - async_client: HTTPX client for API testing, wired to fake_service

Implements async fixtures with proper cleanup.
"""

import io
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from PIL import Image

from palette_chat.agent.vision_agent import ImageInput, ModelStreamError
from palette_chat.api import app
from palette_chat.api.chat import get_vision_service

FULL_RESPONSE_TOKENS = [
    "A red barn ",
    "stands in a green field under a blue sky.\n\n",
    "Main Colors:\n",
    "1. Name: Barn Red, Hex: #8B1A1A, ",
    "RGB: (139, 26, 26)\n",
    "2. Name: Meadow Green, Hex: #4CAF50, RGB: (76, 175, 80)\n",
    "3. Name: Sky Blue, Hex: #87CEEB, RGB: (135, 206, 235)",
]


class FakeVisionService:
    """Records prompts and replays canned tokens instead of calling a model."""

    def __init__(self, tokens: list[str], error: str | None = None) -> None:
        self.tokens = tokens
        self.error = error
        self.calls: list[tuple[str, ImageInput | None]] = []

    async def stream_response(
        self, prompt: str, image: ImageInput | None = None
    ) -> AsyncGenerator[str]:
        self.calls.append((prompt, image))
        for token in self.tokens:
            yield token
        if self.error is not None:
            raise ModelStreamError(self.error)


@pytest.fixture
def sample_png() -> bytes:
    """Return a small solid-color PNG.

    Returns:
        PNG bytes for an 8x8 red image.
    """
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), (200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def full_response_tokens() -> list[str]:
    return list(FULL_RESPONSE_TOKENS)


@pytest.fixture
def fake_service(full_response_tokens: list[str]) -> FakeVisionService:
    return FakeVisionService(full_response_tokens)


@pytest.fixture
async def async_client(fake_service: FakeVisionService) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient whose requests hit the fake service.
    """
    app.dependency_overrides[get_vision_service] = lambda: fake_service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
