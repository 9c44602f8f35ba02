"""Streaming chat endpoints.

Forwards an image and/or question to the vision agent and relays the
token stream to the browser as Server-Sent Events.
"""

import logging
from collections.abc import AsyncGenerator, AsyncIterator

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import StreamingResponse

from palette_chat.agent.prompts import build_prompt
from palette_chat.agent.vision_agent import (
    ImageInput,
    ModelStreamError,
    VisionAgentService,
    get_agent_service,
)
from palette_chat.models.schemas import (
    AnalysisMode,
    ColorEntry,
    StreamChunk,
    StreamStatus,
    TextChatRequest,
)
from palette_chat.parsing.palette_parser import PaletteParseError, palette_from_json

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])

MAX_IMAGE_SIZE = 10 * 1024 * 1024  # 10MB

STREAM_FAILED_MESSAGE = "Model stream failed"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def get_vision_service() -> VisionAgentService:
    """Resolve the agent service, reporting missing configuration as a 500.

    Raises:
        HTTPException: 500 if the service cannot be configured.
    """
    try:
        return get_agent_service()
    except ValueError as e:
        logger.error(f"Agent configuration error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Server configuration error: {e}",
        ) from e


def _sse(chunk: StreamChunk) -> str:
    return f"data: {chunk.model_dump_json()}\n\n"


async def relay_stream(tokens: AsyncIterator[str]) -> AsyncGenerator[str]:
    """Wrap model tokens as SSE lines.

    Emits a 'received' status first, one chunk per token, and exactly one
    final ``done=true`` chunk: 'complete' on success, 'error' on failure.

    Args:
        tokens: Text deltas from the model.

    Yields:
        SSE-formatted ``data:`` lines.
    """
    yield _sse(StreamChunk(content="", done=False, status=StreamStatus.RECEIVED))

    try:
        async for token in tokens:
            yield _sse(StreamChunk(content=token, done=False, status=StreamStatus.GENERATING))
    except ModelStreamError as e:
        logger.error(f"Stream aborted: {e}")
        yield _sse(
            StreamChunk(
                content="",
                done=True,
                status=StreamStatus.ERROR,
                error=str(e) or STREAM_FAILED_MESSAGE,
            )
        )
        return

    yield _sse(StreamChunk(content="", done=True, status=StreamStatus.COMPLETE))


def _event_stream(tokens: AsyncIterator[str]) -> StreamingResponse:
    return StreamingResponse(
        relay_stream(tokens),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


async def _read_image(image: UploadFile | None) -> ImageInput:
    """Read and validate an uploaded image.

    Args:
        image: The uploaded file, if any.

    Returns:
        Image bytes and MIME type.

    Raises:
        HTTPException: 400 if missing, empty or not an image; 413 if too large.
    """
    if image is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No image file provided",
        )

    data = await image.read()

    if not data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No image file provided",
        )

    content_type = image.content_type or ""
    if not content_type.startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only image files are accepted",
        )

    if len(data) > MAX_IMAGE_SIZE:
        size_mb = len(data) / (1024 * 1024)
        raise HTTPException(
            status_code=status.HTTP_413_CONTENT_TOO_LARGE,
            detail=f"Image size ({size_mb:.1f}MB) exceeds maximum allowed (10MB)",
        )

    return ImageInput(data=data, mime_type=content_type, filename=image.filename)


def _read_palette(raw: str | None) -> list[ColorEntry]:
    if not raw or not raw.strip():
        return []
    try:
        return palette_from_json(raw)
    except PaletteParseError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e


@router.post("/image/stream")
async def stream_image_chat(
    image: UploadFile | None = File(None),
    mode: AnalysisMode = Form(AnalysisMode.FULL),
    question: str | None = Form(None),
    current_palette: str | None = Form(None),
    service: VisionAgentService = Depends(get_vision_service),
) -> StreamingResponse:
    """Analyze an image, or answer a follow-up question about it.

    Args:
        image: The image (multipart/form-data).
        mode: 'full' for description and palette, 'followup' for a question.
        question: The user's question (required for follow-ups).
        current_palette: JSON palette from the previous analysis.
        service: Vision agent service.

    Returns:
        Server-Sent Events stream of StreamChunk payloads.

    Raises:
        400: Missing or invalid image, question or palette.
        413: Image exceeds 10MB limit.
        500: Server is missing its model configuration.
    """
    if mode is AnalysisMode.TEXT_ONLY:
        image_input = None
    else:
        image_input = await _read_image(image)

    palette = _read_palette(current_palette)

    try:
        prompt = build_prompt(mode, question=question, palette=palette)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e

    if image_input is not None:
        logger.info(
            f"Streaming {mode.value} analysis for {image_input.filename or 'image'} "
            f"({len(image_input.data)} bytes)"
        )
    return _event_stream(service.stream_response(prompt, image=image_input))


@router.post("/stream")
async def stream_text_chat(
    request: TextChatRequest,
    service: VisionAgentService = Depends(get_vision_service),
) -> StreamingResponse:
    """Answer a question that has no image attached.

    Args:
        request: JSON body with the question.
        service: Vision agent service.

    Returns:
        Server-Sent Events stream of StreamChunk payloads.
    """
    prompt = build_prompt(AnalysisMode.TEXT_ONLY, question=request.question)
    logger.info("Streaming text-only answer")
    return _event_stream(service.stream_response(prompt))
