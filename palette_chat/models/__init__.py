"""Pydantic models for API requests, stream payloads and UI state.

Provides type safety, validation, and automatic OpenAPI documentation.

Models:
    - AnalysisMode: full analysis, follow-up question, or text-only
    - ColorEntry: One palette color (name, hex, RGB)
    - ChatMessage: Individual message in the chat window
    - TextChatRequest: Incoming JSON question payload
    - StreamChunk: One server-sent event payload
"""

from palette_chat.models.schemas import (
    AnalysisMode,
    ChatMessage,
    ColorEntry,
    StreamChunk,
    StreamStatus,
    TextChatRequest,
)

__all__ = [
    "AnalysisMode",
    "ChatMessage",
    "ColorEntry",
    "StreamChunk",
    "StreamStatus",
    "TextChatRequest",
]
