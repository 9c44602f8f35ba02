import re
import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

HEX_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")


class AnalysisMode(str, Enum):
    """What the model is asked to do with a request."""

    FULL = "full"
    FOLLOWUP = "followup"
    TEXT_ONLY = "text-only"


class StreamStatus(str, Enum):
    """Status values for streaming updates."""

    RECEIVED = "received"
    GENERATING = "generating"
    COMPLETE = "complete"
    ERROR = "error"


class ColorEntry(BaseModel):
    """A single palette color as reported by the model.

    Attributes:
        name: Descriptive color name.
        hex: Hex code in ``#RRGGBB`` form, upper-cased.
        rgb: Red, green and blue components in [0, 255].
    """

    name: str = Field(..., min_length=1)
    hex: str
    rgb: tuple[int, int, int]

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("hex")
    @classmethod
    def validate_hex(cls, v: str) -> str:
        """Require a 6-digit hex code with a leading '#'."""
        v = v.strip()
        if not HEX_PATTERN.match(v):
            raise ValueError(f"Invalid hex color: {v!r}")
        return v.upper()

    @field_validator("rgb", mode="before")
    @classmethod
    def parse_rgb_string(cls, v: object) -> object:
        """Accept the "(r, g, b)" form used in exported palettes."""
        if isinstance(v, str):
            parts = re.findall(r"-?\d+", v)
            if len(parts) != 3:
                raise ValueError(f"Invalid RGB value: {v!r}")
            return tuple(int(p) for p in parts)
        return v

    @field_validator("rgb")
    @classmethod
    def validate_rgb(cls, v: tuple[int, int, int]) -> tuple[int, int, int]:
        """Reject components outside the 0-255 range."""
        if any(not 0 <= c <= 255 for c in v):
            raise ValueError(f"RGB components must be in [0, 255], got {v}")
        return v

    @property
    def rgb_string(self) -> str:
        r, g, b = self.rgb
        return f"({r}, {g}, {b})"

    @classmethod
    def from_hex(cls, name: str, hex_code: str) -> "ColorEntry":
        """Build an entry, deriving the RGB triple from the hex code."""
        digits = hex_code.strip().lstrip("#")
        if len(digits) != 6:
            raise ValueError(f"Invalid hex color: {hex_code!r}")
        rgb = (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))
        return cls(name=name, hex=f"#{digits}", rgb=rgb)


class ChatMessage(BaseModel):
    """A message shown in the chat window.

    Attributes:
        role: Either 'user' or 'assistant'.
        content: Message text (markdown for the assistant).
        image_preview: Optional data URL of an attached image.
        id: Identifier used to update a message while it streams.
        time: Display timestamp.
    """

    role: str = Field(..., pattern="^(user|assistant)$")
    content: str = ""
    image_preview: str | None = None
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    time: str = Field(default_factory=lambda: datetime.now().strftime("%I:%M %p"))


class TextChatRequest(BaseModel):
    """JSON payload for a question without an image.

    Attributes:
        question: The user's question.
        mode: Always text-only on the JSON endpoint.
    """

    question: str = Field(..., min_length=1)
    mode: AnalysisMode = AnalysisMode.TEXT_ONLY

    @field_validator("question", mode="before")
    @classmethod
    def strip_question(cls, v: str) -> str:
        """Strip whitespace from question before validation."""
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("mode")
    @classmethod
    def require_text_only(cls, v: AnalysisMode) -> AnalysisMode:
        if v is not AnalysisMode.TEXT_ONLY:
            raise ValueError("Image analysis requires a multipart upload")
        return v


class StreamChunk(BaseModel):
    """A chunk of streamed response data.

    Attributes:
        content: The text content of this chunk.
        done: Whether this is the final chunk.
        status: Current processing status (received, generating, complete, error).
        error: Error message if something went wrong.
    """

    content: str
    done: bool
    status: StreamStatus | None = None
    error: str | None = None
