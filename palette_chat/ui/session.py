"""Per-tab chat state.

Everything here lives in memory for one browser tab and is gone on reload.
"""

import base64
import json
from collections.abc import Callable
from dataclasses import dataclass, field

from palette_chat.models.schemas import AnalysisMode, ChatMessage, ColorEntry
from palette_chat.parsing.palette_parser import PaletteStreamParser

COLORS_MESSAGE = "Here are the main colors from your image:"


@dataclass(frozen=True)
class SelectedImage:
    """An image picked in the upload widget."""

    name: str
    data: bytes
    content_type: str

    @property
    def size_kb(self) -> float:
        return len(self.data) / 1024

    @property
    def data_url(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.content_type};base64,{encoded}"


@dataclass
class TurnRequest:
    """Everything needed to send one user turn to the API.

    Attributes:
        mode: Analysis mode chosen for this turn.
        question: The user's text, possibly empty for a bare upload.
        image: Image to send (new upload or the last one for follow-ups).
        palette: Current palette, sent as context with follow-ups.
    """

    mode: AnalysisMode
    question: str
    image: SelectedImage | None = None
    palette: list[ColorEntry] = field(default_factory=list)

    def form_fields(self) -> dict[str, str]:
        """Multipart form fields for the image endpoint."""
        fields = {"mode": self.mode.value}
        if self.question:
            fields["question"] = self.question
        if self.mode is AnalysisMode.FOLLOWUP and self.palette:
            fields["current_palette"] = json.dumps(
                [{"name": c.name, "hex": c.hex, "rgb": c.rgb_string} for c in self.palette]
            )
        return fields


class ChatSession:
    """Manages chat state for a user session."""

    def __init__(self, on_palette_change: Callable[[], None] | None = None) -> None:
        self.messages: list[ChatMessage] = []
        self.palette: list[ColorEntry] = []
        self._on_palette_change = on_palette_change
        self.pending_image: SelectedImage | None = None
        self.last_image: SelectedImage | None = None
        self.is_streaming: bool = False
        self._turn: TurnRequest | None = None
        self._parser = PaletteStreamParser()
        self._response: ChatMessage | None = None

    @property
    def current_turn(self) -> TurnRequest | None:
        return self._turn

    @property
    def response_message(self) -> ChatMessage | None:
        """The assistant message being streamed, once text has arrived."""
        return self._response

    def add_message(self, role: str, content: str, image_preview: str | None = None) -> ChatMessage:
        message = ChatMessage(role=role, content=content, image_preview=image_preview)
        self.messages.append(message)
        return message

    def select_image(self, name: str, data: bytes, content_type: str | None) -> SelectedImage:
        """Attach an image to the next message.

        Raises:
            ValueError: If the file is not an image.
        """
        content_type = content_type or ""
        if not content_type.startswith("image/"):
            raise ValueError(f"{name} is not an image")
        self.pending_image = SelectedImage(name=name, data=data, content_type=content_type)
        return self.pending_image

    def clear_pending_image(self) -> None:
        self.pending_image = None

    def begin_turn(self, text: str) -> TurnRequest | None:
        """Record the user's message and decide what to ask the API.

        A new image triggers a full analysis. Text after an earlier upload
        becomes a follow-up about that image. Text with no image at all is
        sent as a plain question.

        Args:
            text: Raw input box contents.

        Returns:
            The request to send, or None if there is nothing to send.
        """
        text = text.strip()
        if self.is_streaming or (not text and self.pending_image is None):
            return None

        image = self.pending_image
        if image is not None:
            note = f"Selected image: {image.name} ({image.size_kb:.1f} KB)"
            content = f"{text}\n\n{note}" if text else note
            self.add_message("user", content, image_preview=image.data_url)
            turn = TurnRequest(mode=AnalysisMode.FULL, question=text, image=image)
            # A new image starts a new palette
            self._set_palette([])
            self.last_image = image
            self.pending_image = None
        else:
            self.add_message("user", text)
            if self.last_image is not None:
                turn = TurnRequest(
                    mode=AnalysisMode.FOLLOWUP,
                    question=text,
                    image=self.last_image,
                    palette=list(self.palette),
                )
            else:
                turn = TurnRequest(mode=AnalysisMode.TEXT_ONLY, question=text)

        self._turn = turn
        self._parser = PaletteStreamParser()
        self._response = None
        self.is_streaming = True
        return turn

    def apply_chunk(self, delta: str) -> bool:
        """Add streamed text to the in-progress response.

        Args:
            delta: Newly received text.

        Returns:
            True if the palette changed.
        """
        if self._turn is None or not delta:
            return False

        colors = self._parser.feed(delta)
        if colors and self._turn.mode is not AnalysisMode.TEXT_ONLY:
            self._set_palette(colors)
        else:
            colors = None

        if self._turn.mode is AnalysisMode.TEXT_ONLY:
            content = self._parser.text.strip()
        else:
            content = self._parser.display_text

        if self._response is None:
            self._response = self.add_message("assistant", content)
        else:
            self._response.content = content
        return colors is not None

    def complete_turn(self) -> None:
        if self._turn is not None and self._turn.mode is AnalysisMode.FULL and self.palette:
            self.add_message("assistant", COLORS_MESSAGE)
        self._finish()

    def fail_turn(self, error: str) -> None:
        self.add_message("assistant", f"Error: {error}")
        if self._turn is not None and self._turn.mode is AnalysisMode.FULL:
            self._set_palette([])
        self._finish()

    def reset(self) -> None:
        """Start a new chat."""
        self.messages.clear()
        self._set_palette([])
        self.pending_image = None
        self.last_image = None
        self._finish()

    def _set_palette(self, colors: list[ColorEntry]) -> None:
        if colors == self.palette:
            return
        self.palette = colors
        if self._on_palette_change is not None:
            self._on_palette_change()

    def _finish(self) -> None:
        self.is_streaming = False
        self._turn = None
        self._response = None
