"""Palette extraction from free-form model output.

The model is prompted to end its description with a "Main Colors:" section
in a fixed ``N. Name: ..., Hex: #RRGGBB, RGB: (r, g, b)`` format. Text arrives
as a token stream. Each color sits on its own line, so the stream parser scans
every finished line once and re-checks only the unfinished last line.
"""

import json
import logging
import re

from pydantic import ValidationError

from palette_chat.models.schemas import ColorEntry

logger = logging.getLogger(__name__)

MAIN_COLORS_HEADING = "Main Colors:"

COLOR_PATTERN = re.compile(
    r"(\d+)\.\s*Name:\s*([^,]+),\s*Hex:\s*(#[0-9A-Fa-f]{6}),\s*"
    r"RGB:\s*\((\d+),\s*(\d+),\s*(\d+)\)"
)


class PaletteParseError(Exception):
    """Raised when a serialized palette cannot be read."""

    pass


def parse_color_info(text: str) -> list[ColorEntry]:
    """Extract every complete color line from model output.

    Args:
        text: Accumulated response text.

    Returns:
        Colors in the order they appear. Lines with out-of-range RGB
        values are skipped.
    """
    colors: list[ColorEntry] = []
    for match in COLOR_PATTERN.finditer(text):
        _, name, hex_code, r, g, b = match.groups()
        try:
            colors.append(
                ColorEntry(name=name, hex=hex_code, rgb=(int(r), int(g), int(b)))
            )
        except ValidationError as e:
            logger.warning(f"Skipping invalid color line {match.group(0)!r}: {e}")
    return colors


def strip_main_colors_section(text: str) -> str:
    """Return the description part of a response, without the palette list."""
    index = text.find(MAIN_COLORS_HEADING)
    if index == -1:
        return text.strip()
    return text[:index].strip()


def format_palette(colors: list[ColorEntry]) -> str:
    """Render a palette in the same numbered format the model produces."""
    return "\n".join(
        f"{i}. Name: {c.name}, Hex: {c.hex}, RGB: {c.rgb_string}"
        for i, c in enumerate(colors, start=1)
    )


def palette_from_json(raw: str) -> list[ColorEntry]:
    """Load a palette sent back by the browser.

    Args:
        raw: JSON array of ``{"name", "hex", "rgb"}`` objects. ``rgb`` may be
            a ``"(r, g, b)"`` string or a three-element list.

    Returns:
        Validated color entries.

    Raises:
        PaletteParseError: If the JSON is malformed or an entry is invalid.
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise PaletteParseError(f"Palette is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise PaletteParseError("Palette must be a JSON array")

    try:
        return [ColorEntry.model_validate(item) for item in data]
    except ValidationError as e:
        raise PaletteParseError(f"Invalid palette entry: {e}") from e


def contrast_text_color(hex_code: str) -> str:
    """Pick dark or light text for a background color (YIQ brightness).

    Accepts ``#RGB`` and ``#RRGGBB``.
    """
    c = hex_code.strip().lstrip("#")
    if len(c) == 3:
        c = "".join(ch * 2 for ch in c)
    r, g, b = int(c[0:2], 16), int(c[2:4], 16), int(c[4:6], 16)
    yiq = (r * 299 + g * 587 + b * 114) / 1000
    return "#222" if yiq >= 128 else "#fff"


class PaletteStreamParser:
    """Incrementally parse a palette out of streamed text.

    Feed each text delta as it arrives. ``feed`` returns the palette only
    when it differs from the last one seen, so callers re-render the
    swatches only on change.
    """

    def __init__(self) -> None:
        self._text = ""
        # Offset of the first character not yet covered by a finished line
        self._scanned = 0
        self._finished: list[ColorEntry] = []
        self._palette: list[ColorEntry] = []

    @property
    def text(self) -> str:
        return self._text

    @property
    def display_text(self) -> str:
        return strip_main_colors_section(self.text)

    @property
    def palette(self) -> list[ColorEntry]:
        return list(self._palette)

    def feed(self, delta: str) -> list[ColorEntry] | None:
        if not delta:
            return None
        self._text += delta

        newline = delta.rfind("\n")
        if newline != -1:
            line_end = len(self._text) - len(delta) + newline + 1
            self._finished.extend(parse_color_info(self._text[self._scanned : line_end]))
            self._scanned = line_end
        colors = self._finished + parse_color_info(self._text[self._scanned :])

        if colors and colors != self._palette:
            self._palette = colors
            return list(colors)
        return None
