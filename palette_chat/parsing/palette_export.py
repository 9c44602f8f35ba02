"""Palette export to downloadable JSON and PNG files."""

import io
import json
import logging

from PIL import Image, ImageDraw, ImageFont

from palette_chat.models.schemas import ColorEntry
from palette_chat.parsing.palette_parser import contrast_text_color

logger = logging.getLogger(__name__)

JSON_FILENAME = "color-palette.json"
PNG_FILENAME = "color-palette.png"

# Swatch layout (pixels)
BLOCK_WIDTH = 100
BLOCK_HEIGHT = 50
TEXT_HEIGHT = 15


class PaletteExportError(Exception):
    """Raised when there is nothing to export."""

    pass


def _require_colors(colors: list[ColorEntry]) -> None:
    if not colors:
        raise PaletteExportError("No colors to export")


def export_palette_json(colors: list[ColorEntry]) -> bytes:
    """Serialize a palette as an indented JSON array.

    Args:
        colors: Palette to export.

    Returns:
        UTF-8 JSON bytes, one ``{"name", "hex", "rgb"}`` object per color.

    Raises:
        PaletteExportError: If the palette is empty.
    """
    _require_colors(colors)
    data = [{"name": c.name, "hex": c.hex, "rgb": c.rgb_string} for c in colors]
    return json.dumps(data, indent=2).encode("utf-8")


def export_palette_png(colors: list[ColorEntry]) -> bytes:
    """Render a palette as a strip of swatches with name and hex labels.

    Args:
        colors: Palette to export.

    Returns:
        PNG image bytes.

    Raises:
        PaletteExportError: If the palette is empty.
    """
    _require_colors(colors)

    width = BLOCK_WIDTH * len(colors)
    height = BLOCK_HEIGHT + TEXT_HEIGHT * 2 + 20

    image = Image.new("RGB", (width, height), "#ffffff")
    draw = ImageDraw.Draw(image)
    font = ImageFont.load_default()

    for index, color in enumerate(colors):
        x = index * BLOCK_WIDTH
        # Labels sit on the swatch color so the contrast color stays legible
        draw.rectangle([x, 0, x + BLOCK_WIDTH - 1, height - 1], fill=color.rgb)

        label_color = contrast_text_color(color.hex)
        for row, label in enumerate((color.name, color.hex)):
            # Centered horizontally
            text_width = draw.textlength(label, font=font)
            position = (
                x + max((BLOCK_WIDTH - text_width) / 2, 0),
                BLOCK_HEIGHT + 4 + row * TEXT_HEIGHT,
            )
            draw.text(position, label, fill=label_color, font=font)

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    logger.debug(f"Rendered palette PNG ({width}x{height}, {len(colors)} colors)")
    return buffer.getvalue()
