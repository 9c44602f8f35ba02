"""Palette parsing utilities for streamed model output.

Turns free-form model text into structured colors and back.

Responsibilities:
    - Regex extraction of "Name / Hex / RGB" lines from partial text
    - Separating the description from the "Main Colors:" section
    - Palette serialization for prompts and browser round-trips
    - JSON and PNG export for download

Nothing here looks at image pixels; the model does all color analysis.
"""

from palette_chat.parsing.palette_export import (
    PaletteExportError,
    export_palette_json,
    export_palette_png,
)
from palette_chat.parsing.palette_parser import (
    PaletteParseError,
    PaletteStreamParser,
    contrast_text_color,
    format_palette,
    palette_from_json,
    parse_color_info,
    strip_main_colors_section,
)

__all__ = [
    "PaletteExportError",
    "PaletteParseError",
    "PaletteStreamParser",
    "contrast_text_color",
    "export_palette_json",
    "export_palette_png",
    "format_palette",
    "palette_from_json",
    "parse_color_info",
    "strip_main_colors_section",
]
