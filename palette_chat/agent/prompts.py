"""Prompt templates for each analysis mode."""

from palette_chat.models.schemas import AnalysisMode, ColorEntry
from palette_chat.parsing.palette_parser import MAIN_COLORS_HEADING, format_palette

FULL_ANALYSIS_PROMPT = f"""\
First, provide a detailed description of what you see in this image. Focus on:
- The main subject or content
- Any notable elements or patterns
- The overall composition
- Any text or symbols if present

Then, analyze and identify the 3 most dominant colors in the image.

For each color, provide:
- A descriptive name
- Hex code
- RGB value

Format your complete response exactly as follows:

[Your detailed description of the image]

{MAIN_COLORS_HEADING}
1. Name: [descriptive name], Hex: [hex code], RGB: [rgb value]
2. Name: [descriptive name], Hex: [hex code], RGB: [rgb value]
3. Name: [descriptive name], Hex: [hex code], RGB: [rgb value]"""

FOLLOWUP_PROMPT = """\
You are analyzing an image that was previously uploaded. The user has a follow-up question about it.

User's question: {question}
{palette_context}
Please provide a detailed and helpful response to their question, focusing specifically on \
what they're asking about in the image. If their question is about colors, make sure to \
reference the existing color palette in your response.

Format your response in a clear, conversational way."""

TEXT_ONLY_PROMPT = (
    "You are a helpful AI assistant. Please provide a clear and concise response "
    "to the following question: {question}"
)


def build_prompt(
    mode: AnalysisMode,
    question: str | None = None,
    palette: list[ColorEntry] | None = None,
) -> str:
    """Build the model prompt for a request.

    Args:
        mode: Requested analysis mode.
        question: The user's question, if any.
        palette: Palette from the previous analysis (follow-ups only).

    Returns:
        Prompt text to send alongside the image.

    Raises:
        ValueError: If a follow-up or text-only request has no question.
    """
    question = (question or "").strip()

    if mode is AnalysisMode.FULL:
        if question:
            return f"{FULL_ANALYSIS_PROMPT}\n\nThe user also asks: {question}"
        return FULL_ANALYSIS_PROMPT

    if not question:
        raise ValueError(f"A question is required in {mode.value} mode")

    if mode is AnalysisMode.FOLLOWUP:
        palette_context = ""
        if palette:
            palette_context = (
                "\nCurrent color palette from previous analysis:\n"
                f"{format_palette(palette)}\n"
            )
        return FOLLOWUP_PROMPT.format(question=question, palette_context=palette_context)

    return TEXT_ONLY_PROMPT.format(question=question)
