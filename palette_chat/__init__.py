"""Palette Chat - image description and color palettes from a hosted vision model.

Combines FastAPI for HTTP streaming, Agno for model access,
NiceGUI for the chat interface, and Pydantic for data validation.

Components:
    - api: HTTP endpoints and streaming responses
    - agent: Vision model orchestration and prompts
    - parsing: Palette extraction from streamed text, palette export
    - ui: Web interface for chat interactions
    - models: Request, stream and UI schemas
"""

__version__ = "0.1.0"
