"""NiceGUI interface - thin visualization layer for chat interactions.

Delivers a web UI with real-time updates.

Responsibilities:
    - Chat message display with streaming support
    - Image upload and preview
    - Live palette swatches parsed from the streamed text
    - Palette export as JSON or PNG

Holds per-tab state only. Delegates all model work to the API.
"""
