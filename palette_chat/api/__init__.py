"""FastAPI endpoints for the palette chat.

HTTP and streaming routes with async request handling.
Supports Server-Sent Events for real-time response streaming.

Endpoints:
    - GET /health: Service health status
    - POST /chat/image/stream: Image analysis and follow-up questions
    - POST /chat/stream: Text-only questions
"""

from palette_chat.api.app import app, create_app

__all__ = ["app", "create_app"]
