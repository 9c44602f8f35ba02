"""Integration tests for components working together as a system.

Coverage:
    - API endpoints with real HTTP requests through ASGITransport
    - SSE protocol framing and error chunks
    - The UI stream client and chat session against the real app

The model itself is faked unless an API key is configured.
"""
