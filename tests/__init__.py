"""Test package for Palette Chat.

Structure:
    - unit/: Individual function and class tests
    - integration/: Endpoint and stream-client tests against the real app

The model is replaced by a fake service through a FastAPI dependency
override; live model tests are skipped without an API key.
Leverages pytest with pytest-check for soft assertions.
"""
