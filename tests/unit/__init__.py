"""Unit tests for individual components in isolation.

Coverage:
    - models/: Pydantic validation
    - parsing/: Palette extraction and export
    - agent/: Configuration, prompts and stream handling
    - ui/: Chat session state and stream timeouts
"""
