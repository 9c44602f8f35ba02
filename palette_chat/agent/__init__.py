"""Agno agent logic for image analysis.

Handles image description, palette extraction and follow-up questions
through a hosted vision model.

Responsibilities:
    - Agent initialization with Gemini or OpenAI models
    - Prompt construction per analysis mode
    - Streaming token generation coordination

Leverages the Agno framework for model access.
Maintains clean separation from the HTTP layer.
"""

from palette_chat.agent.config import AgentConfig, get_agent_config
from palette_chat.agent.prompts import build_prompt
from palette_chat.agent.vision_agent import (
    ImageInput,
    ModelStreamError,
    VisionAgentService,
    get_agent_service,
)

__all__ = [
    "AgentConfig",
    "ImageInput",
    "ModelStreamError",
    "VisionAgentService",
    "build_prompt",
    "get_agent_config",
    "get_agent_service",
]
