"""Agno vision agent service with streaming support.

Core module for image description, palette extraction and follow-up answers.

Architecture Decisions:

1. **Stateless Agent** - No storage and no history. Follow-up questions carry
   the image and the current palette again, so each request is
   self-contained and nothing outlives the browser tab.

2. **Singleton Pattern** - Model client setup happens once. The singleton
   reuses the same agent instance across all requests rather than
   recreating it per-request.

3. **Service Wrapper** - Decouples our API from Agno's interface. Provider
   selection (Gemini or OpenAI), image wrapping and error translation live
   in one place.

4. **Streaming Generator** - Agno yields run events with metadata. We keep
   only content deltas, giving the SSE endpoint a plain ``str`` stream.
"""

import logging
from collections.abc import AsyncGenerator
from dataclasses import dataclass

from agno.agent import Agent
from agno.media import Image
from agno.models.base import Model
from agno.models.google import Gemini
from agno.models.openai import OpenAIChat
from agno.run.agent import RunEvent

from palette_chat.agent.config import AgentConfig, get_agent_config

logger = logging.getLogger(__name__)


class ModelStreamError(Exception):
    """Raised when the model call fails or reports an error."""

    pass


@dataclass(frozen=True)
class ImageInput:
    """Raw image bytes forwarded to the model."""

    data: bytes
    mime_type: str
    filename: str | None = None


class VisionAgentService:
    """Service for managing the Agno vision agent.

    Wraps Agno's Agent with:
    - Provider selection from configuration
    - Image attachment handling
    - Clean streaming interface for SSE endpoints
    - Centralized error handling
    """

    def __init__(self, config: AgentConfig | None = None) -> None:
        """Initialize the agent service.

        Args:
            config: Optional agent configuration.
                    Loads from environment if not provided.
        """
        self._config = config or get_agent_config()
        self._agent = self._create_agent()

    @property
    def model_name(self) -> str:
        return self._config.model_name

    def _create_model(self) -> Model:
        """Create the provider model.

        Returns:
            Agno Gemini or OpenAIChat model.
        """
        if self._config.provider == "openai":
            return OpenAIChat(
                id=self._config.model_name,
                api_key=self._config.api_key,
                base_url=self._config.base_url,
                temperature=self._config.temperature,
                max_tokens=self._config.max_tokens,
            )

        return Gemini(
            id=self._config.model_name,
            api_key=self._config.api_key,
            temperature=self._config.temperature,
            max_output_tokens=self._config.max_tokens,
        )

    def _create_agent(self) -> Agent:
        """Create the Agno agent instance.

        Returns:
            Configured Agent without storage or history.
        """
        logger.info(
            f"Creating vision agent ({self._config.provider}: {self._config.model_name})"
        )
        return Agent(
            model=self._create_model(),
            description="An assistant that describes images and their dominant colors.",
            instructions=[
                "Follow the requested response format exactly.",
                "Report colors as 6-digit hex codes and RGB values in [0, 255].",
            ],
            # Output as markdown for rich formatting in UI
            markdown=True,
        )

    @staticmethod
    def _images(image: ImageInput | None) -> list[Image] | None:
        if image is None:
            return None
        return [Image(content=image.data, mime_type=image.mime_type)]

    async def stream_response(
        self,
        prompt: str,
        image: ImageInput | None = None,
    ) -> AsyncGenerator[str]:
        """Stream response chunks for a prompt.

        Yields response tokens as they arrive.

        Args:
            prompt: Full prompt text.
            image: Optional image to analyze.

        Yields:
            Response text chunks as they arrive.

        Raises:
            ModelStreamError: If the model call fails.
        """
        try:
            response_stream = self._agent.arun(
                prompt,
                images=self._images(image),
                stream=True,
            )

            async for chunk in response_stream:
                event = getattr(chunk, "event", None)
                if event == RunEvent.run_error.value:
                    raise ModelStreamError(str(chunk.content or "Model run failed"))
                if event != RunEvent.run_content.value:
                    continue
                if isinstance(chunk.content, str) and chunk.content:
                    yield chunk.content

        except ModelStreamError:
            raise
        except Exception as e:
            logger.error(f"Model stream failed: {e}")
            raise ModelStreamError(str(e) or type(e).__name__) from e


# Module-level singleton instance
_agent_service: VisionAgentService | None = None


def get_agent_service() -> VisionAgentService:
    """Get or create the global agent service.

    Uses singleton pattern for resource efficiency.

    Returns:
        The VisionAgentService instance.

    Raises:
        ValueError: If the configuration is incomplete (e.g. no API key).
    """
    global _agent_service
    if _agent_service is None:
        _agent_service = VisionAgentService()
    return _agent_service
