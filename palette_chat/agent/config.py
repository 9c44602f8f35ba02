"""Agent configuration with environment variable loading.

Pydantic-based configuration for the vision agent.
Supports Google Gemini (default) and OpenAI or OpenAI-compatible APIs.
"""

import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Load environment variables from .env file
load_dotenv()

Provider = Literal["gemini", "openai"]

_DEFAULT_MODELS: dict[str, str] = {
    "gemini": "gemini-1.5-flash",
    "openai": "gpt-4o-mini",
}

_PROVIDER_KEY_VARS: dict[str, str] = {
    "gemini": "GOOGLE_API_KEY",
    "openai": "OPENAI_API_KEY",
}


def _env_provider() -> str:
    return os.getenv("LLM_PROVIDER", "gemini").strip().lower()


def _env_api_key() -> str:
    key_var = _PROVIDER_KEY_VARS.get(_env_provider(), "GOOGLE_API_KEY")
    return os.getenv("LLM_API_KEY") or os.getenv(key_var, "")


class AgentConfig(BaseModel):
    """Configuration for the vision agent.

    Attributes:
        provider: Model provider, 'gemini' or 'openai'.
        api_key: API key for model access.
        base_url: API base URL for OpenAI-compatible servers (None for default).
        model_name: Model identifier to use.
        temperature: Sampling temperature (0.0 = deterministic, 2.0 = creative).
        max_tokens: Maximum tokens in generated response.
    """

    # Environment-provided defaults go through the same validators
    model_config = ConfigDict(validate_default=True)

    provider: Provider = Field(
        default_factory=_env_provider,
        description="Model provider",
    )
    api_key: str = Field(
        default_factory=_env_api_key,
        description="API key for LLM provider",
    )
    base_url: str | None = Field(
        default_factory=lambda: os.getenv("LLM_BASE_URL") or None,
        description="API base URL (OpenAI-compatible providers only)",
    )
    model_name: str = Field(
        default="",
        description="Model to use (provider default when empty)",
    )
    temperature: float = Field(
        default_factory=lambda: float(os.getenv("LLM_TEMPERATURE", "0.7")),
        ge=0.0,
        le=2.0,
        description="Sampling temperature for response generation",
    )
    max_tokens: int = Field(
        default_factory=lambda: int(os.getenv("LLM_MAX_TOKENS", "2048")),
        ge=1,
        le=128000,
        description="Maximum tokens in generated response",
    )

    @field_validator("provider", mode="before")
    @classmethod
    def normalize_provider(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError(
                "API key required. Set LLM_API_KEY or GOOGLE_API_KEY / OPENAI_API_KEY in .env"
            )
        return v.strip()

    @model_validator(mode="after")
    def default_model_for_provider(self) -> "AgentConfig":
        """Fill in the model name from LLM_MODEL or the provider default."""
        if not self.model_name:
            self.model_name = os.getenv("LLM_MODEL") or _DEFAULT_MODELS[self.provider]
        return self


def get_agent_config() -> AgentConfig:
    """Create agent configuration from environment.

    Returns:
        Configured AgentConfig instance.

    Raises:
        ValueError: If no API key is set.
    """
    return AgentConfig()
