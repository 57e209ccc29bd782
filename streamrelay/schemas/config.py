"""Configuration schemas for model variants and runtime defaults.

Loaded from the TOML files under streamrelay/config by the registry and
passed explicitly into providers, the relay, and the HTTP front door.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ModelConfig(BaseModel):
    """Configuration for a single upstream model variant.

    Loaded from models.toml. Each entry provides the LiteLLM routing
    information and the sampling parameters sent with every request.
    """

    provider: str = Field(description="Provider identifier (e.g. 'deepseek')")
    model: str = Field(description="LiteLLM model identifier (e.g. 'deepseek/deepseek-chat')")
    display_name: str = Field(description="Human-friendly model name for CLI output")
    api_key_env: str = Field(description="Environment variable name holding the API key")
    api_base: str = Field(default="", description="Custom API base URL (empty = provider default)")
    max_tokens: int = Field(default=1000, gt=0, description="Completion token limit per request")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Sampling temperature")
    supports_reasoning: bool = Field(
        default=False,
        description="Whether the model streams a separate reasoning channel",
    )


class RelaySettings(BaseModel):
    """Runtime defaults shared by the CLI and the HTTP front door.

    Loaded from defaults.toml.
    """

    default_model: str = Field(default="chat", description="Registry key used by `chat`")
    reasoning_model: str = Field(
        default="reasoner", description="Registry key used by `reason`"
    )
    timeout: int = Field(default=120, gt=0, description="Upstream call timeout in seconds")
    host: str = Field(default="0.0.0.0", description="Server bind address")
    port: int = Field(default=3000, gt=0, lt=65536, description="Server port")
    chat_batch_delay: float = Field(
        default=2.0, ge=0.0, description="Seconds between `chat --batch` prompts"
    )
    reason_batch_delay: float = Field(
        default=3.0, ge=0.0, description="Seconds between `reason --batch` prompts"
    )
