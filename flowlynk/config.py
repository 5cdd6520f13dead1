"""
Configuration management for FlowLynk.

Loads all configuration from environment variables with sensible defaults
for local development.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _optional_float(name: str) -> Optional[float]:
    value = os.getenv(name, "")
    return float(value) if value else None


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name, "")
    return int(value) if value else None


@dataclass
class ModelConfig:
    """Configuration for the chat model endpoint."""
    base_url: str = os.getenv("FLOWLYNK_BASE_URL", "")
    model: str = os.getenv("FLOWLYNK_MODEL", "gpt-4o-mini")
    api_key: str = os.getenv("FLOWLYNK_API_KEY", "") or os.getenv("OPENAI_API_KEY", "")
    temperature: Optional[float] = field(
        default_factory=lambda: _optional_float("FLOWLYNK_TEMPERATURE")
    )
    max_tokens: Optional[int] = field(
        default_factory=lambda: _optional_int("FLOWLYNK_MAX_TOKENS")
    )
    timeout: float = float(os.getenv("FLOWLYNK_TIMEOUT", "60"))
    max_retries: int = int(os.getenv("FLOWLYNK_MAX_RETRIES", "2"))
    # Unset means the loop runs until the model produces a terminal step.
    max_steps: Optional[int] = field(
        default_factory=lambda: _optional_int("FLOWLYNK_MAX_STEPS")
    )


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse observability.

    Tracing auto-enables when both public_key and secret_key are provided.
    """
    public_key: str = os.getenv("LANGFUSE_PUBLIC_KEY", "")
    secret_key: str = os.getenv("LANGFUSE_SECRET_KEY", "")
    host: str = os.getenv("LANGFUSE_HOST", "")
    debug: bool = os.getenv("LANGFUSE_DEBUG", "false").lower() == "true"

    @property
    def enabled(self) -> bool:
        """Auto-enable when both keys are configured."""
        return bool(self.public_key and self.secret_key)


@dataclass
class Config:
    """Main configuration container."""
    model: ModelConfig
    langfuse: LangfuseConfig
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def get_config() -> Config:
    """Get the application configuration."""
    return Config(
        model=ModelConfig(),
        langfuse=LangfuseConfig(),
    )


# Global config instance
config = get_config()
