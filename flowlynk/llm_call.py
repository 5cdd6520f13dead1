"""
Chat model clients for FlowLynk.

The orchestration loop only needs something that takes the transcript and
returns raw text.  ``ChatClient`` is that seam:

- ``OpenAIChatClient``: any OpenAI-compatible endpoint (OpenAI, vLLM,
  Ollama's ``/v1``, ...) through the async OpenAI SDK
- ``CallableChatClient``: wraps a plain function, handy for tests and
  custom transports
"""

import inspect
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

from openai import AsyncOpenAI

from .config import config
from .errors import ConfigurationError, TransportError

logger = logging.getLogger(__name__)


@dataclass
class ModelParameters:
    """Generation parameters sent with every request."""
    model: str
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None


def default_parameters() -> ModelParameters:
    """Build parameters from the environment configuration."""
    return ModelParameters(
        model=config.model.model,
        temperature=config.model.temperature,
        max_tokens=config.model.max_tokens,
    )


class ChatClient(ABC):
    """Transport used by the orchestration loop."""

    params: ModelParameters

    def check_configured(self) -> None:
        """
        Verify the client can be used at all.

        Raises:
            ConfigurationError: A required setting is missing.
        """

    @abstractmethod
    async def complete(self, messages: list[dict]) -> Optional[str]:
        """
        Request one completion for the transcript.

        Returns:
            The raw response text (possibly empty or None).

        Raises:
            TransportError: The request failed.
        """

    async def close(self) -> None:
        """Release transport resources."""


class OpenAIChatClient(ChatClient):
    """Client for OpenAI-compatible chat completion endpoints."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        params: Optional[ModelParameters] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
    ):
        self.api_key = config.model.api_key if api_key is None else api_key
        self.base_url = base_url if base_url is not None else config.model.base_url
        self.params = params or default_parameters()
        self.timeout = timeout if timeout is not None else config.model.timeout
        self.max_retries = (
            max_retries if max_retries is not None else config.model.max_retries
        )
        self.last_usage: Any = None
        self._client: Optional[AsyncOpenAI] = None

    def check_configured(self) -> None:
        if not self.api_key:
            raise ConfigurationError("API key is required")

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            kwargs: dict = {
                "api_key": self.api_key,
                "timeout": self.timeout,
                "max_retries": self.max_retries,
            }
            if self.base_url:
                kwargs["base_url"] = self.base_url
            self._client = AsyncOpenAI(**kwargs)
        return self._client

    async def complete(self, messages: list[dict]) -> Optional[str]:
        self.check_configured()

        # The step protocol needs exactly one JSON object per turn
        create_kwargs: dict = {
            "model": self.params.model,
            "messages": messages,
            "response_format": {"type": "json_object"},
        }
        if self.params.temperature is not None:
            create_kwargs["temperature"] = self.params.temperature
        if self.params.max_tokens is not None:
            create_kwargs["max_tokens"] = self.params.max_tokens

        try:
            response = await self._get_client().chat.completions.create(**create_kwargs)
        except Exception as e:
            status_code = getattr(e, "status_code", None)
            logger.error("Chat completion failed: %s", e)
            raise TransportError(str(e) or type(e).__name__, status_code=status_code) from e

        self.last_usage = getattr(response, "usage", None)
        if not response.choices:
            return None
        return response.choices[0].message.content

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None


CompletionFunction = Callable[
    [list[dict], ModelParameters], Union[Optional[str], Awaitable[Optional[str]]]
]


class CallableChatClient(ChatClient):
    """Adapts ``fn(messages, params)`` (sync or async) to ChatClient."""

    def __init__(self, fn: CompletionFunction, params: Optional[ModelParameters] = None):
        self.fn = fn
        self.params = params or ModelParameters(model="custom")

    async def complete(self, messages: list[dict]) -> Optional[str]:
        try:
            result = self.fn(messages, self.params)
            if inspect.isawaitable(result):
                result = await result
        except TransportError:
            raise
        except Exception as e:
            logger.error("Completion function failed: %s", e)
            raise TransportError(str(e) or type(e).__name__) from e
        return result
