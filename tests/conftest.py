"""
Pytest configuration and fixtures for FlowLynk tests.
"""

import json
from typing import Optional

import pytest

from flowlynk.errors import ConfigurationError, TransportError
from flowlynk.llm_call import ChatClient, ModelParameters
from flowlynk.tools import ToolRegistry


def step_json(
    step: str,
    content: str = "",
    function: Optional[str] = None,
    input: Optional[dict] = None,
) -> str:
    """Build a wire step as the model would return it."""
    return json.dumps(
        {"step": step, "content": content, "function": function, "input": input}
    )


class FakeChatClient(ChatClient):
    """Chat client replaying a script of responses (or exceptions)."""

    def __init__(self, responses, configured: bool = True):
        self.responses = list(responses)
        self.requests: list[list[dict]] = []
        self.params = ModelParameters(model="fake-model", temperature=0.0)
        self.configured = configured
        self.closed = False

    def check_configured(self) -> None:
        if not self.configured:
            raise ConfigurationError("API key is required")

    async def complete(self, messages: list[dict]) -> Optional[str]:
        self.requests.append([dict(m) for m in messages])
        if not self.responses:
            raise TransportError("script exhausted")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def echo_calls():
    """Inputs received by the echo tool."""
    return []


@pytest.fixture
def echo_registry(echo_calls):
    """Registry with an 'echo' tool that always succeeds with {"ok": true}."""
    registry = ToolRegistry()

    def echo(params: dict) -> dict:
        echo_calls.append(params)
        return {"ok": True}

    registry.register_function(
        name="echo",
        description="Echo the input back",
        parameters={"text": "string"},
        handler=echo,
    )
    return registry


@pytest.fixture
def failing_registry():
    """Registry with a 'boom' tool that always raises."""
    registry = ToolRegistry()

    def boom(params: dict) -> dict:
        raise RuntimeError("disk on fire")

    registry.register_function(
        name="boom",
        description="Always fails",
        parameters={},
        handler=boom,
    )
    return registry
