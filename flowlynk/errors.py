"""
Error taxonomy for FlowLynk.

Only ConfigurationError is surfaced to callers of ``run()`` as a distinct
outcome; every other error is converted into a terminal error step by the
orchestration loop.
"""

from typing import Optional


class FlowLynkError(Exception):
    """Base class for all FlowLynk errors."""


class ConfigurationError(FlowLynkError):
    """A required setting (usually the API key) is missing."""


class TransportError(FlowLynkError):
    """The model request failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class EmptyResponseError(FlowLynkError):
    """The model answered without any content."""


class ParseError(FlowLynkError):
    """The model output could not be parsed as a JSON object."""


class ProtocolViolation(FlowLynkError):
    """The parsed step does not follow the step protocol."""


class ToolNotFound(FlowLynkError):
    """The requested tool is not registered."""

    def __init__(self, tool_name: str, message: Optional[str] = None):
        super().__init__(message or f"Tool not found: {tool_name}")
        self.tool_name = tool_name


class ToolExecutionError(FlowLynkError):
    """A tool raised while being invoked."""

    def __init__(self, tool_name: str, message: str):
        super().__init__(f"Tool '{tool_name}' execution error: {message}")
        self.tool_name = tool_name
        self.message = message
