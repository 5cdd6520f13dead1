"""
Tool dispatcher.

Resolves a tool by name, invokes it, and turns the outcome into a Step:
an ``observe`` step on success, an ``error`` step otherwise.  A tool
succeeds when ``invoke`` returns and fails when it raises; returned values
are passed on untouched.
"""

import inspect
import json
import logging
from typing import Any, Optional

from ..errors import ToolExecutionError, ToolNotFound
from ..models.step import Step
from .registry import ToolRegistry

logger = logging.getLogger(__name__)

MAX_ERROR_CHARS = 500


def serialize_result(result: Any) -> str:
    """Render a tool return value as observation text."""
    if isinstance(result, str):
        return result
    return json.dumps(result, ensure_ascii=False, default=str)


class ToolDispatcher:
    """Invokes registered tools on behalf of the model."""

    def __init__(self, registry: Optional[ToolRegistry] = None):
        self.registry = registry if registry is not None else ToolRegistry()

    def resolve(self, name: str):
        """
        Look up a tool.

        Raises:
            ToolNotFound: The registry is empty or has no such tool.
        """
        if len(self.registry) == 0:
            raise ToolNotFound(name, "No tools provided")
        tool = self.registry.get(name)
        if tool is None:
            raise ToolNotFound(name)
        return tool

    async def invoke(self, name: str, tool_input: dict) -> Any:
        """
        Invoke a tool and return its raw result.

        Raises:
            ToolNotFound: The tool is not registered.
            ToolExecutionError: The tool raised.
        """
        tool = self.resolve(name)
        try:
            result = tool.invoke(tool_input)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            message = str(e) or type(e).__name__
            if len(message) > MAX_ERROR_CHARS:
                message = message[:MAX_ERROR_CHARS] + "..."
            raise ToolExecutionError(name, message) from e
        return result

    async def dispatch(self, name: str, tool_input: dict) -> Step:
        """Invoke a tool and report the outcome as a Step."""
        try:
            result = await self.invoke(name, tool_input)
            try:
                content = serialize_result(result)
            except (TypeError, ValueError, RecursionError) as e:
                raise ToolExecutionError(name, f"unserializable result: {e}") from e
        except ToolNotFound as e:
            logger.warning("Unknown tool: %s", name)
            return Step.error(str(e))
        except ToolExecutionError as e:
            logger.error("Tool '%s' execution failed: %s", name, e.message)
            return Step.error(str(e))

        logger.debug("Tool '%s' succeeded", name)
        return Step.observe(content)
