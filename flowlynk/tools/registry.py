"""
Tool Registry - the named capabilities an agent may call.

A registry is built once when an agent is configured and is only read
while a run is in flight.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Iterator, Optional


class Tool(ABC):
    """A named capability the model can request through an action step."""

    name: str
    description: str
    parameters: dict[str, str]  # param_name -> type label

    def describe(self) -> dict:
        """Metadata shown to the model."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": dict(self.parameters),
        }

    @abstractmethod
    def invoke(self, tool_input: dict) -> Any:
        """
        Run the tool.

        May return a value or an awaitable. Raising signals failure.
        """


class FunctionTool(Tool):
    """Adapts a plain (sync or async) callable to the Tool interface."""

    def __init__(
        self,
        name: str,
        description: str,
        parameters: dict[str, str],
        handler: Callable[[dict], Any],
    ):
        self.name = name
        self.description = description
        self.parameters = parameters
        self.handler = handler

    def invoke(self, tool_input: dict) -> Any:
        return self.handler(tool_input)

    def __repr__(self) -> str:
        return f"FunctionTool(name={self.name!r})"


class ToolRegistry:
    """Mapping from tool name to Tool."""

    def __init__(self, tools: Optional[list[Tool]] = None):
        self._tools: dict[str, Tool] = {}
        for tool in tools or ():
            self.register(tool)

    def register(self, tool: Tool) -> Tool:
        """Register a tool. Names must be unique."""
        if not tool.name:
            raise ValueError("tool name must not be empty")
        if tool.name in self._tools:
            raise ValueError(f"tool '{tool.name}' is already registered")
        self._tools[tool.name] = tool
        return tool

    def register_function(
        self,
        name: str,
        description: str,
        parameters: dict[str, str],
        handler: Callable[[dict], Any],
    ) -> Tool:
        """Register a callable as a tool."""
        return self.register(FunctionTool(name, description, parameters, handler))

    def get(self, name: str) -> Optional[Tool]:
        """Get a tool by name."""
        return self._tools.get(name)

    def all_tools(self) -> dict[str, Tool]:
        """Get a copy of all registered tools."""
        return self._tools.copy()

    def get_tools_summary(self) -> str:
        """Get formatted summary of all tools for prompts."""
        lines = []
        for name, tool in self._tools.items():
            params = ", ".join(
                f"{param}: {label}" for param, label in tool.parameters.items()
            )
            lines.append(f"- {name}: {tool.description}\n  Required input: {{ {params} }}")
        return "\n".join(lines)

    def clear(self) -> None:
        """Remove every tool (mainly for testing)."""
        self._tools.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[Tool]:
        return iter(list(self._tools.values()))
