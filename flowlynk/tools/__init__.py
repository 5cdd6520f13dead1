"""
FlowLynk Tools Package

- registry: Tool interface and ToolRegistry
- dispatcher: ToolDispatcher, runs tools for action steps
- builtin: calculate and current_time
"""

from .registry import FunctionTool, Tool, ToolRegistry
from .dispatcher import ToolDispatcher, serialize_result
from .builtin import calculate, current_time, default_registry

__all__ = [
    "FunctionTool",
    "Tool",
    "ToolRegistry",
    "ToolDispatcher",
    "serialize_result",
    "calculate",
    "current_time",
    "default_registry",
]
