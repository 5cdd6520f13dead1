"""
Tests for the Tool Registry.

Tests cover tool registration, retrieval, and summary generation.
"""

import pytest

from flowlynk.tools import FunctionTool, Tool, ToolRegistry, default_registry


class UpperTool(Tool):
    name = "upper"
    description = "Uppercase text"
    parameters = {"text": "string"}

    def invoke(self, tool_input):
        return tool_input["text"].upper()


class TestToolRegistry:
    """Tests for the ToolRegistry class."""

    def test_register_and_get(self):
        registry = ToolRegistry()
        tool = registry.register(UpperTool())

        assert registry.get("upper") is tool
        assert "upper" in registry
        assert len(registry) == 1

    def test_get_nonexistent_tool(self):
        """Test retrieving a nonexistent tool returns None."""
        assert ToolRegistry().get("nonexistent_tool") is None

    def test_duplicate_name_rejected(self):
        registry = ToolRegistry([UpperTool()])
        with pytest.raises(ValueError):
            registry.register(UpperTool())

    def test_register_function(self):
        registry = ToolRegistry()
        tool = registry.register_function(
            name="add",
            description="Add two numbers",
            parameters={"a": "number", "b": "number"},
            handler=lambda p: p["a"] + p["b"],
        )

        assert isinstance(tool, FunctionTool)
        assert tool.invoke({"a": 2, "b": 3}) == 5

    def test_get_tools_summary(self):
        registry = ToolRegistry([UpperTool()])
        summary = registry.get_tools_summary()

        assert "- upper: Uppercase text" in summary
        assert "text: string" in summary

    def test_all_tools_returns_copy(self):
        """Test that all_tools returns a copy, not the internal mapping."""
        registry = ToolRegistry([UpperTool()])
        tools1 = registry.all_tools()
        tools2 = registry.all_tools()

        assert tools1 == tools2
        assert tools1 is not tools2

    def test_clear(self):
        registry = ToolRegistry([UpperTool()])
        registry.clear()
        assert len(registry) == 0

    def test_registries_are_independent(self):
        first = ToolRegistry([UpperTool()])
        second = ToolRegistry()
        assert "upper" in first
        assert "upper" not in second


class TestToolDescribe:
    def test_describe(self):
        assert UpperTool().describe() == {
            "name": "upper",
            "description": "Uppercase text",
            "parameters": {"text": "string"},
        }


class TestDefaultRegistry:
    def test_builtin_tools_registered(self):
        registry = default_registry()
        assert "calculate" in registry
        assert "current_time" in registry
        assert "expression" in registry.get("calculate").parameters

    def test_default_registry_is_fresh(self):
        assert default_registry() is not default_registry()
