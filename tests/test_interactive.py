"""Tests for the interactive CLI."""

import asyncio
import json
from unittest.mock import patch

import pytest

from flowlynk.interactive import InteractiveCLI, format_step, load_tools, main
from flowlynk.models import Step
from flowlynk.orchestration import OrchestrationLoop
from flowlynk.tools import ToolRegistry

from conftest import FakeChatClient, step_json


def _agent(responses, registry=None) -> OrchestrationLoop:
    return OrchestrationLoop(
        client=FakeChatClient(responses), system_prompt="test", registry=registry
    )


class TestLoadTools:
    def test_default_builtin_tools(self):
        registry = load_tools(None)
        assert "calculate" in registry
        assert "current_time" in registry

    def test_factory_attribute(self):
        registry = load_tools("flowlynk.tools:default_registry")
        assert isinstance(registry, ToolRegistry)
        assert len(registry) == 2

    def test_malformed_reference(self):
        with pytest.raises(ValueError, match="module:attribute"):
            load_tools("flowlynk.tools")

    def test_not_a_registry(self):
        with pytest.raises(TypeError):
            load_tools("flowlynk.config:config")


class TestFormatStep:
    def test_action(self):
        step = Step.action("echo", {"text": "hi"})
        assert format_step(step) == '[action] echo({"text": "hi"})'

    def test_long_content_truncated(self):
        line = format_step(Step.output("x" * 300))
        assert line == "[output] " + "x" * 200 + "..."


class TestInteractiveCLI:
    def test_session(self, capsys, echo_registry):
        agent = _agent([step_json("output", "done")], registry=echo_registry)
        cli = InteractiveCLI(agent)

        with patch("builtins.input", side_effect=["/tools", "hi", "/trace", "/quit"]):
            asyncio.run(cli.run())

        out = capsys.readouterr().out
        assert "- echo: Echo the input back" in out
        assert "done" in out
        assert "STEP TRACE" in out
        assert "Goodbye!" in out

    def test_reset_command(self, capsys):
        agent = _agent([step_json("output", "done")])
        cli = InteractiveCLI(agent)

        with patch("builtins.input", side_effect=["hi", "/reset", EOFError]):
            asyncio.run(cli.run())

        assert agent.message_logs() == []
        assert "Conversation cleared." in capsys.readouterr().out

    def test_verbose_echoes_steps(self, capsys):
        cli = InteractiveCLI(_agent([step_json("output", "done")]), verbose=True)

        with patch("builtins.input", side_effect=["hi", EOFError]):
            asyncio.run(cli.run())

        assert "[output] done" in capsys.readouterr().out


class TestMain:
    @patch("flowlynk.interactive.create_agent")
    def test_single_query(self, mock_create_agent, capsys):
        mock_create_agent.return_value = _agent([step_json("output", "42")])

        exit_code = main(["-q", "What is the answer?"])

        assert exit_code == 0
        assert capsys.readouterr().out.strip() == "42"

    @patch("flowlynk.interactive.create_agent")
    def test_json_output(self, mock_create_agent, capsys):
        mock_create_agent.return_value = _agent([step_json("output", "42")])

        main(["-q", "What is the answer?", "--json"])

        data = json.loads(capsys.readouterr().out)
        assert data["result"] == "42"
        assert data["trace"][0]["step"] == "output"

    @patch("flowlynk.interactive.create_agent")
    def test_failed_run_exit_code(self, mock_create_agent, capsys):
        mock_create_agent.return_value = _agent(["not json"])

        assert main(["-q", "hi"]) == 1
        assert "JSON parsing error" in capsys.readouterr().out

    @patch("flowlynk.interactive.create_agent")
    def test_model_and_base_url_passed(self, mock_create_agent):
        mock_create_agent.return_value = _agent([step_json("output", "ok")])

        main(["-q", "hi", "--model", "m", "--base-url", "http://localhost:8001/v1"])

        kwargs = mock_create_agent.call_args.kwargs
        assert kwargs["model"] == "m"
        assert kwargs["base_url"] == "http://localhost:8001/v1"
