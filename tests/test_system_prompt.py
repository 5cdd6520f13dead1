"""Tests for system prompt construction."""

from flowlynk.models import AgentProfile, CustomStep, Example
from flowlynk.prompts import build_system_prompt
from flowlynk.tools import ToolRegistry


def _registry() -> ToolRegistry:
    registry = ToolRegistry()
    registry.register_function(
        name="weather",
        description="Get the weather for a city",
        parameters={"city": "string"},
        handler=lambda p: {"temp": 20},
    )
    return registry


class TestBuildSystemPrompt:
    def test_defaults(self):
        prompt = build_system_prompt()

        assert '"step": "initialization"' in prompt
        assert '"step": "demand"' in prompt
        assert "## AVAILABLE TOOLS\nNone" in prompt
        assert "custom-named steps" in prompt
        assert "REFERENCE EXAMPLES" not in prompt
        assert "ADDITIONAL USER INSTRUCTIONS" not in prompt

    def test_response_format_documents_status(self):
        prompt = build_system_prompt()

        assert '"status": false' in prompt
        assert 'required as false on "error" steps' in prompt

    def test_tools_listed(self):
        prompt = build_system_prompt(_registry())

        assert "- weather: Get the weather for a city" in prompt
        assert "city: string" in prompt

    def test_custom_steps(self):
        profile = AgentProfile(steps=[CustomStep(name="research", purpose="Collect facts")])
        prompt = build_system_prompt(profile=profile)

        assert '"research": Collect facts' in prompt
        assert "custom-named steps" not in prompt

    def test_user_instructions(self):
        prompt = build_system_prompt(profile=AgentProfile(user_system_prompt="Answer in French."))
        assert "ADDITIONAL USER INSTRUCTIONS" in prompt
        assert "Answer in French." in prompt

    def test_examples(self):
        profile = AgentProfile(
            examples=[
                Example(
                    user_query="What is 2 + 2?",
                    output=[{"step": "output", "content": "4"}],
                )
            ]
        )
        prompt = build_system_prompt(profile=profile)

        assert "## REFERENCE EXAMPLES" in prompt
        assert "User Query: What is 2 + 2?" in prompt
        assert 'Output: {"step": "output", "content": "4"}' in prompt
